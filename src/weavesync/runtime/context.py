"""
Per-invocation run context handed to every task.

The run context is the task's only view of its host. It provides:
    - Template rendering of task options against the calling context
      (Jinja2, strict about undefined variables)
    - Temp files scoped to the invocation, removed on close
    - Internal storage for files a task hands back to its host
    - Resolution of input URIs (``storage://``, ``file://`` or plain paths)

Example:
    >>> with RunContext({"vars": {"cls": "Movies"}}, task_id="create") as ctx:
    ...     ctx.render("{{ vars.cls }}")
    'Movies'
"""

import shutil
import tempfile
import uuid
from pathlib import Path
from typing import IO, Any, Dict, Optional
from urllib.parse import unquote, urlparse

from jinja2 import Environment, StrictUndefined, TemplateError, UndefinedError

from weavesync.core.config.settings import settings
from weavesync.core.exceptions.custom_exceptions import ConfigurationError, StorageError
from weavesync.core.logging.logger import get_logger
from weavesync.runtime.storage import STORAGE_SCHEME, LocalStorage

logger = get_logger(__name__)


class RunContext:
    """
    Rendering and storage facade for a single task invocation.

    Args:
        variables: Names available to templates (e.g. ``outputs``, ``vars``)
        storage: Internal storage, defaults to a LocalStorage on STORAGE_DIR
        task_id: Id of the task being run, used in storage keys
        execution_id: Id grouping the files of one invocation
    """

    def __init__(
        self,
        variables: Optional[Dict[str, Any]] = None,
        storage: Optional[LocalStorage] = None,
        task_id: str = "task",
        execution_id: Optional[str] = None,
    ):
        self.variables = dict(variables or {})
        self.storage = storage or LocalStorage()
        self.task_id = task_id
        self.execution_id = execution_id or uuid.uuid4().hex
        self._env = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self._temp_dir: Optional[Path] = None

    def render(self, value: Any) -> Any:
        """
        Render a value against the context variables.

        Strings are rendered as templates; lists and dicts are rendered
        recursively (keys included); any other value is returned unchanged.
        """
        if isinstance(value, str):
            return self.render_string(value)
        if isinstance(value, dict):
            return {self.render(k): self.render(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.render(item) for item in value]
        return value

    def render_string(self, template: str) -> str:
        if "{{" not in template and "{%" not in template:
            return template
        try:
            return self._env.from_string(template).render(**self.variables)
        except UndefinedError as e:
            raise ConfigurationError(
                f"Undefined template variable: {e.message}",
                error_code="CONFIG_UNDEFINED_VARIABLE",
                details={"template": template},
            ) from e
        except TemplateError as e:
            raise ConfigurationError(
                f"Invalid template: {e}",
                error_code="CONFIG_INVALID_TEMPLATE",
                details={"template": template},
            ) from e

    def temp_file(self, suffix: str = "") -> Path:
        """Allocate a new, empty temp file owned by this invocation"""
        if self._temp_dir is None:
            if settings.TEMP_DIR:
                Path(settings.TEMP_DIR).mkdir(parents=True, exist_ok=True)
            self._temp_dir = Path(
                tempfile.mkdtemp(prefix="weavesync-", dir=settings.TEMP_DIR)
            )
        path = self._temp_dir / f"{uuid.uuid4().hex}{suffix}"
        path.touch()
        return path

    def put_temp_file(self, path: Path) -> str:
        """Move a temp file into internal storage and return its URI"""
        key = f"{self.execution_id}/{self.task_id}/{path.name}"
        return self.storage.put(key, path)

    def open_uri(self, uri: str) -> IO[str]:
        """
        Open an input URI for text reading.

        Supported forms:
            storage:///<key>   internal storage
            file:///abs/path   local file
            relative/or/abs    local path without scheme
        """
        parsed = urlparse(uri)
        if parsed.scheme == STORAGE_SCHEME:
            return self.storage.open(uri)

        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        elif parsed.scheme == "" or len(parsed.scheme) == 1:
            # Bare path, or a Windows drive letter parsed as a scheme
            path = Path(uri)
        else:
            raise StorageError(
                f"Unsupported URI scheme '{parsed.scheme}': {uri}",
                error_code="STORAGE_UNSUPPORTED_SCHEME",
                details={"uri": uri},
            )

        if not path.is_file():
            raise StorageError(
                f"File not found: {uri}",
                error_code="STORAGE_NOT_FOUND",
                details={"uri": uri},
            )
        return open(path, "r", encoding="utf-8")

    def close(self) -> None:
        """Remove every temp file allocated by this invocation"""
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            logger.debug("Removed temp directory", path=str(self._temp_dir))
            self._temp_dir = None

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
