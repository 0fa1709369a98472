"""
Local internal storage addressed by ``storage://`` URIs.

Tasks never hand file paths to their host: files produced by a task are
moved into the internal storage and referenced by a URI such as
``storage:///<execution>/<task>/rows.jsonl``. The same URI can later be
passed to another task (for example as the ``objects`` option of
BatchCreate), which resolves it back through this module.
"""

import shutil
from pathlib import Path
from typing import IO, Optional, Union
from urllib.parse import unquote, urlparse

from weavesync.core.config.settings import settings
from weavesync.core.exceptions.custom_exceptions import StorageError
from weavesync.core.logging.logger import get_logger

STORAGE_SCHEME = "storage"

logger = get_logger(__name__)


class LocalStorage:
    """Filesystem-backed internal storage rooted at a single directory"""

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root) if root is not None else settings.storage_path
        self.root = self.root.resolve()

    def uri_for(self, key: str) -> str:
        return f"{STORAGE_SCHEME}:///{key.lstrip('/')}"

    def resolve(self, uri: str) -> Path:
        """Map a ``storage://`` URI to a path under the storage root"""
        parsed = urlparse(uri)
        if parsed.scheme != STORAGE_SCHEME:
            raise StorageError(
                f"Not an internal storage URI: {uri}",
                error_code="STORAGE_INVALID_URI",
                details={"uri": uri},
            )

        key = unquote((parsed.netloc + parsed.path).lstrip("/"))
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise StorageError(
                f"URI escapes the storage root: {uri}",
                error_code="STORAGE_INVALID_URI",
                details={"uri": uri},
            )
        return path

    def put(self, key: str, source: Union[str, Path]) -> str:
        """
        Move a local file into storage under ``key``.

        Returns:
            str: The ``storage://`` URI of the stored file
        """
        uri = self.uri_for(key)
        target = self.resolve(uri)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
        logger.debug("Stored file", uri=uri, size_bytes=target.stat().st_size)
        return uri

    def exists(self, uri: str) -> bool:
        return self.resolve(uri).is_file()

    def open(self, uri: str) -> IO[str]:
        """Open a stored file for text reading"""
        path = self.resolve(uri)
        if not path.is_file():
            raise StorageError(
                f"File not found in storage: {uri}",
                error_code="STORAGE_NOT_FOUND",
                details={"uri": uri},
            )
        return open(path, "r", encoding="utf-8")
