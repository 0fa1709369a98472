"""
Base task interface, output container and task registry.

Every task plugin follows the same lifecycle:
    1. Built from a definition (YAML/JSON mapping) and validated by pydantic
    2. Handed a RunContext by its host
    3. Renders its own options against that context
    4. Performs exactly one external call
    5. Returns a TaskOutput whose ``to_dict()`` is given back to the host

Key Components:
    - Task: Abstract base class for all task plugins
    - TaskOutput: Base dataclass for task results
    - TaskFactory: Registry mapping a task ``type`` string to its class

Example:
    >>> task = TaskFactory.create({
    ...     "id": "schema",
    ...     "type": "weavesync.weaviate.SchemaCreate",
    ...     "url": "localhost:8080",
    ...     "className": "Movies",
    ...     "fields": {"title": ["text"]},
    ... })
    >>> with RunContext(task_id=task.id) as ctx:
    ...     output = task.run(ctx)
    >>> output.to_dict()
    {'success': True}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Optional, Type

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from weavesync.core.exceptions.custom_exceptions import ConfigurationError
from weavesync.core.logging.logger import bind_task_context, get_logger
from weavesync.runtime.context import RunContext

logger = get_logger(__name__)


@dataclass
class TaskOutput:
    """
    Base container for task results.

    Subclasses declare their fields as dataclass fields in snake_case;
    ``to_dict()`` exposes them to the host in camelCase and leaves out
    fields that were not populated.
    """

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            to_camel(f.name): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


class Task(BaseModel, ABC):
    """
    Abstract base class for all task plugins.

    Options are declared as pydantic fields in snake_case and accepted in
    camelCase (``className``) or snake_case (``class_name``). Unknown
    options are rejected so that typos fail before any network call.

    Subclasses must implement :meth:`run`.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    type_name: ClassVar[str] = ""

    id: str = "task"
    type: Optional[str] = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return bind_task_context(
            get_logger(self.__class__.__module__), self.id, self.__class__.__name__
        )

    @abstractmethod
    def run(self, run_context: RunContext) -> TaskOutput:
        """
        Run the task once.

        Args:
            run_context: Rendering and storage facade for this invocation

        Returns:
            TaskOutput: The task-specific result

        Raises:
            ConfigurationError: Invalid options, raised before any network call
            WeaviateConnectionError: The endpoint could not be reached
            WeaviateRequestError: The server reported errors
        """
        pass


class TaskFactory:
    """
    Registry of available task types.

    Task modules register their classes at import time:
        >>> TaskFactory.register("weavesync.weaviate.Query", Query)

    Definitions are then turned into task instances by ``type``:
        >>> task = TaskFactory.create({"type": "weavesync.weaviate.Query", ...})
    """

    _tasks: Dict[str, Type[Task]] = {}

    @classmethod
    def register(cls, name: str, task_class: Type[Task]):
        """Register a task class under a type name (overwrites duplicates)"""
        cls._tasks[name] = task_class
        task_class.type_name = name

    @classmethod
    def get(cls, task_type: str) -> Type[Task]:
        if task_type not in cls._tasks:
            raise ConfigurationError(
                f"Unknown task type: {task_type}",
                error_code="CONFIG_UNKNOWN_TASK_TYPE",
                details={"available": cls.list_tasks()},
            )
        return cls._tasks[task_type]

    @classmethod
    def create(cls, definition: Dict[str, Any]) -> Task:
        """
        Build a task instance from a definition mapping.

        Raises:
            ConfigurationError: If the type is unknown or options are invalid
        """
        task_type = definition.get("type")
        if not task_type:
            raise ConfigurationError(
                "Task definition has no type", error_code="CONFIG_MISSING_TASK_TYPE"
            )

        task_class = cls.get(task_type)
        try:
            return task_class.model_validate(definition)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid options for task {definition.get('id', '?')} ({task_type}): {e}",
                error_code="CONFIG_INVALID_TASK",
                details={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def list_tasks(cls) -> List[str]:
        """List all registered task types"""
        return sorted(cls._tasks.keys())
