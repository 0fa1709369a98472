"""
WeaveSync - Weaviate task plugins for workflow orchestration.

WeaveSync provides task plugins that call a Weaviate vector database:
batch insert, delete, GraphQL query and schema creation. Tasks render
their options against a run context, perform a single request, and hand
results back either inline or as row-stream files in internal storage.

Modules:
    core: Configuration, logging and exceptions
    runtime: Run context (template rendering, temp files, storage)
    serializers: Row-stream codec used between tasks
    tasks: Task base class and registry
    weaviate: The Weaviate task plugins
    cli: Command-line interface

Example:
    >>> from weavesync import RunContext, TaskFactory
    >>> task = TaskFactory.create({
    ...     "id": "search",
    ...     "type": "weavesync.weaviate.Query",
    ...     "url": "localhost:8080",
    ...     "query": "{ Get { Movies { title } } }",
    ...     "fetchType": "FETCH",
    ... })
    >>> with RunContext(task_id=task.id) as ctx:
    ...     print(task.run(ctx).to_dict())
"""

__version__ = "0.1.0"
__author__ = "WeaveSync"
__description__ = (
    "Task plugins for workflow orchestration that batch insert, delete, "
    "query and create schemas in a Weaviate vector database."
)

from weavesync.core.config.settings import Settings
from weavesync.core.logging.logger import get_logger
from weavesync.runtime import RunContext
from weavesync.tasks import TaskFactory
from weavesync import weaviate  # noqa: F401  registers the task types

__all__ = [
    "RunContext",
    "Settings",
    "TaskFactory",
    "get_logger",
]
