"""
Delete task: remove objects from a Weaviate class.

Selection, in order of precedence:
    objectId    delete that single object
    filter      delete every object matching all fields (AND)
    deleteAll   delete every object of the class; must be set explicitly

Without any of them the task fails with DeleteCriteriaError and nothing is
sent to the server.

Example definition:
    id: delete
    type: weavesync.weaviate.Delete
    url: https://demo-cluster-id.weaviate.network
    className: Movies
    # safest: delete a single known object
    objectId: "{{ outputs.lookup.row._additional.id }}"
    # alternative: delete by AND filter on fields
    # filter:
    #   status: archived
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import model_validator

from weavesync.core.exceptions.custom_exceptions import (
    ConfigurationError,
    DeleteCriteriaError,
    WeaviateRequestError,
)
from weavesync.runtime.context import RunContext
from weavesync.tasks.base import TaskFactory, TaskOutput
from weavesync.weaviate.client import WeaviateClient, extract_error_messages
from weavesync.weaviate.connection import WeaviateConnection
from weavesync.weaviate.filters import build_filter, match_all_filter
from weavesync.weaviate.models import WhereFilter


@dataclass
class DeleteOutput(TaskOutput):
    """
    Attributes:
        class_name: Class the objects were deleted from
        success: Whether the delete succeeded
        deleted_count: Number of deleted objects
        ids: Ids of the deleted objects
    """

    class_name: str = ""
    success: bool = False
    deleted_count: int = 0
    ids: List[str] = field(default_factory=list)


class Delete(WeaviateConnection):
    """Delete objects from a Weaviate class by id, by filter, or all of them"""

    class_name: str
    object_id: Optional[str] = None
    filter: Optional[Dict[str, Any]] = None
    delete_all: bool = False

    @model_validator(mode="after")
    def validate_criteria(self) -> "Delete":
        if self.object_id is not None and self.filter is not None:
            raise ValueError("objectId and filter are mutually exclusive")
        if self.delete_all and (self.object_id is not None or self.filter is not None):
            raise ValueError("deleteAll cannot be combined with objectId or filter")
        if self.filter is not None and not self.filter:
            raise ValueError("filter must contain at least one field")
        return self

    def run(self, run_context: RunContext) -> DeleteOutput:
        class_name = run_context.render(self.class_name)
        if not class_name or not class_name.strip():
            raise ConfigurationError("className must not be blank", error_code="CONFIG_MISSING_CLASS")

        if self.object_id is not None:
            object_id = run_context.render(self.object_id)
            with self.connect(run_context) as client:
                return self._delete_by_id(client, class_name, object_id)

        where = self._where(run_context, class_name)
        with self.connect(run_context) as client:
            return self._delete_by_filter(client, class_name, where)

    def _where(self, run_context: RunContext, class_name: str) -> WhereFilter:
        if self.filter is not None:
            return build_filter(run_context.render(self.filter))
        if self.delete_all:
            self.logger.warning(
                "Deleting every object of the class", class_name=class_name
            )
            return match_all_filter()
        raise DeleteCriteriaError(
            "no criteria specified: set objectId, filter or deleteAll",
            error_code="DELETE_NO_CRITERIA",
            details={"class_name": class_name},
        )

    def _delete_by_id(
        self, client: WeaviateClient, class_name: str, object_id: str
    ) -> DeleteOutput:
        result = client.delete_object(class_name, object_id)

        if result.status_code == 404:
            self.logger.info("Object not found", class_name=class_name, object_id=object_id)
            return DeleteOutput(class_name=class_name, success=False, deleted_count=0, ids=[])
        if result.has_errors:
            raise WeaviateRequestError.from_messages(
                result.error_messages, status_code=result.status_code, class_name=class_name
            )

        self.logger.info("Object deleted", class_name=class_name, object_id=object_id)
        return DeleteOutput(class_name=class_name, success=True, deleted_count=1, ids=[object_id])

    def _delete_by_filter(
        self, client: WeaviateClient, class_name: str, where: WhereFilter
    ) -> DeleteOutput:
        result = client.batch_delete(class_name, where, verbose=True)
        if result.has_errors:
            raise WeaviateRequestError.from_messages(
                result.error_messages, status_code=result.status_code, class_name=class_name
            )

        results = (result.result or {}).get("results") or {}
        objects = results.get("objects") or []

        failures: List[str] = []
        for obj in objects:
            if obj.get("status") == "FAILED":
                failures.extend(extract_error_messages(obj.get("errors")) or [
                    f"failed to delete object {obj.get('id')}"
                ])
        if failures:
            raise WeaviateRequestError.from_messages(
                failures, status_code=result.status_code, class_name=class_name
            )

        ids = [obj["id"] for obj in objects if obj.get("id") and obj.get("status") != "FAILED"]
        deleted_count = int(results.get("successful", len(ids)))
        if deleted_count != len(ids):
            # Verbose output is capped by the server's result limit
            self.logger.warning(
                "Deleted ids truncated by server", deleted_count=deleted_count, ids=len(ids)
            )

        self.logger.info("Objects deleted", class_name=class_name, deleted_count=deleted_count)
        return DeleteOutput(
            class_name=class_name, success=True, deleted_count=deleted_count, ids=ids
        )


TaskFactory.register("weavesync.weaviate.Delete", Delete)
