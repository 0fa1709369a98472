"""
BatchCreate task: insert objects into a Weaviate class in one request.

Objects are given either inline as a list of property maps or as the URI of
a row-stream file produced by another task. Every object gets a fresh UUID.
Weaviate creates the class on the fly (auto-schema) when it does not exist.

Example definition:
    id: insert
    type: weavesync.weaviate.BatchCreate
    url: localhost:8080
    apiKey: "{{ vars.api_key }}"
    className: Movies
    objects:
      - title: The Godfather
        year: 1972
      - title: Heat
        year: 1995
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from pydantic import field_validator

from weavesync.core.exceptions.custom_exceptions import (
    ConfigurationError,
    WeaviateRequestError,
)
from weavesync.runtime.context import RunContext
from weavesync.serializers import rowstream
from weavesync.tasks.base import TaskFactory, TaskOutput
from weavesync.weaviate.client import extract_error_messages
from weavesync.weaviate.connection import WeaviateConnection
from weavesync.weaviate.models import (
    InlineObjects,
    ObjectsSource,
    StoredObjects,
    WeaviateObject,
    to_objects_source,
)


@dataclass
class BatchCreateOutput(TaskOutput):
    """
    Attributes:
        created_count: Number of objects created
        uri: Row-stream file with the properties of each created object,
            only when ``store`` is enabled
    """

    created_count: int = 0
    uri: Optional[str] = None


class BatchCreate(WeaviateConnection):
    """Batch insert objects into a Weaviate class"""

    class_name: str
    objects: ObjectsSource
    store: bool = True

    @field_validator("objects", mode="before")
    @classmethod
    def validate_objects(cls, v: Any) -> Any:
        return to_objects_source(v)

    def run(self, run_context: RunContext) -> BatchCreateOutput:
        class_name = run_context.render(self.class_name)
        if not class_name or not class_name.strip():
            raise ConfigurationError("className must not be blank", error_code="CONFIG_MISSING_CLASS")

        objects = [
            WeaviateObject(class_name=class_name, properties=properties)
            for properties in self._properties(run_context)
        ]
        self.logger.info("Submitting batch", class_name=class_name, count=len(objects))

        with self.connect(run_context) as client:
            result = client.batch_objects(objects)

        responses: List[Dict[str, Any]] = result.result or []
        messages = list(result.error_messages)
        for response in responses:
            messages.extend(
                extract_error_messages((response.get("result") or {}).get("errors"))
            )
        if messages:
            self.logger.error("Batch rejected", class_name=class_name, errors=len(messages))
            raise WeaviateRequestError.from_messages(
                messages, status_code=result.status_code, class_name=class_name
            )

        output = BatchCreateOutput(created_count=len(responses))
        if self.store:
            output.uri = self._store(responses, run_context)

        self.logger.info("Batch created", class_name=class_name, created_count=output.created_count)
        return output

    def _properties(self, run_context: RunContext) -> Iterator[Dict[str, Any]]:
        source = self.objects
        if isinstance(source, InlineObjects):
            for item in source.items:
                yield run_context.render(item)
        elif isinstance(source, StoredObjects):
            uri = run_context.render(source.uri)
            with run_context.open_uri(uri) as stream:
                yield from rowstream.read_rows(stream)

    def _store(self, responses: List[Dict[str, Any]], run_context: RunContext) -> str:
        temp_file = run_context.temp_file(rowstream.FILE_SUFFIX)
        rowstream.write_file(
            temp_file, (response.get("properties") or {} for response in responses)
        )
        return run_context.put_temp_file(temp_file)


TaskFactory.register("weavesync.weaviate.BatchCreate", BatchCreate)
