"""
SchemaCreate task: create a Weaviate class with the given properties.

Fails if the class already exists; data types must be valid Weaviate types
(``text``, ``int``, ``number``, ``boolean``, ``date``, ``text[]``, or a
cross-reference class name).

Example definition:
    id: schema
    type: weavesync.weaviate.SchemaCreate
    url: https://demo-cluster-id.weaviate.network
    apiKey: "{{ vars.weaviate_api_key }}"
    className: Movies
    fields:
      name:
        - text
      description:
        - text
      year:
        - int
"""

from dataclasses import dataclass
from typing import Dict, List

from pydantic import field_validator

from weavesync.core.exceptions.custom_exceptions import (
    ConfigurationError,
    WeaviateRequestError,
)
from weavesync.runtime.context import RunContext
from weavesync.tasks.base import TaskFactory, TaskOutput
from weavesync.weaviate.connection import WeaviateConnection
from weavesync.weaviate.models import PropertyDefinition, WeaviateClassDefinition


@dataclass
class SchemaCreateOutput(TaskOutput):
    success: bool = False


class SchemaCreate(WeaviateConnection):
    """Create a Weaviate class schema"""

    class_name: str
    fields: Dict[str, List[str]]

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        if not v:
            raise ValueError("fields must contain at least one property")
        for name, data_types in v.items():
            if not data_types:
                raise ValueError(f"property {name!r} needs at least one data type")
        return v

    def run(self, run_context: RunContext) -> SchemaCreateOutput:
        class_name = run_context.render(self.class_name)
        if not class_name or not class_name.strip():
            raise ConfigurationError("className must not be blank", error_code="CONFIG_MISSING_CLASS")

        rendered = run_context.render(self.fields)
        definition = WeaviateClassDefinition(
            class_name=class_name,
            properties=[
                PropertyDefinition(name=name, data_type=data_types)
                for name, data_types in rendered.items()
            ],
        )

        with self.connect(run_context) as client:
            result = client.create_class(definition)

        if result.has_errors:
            raise WeaviateRequestError.from_messages(
                result.error_messages, status_code=result.status_code, class_name=class_name
            )

        self.logger.info(
            "Class created", class_name=class_name, properties=len(definition.properties)
        )
        return SchemaCreateOutput(success=True)


TaskFactory.register("weavesync.weaviate.SchemaCreate", SchemaCreate)
