"""
Task definition loading and validation for WeaveSync.

A task definition is a YAML or JSON mapping with an ``id``, a ``type`` and
the task's own options. This module loads definition files, validates
the envelope with Pydantic, and generates starter definitions for each
task type.

Example Usage:
    >>> definition = DefinitionValidator.validate_file("insert.yaml")
    >>> task = TaskFactory.create(definition.to_task_config())

Example definition (YAML):
    id: insert
    type: weavesync.weaviate.BatchCreate
    url: localhost:8080
    className: Movies
    objects:
      - title: Heat
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from weavesync.core.exceptions.custom_exceptions import ConfigurationError

TASK_ID_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]*$")


class TaskDefinition(BaseModel):
    """Envelope of a task definition; task options are kept as extra fields"""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not TASK_ID_PATTERN.match(v):
            raise ValueError(
                "id must start with a letter or digit and contain only "
                "letters, digits, '_' or '-'"
            )
        return v

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("type must not be blank")
        return v.strip()

    def to_task_config(self) -> Dict[str, Any]:
        return self.model_dump()


class DefinitionValidator:
    """Loader and validator for task definition files"""

    @staticmethod
    def load_definition(file_path: str) -> Dict[str, Any]:
        """Load a definition from a YAML or JSON file"""
        path = Path(file_path)

        if not path.exists():
            raise ConfigurationError(f"Definition file not found: {file_path}")

        suffix = path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigurationError(f"Unsupported file format: {path.suffix}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load definition: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Definition must be a mapping, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def validate_definition(definition: Dict[str, Any]) -> TaskDefinition:
        """Validate the envelope of a task definition"""
        try:
            return TaskDefinition(**definition)
        except ValidationError as e:
            raise ConfigurationError(f"Definition validation failed: {e}") from e

    @staticmethod
    def validate_file(file_path: str) -> TaskDefinition:
        """Load and validate a definition file"""
        definition = DefinitionValidator.load_definition(file_path)
        return DefinitionValidator.validate_definition(definition)


def parse_variables(assignments: List[str]) -> Dict[str, Any]:
    """
    Parse ``key=value`` assignments into a nested variables mapping.

    Dotted keys create nested maps (``vars.cls=Movies`` ->
    ``{"vars": {"cls": "Movies"}}``). Values are parsed as YAML scalars,
    so ``count=3`` yields an int and ``flag=true`` a bool.
    """
    variables: Dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Invalid variable assignment: {assignment!r}")

        try:
            value = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            value = raw

        *parents, leaf = key.strip().split(".")
        target = variables
        for part in parents:
            target = target.setdefault(part, {})
            if not isinstance(target, dict):
                raise ConfigurationError(f"Variable {key!r} conflicts with {part!r}")
        target[leaf] = value
    return variables


class DefinitionGenerator:
    """Generate starter task definitions"""

    TEMPLATES: Dict[str, Dict[str, Any]] = {
        "weavesync.weaviate.SchemaCreate": {
            "id": "schema",
            "type": "weavesync.weaviate.SchemaCreate",
            "url": "localhost:8080",
            "className": "Movies",
            "fields": {"title": ["text"], "year": ["int"]},
        },
        "weavesync.weaviate.BatchCreate": {
            "id": "insert",
            "type": "weavesync.weaviate.BatchCreate",
            "url": "localhost:8080",
            "className": "Movies",
            "objects": [
                {"title": "The Godfather", "year": 1972},
                {"title": "Heat", "year": 1995},
            ],
        },
        "weavesync.weaviate.Query": {
            "id": "search",
            "type": "weavesync.weaviate.Query",
            "url": "localhost:8080",
            "fetchType": "FETCH",
            "query": "{\n  Get {\n    Movies(limit: 50) {\n      title\n      year\n    }\n  }\n}\n",
        },
        "weavesync.weaviate.Delete": {
            "id": "delete",
            "type": "weavesync.weaviate.Delete",
            "url": "localhost:8080",
            "className": "Movies",
            "filter": {"title": "Heat"},
        },
    }

    @classmethod
    def generate(cls, task_type: str) -> Dict[str, Any]:
        if task_type not in cls.TEMPLATES:
            raise ConfigurationError(
                f"No template for task type: {task_type}",
                details={"available": sorted(cls.TEMPLATES)},
            )
        return json.loads(json.dumps(cls.TEMPLATES[task_type]))
