"""
Unit tests for the SchemaCreate task
"""

import pytest
from pydantic import ValidationError

from weavesync.core.exceptions.custom_exceptions import WeaviateRequestError
from weavesync.weaviate.schema_create import SchemaCreate


def test_creates_class_with_properties(fake_weaviate, run_context):
    task = SchemaCreate(
        url="localhost:8080",
        className="{{ vars.cls }}",
        fields={"title": ["text"], "year": ["int"], "tags": ["text[]"]},
    )

    output = task.run(run_context)

    assert output.to_dict() == {"success": True}
    assert fake_weaviate.last_request.url.path == "/v1/schema"
    assert fake_weaviate.last_body() == {
        "class": "Movies",
        "properties": [
            {"name": "title", "dataType": ["text"]},
            {"name": "year", "dataType": ["int"]},
            {"name": "tags", "dataType": ["text[]"]},
        ],
    }


def test_existing_class_fails(fake_weaviate, run_context):
    task = SchemaCreate(url="localhost:8080", className="Movies", fields={"title": ["text"]})
    task.run(run_context)

    with pytest.raises(WeaviateRequestError) as exc_info:
        task.run(run_context)

    assert "already exists" in exc_info.value.message
    assert exc_info.value.status_code == 422


@pytest.mark.parametrize("fields", [{}, {"title": []}])
def test_invalid_fields_rejected(fields):
    with pytest.raises(ValidationError):
        SchemaCreate(url="localhost:8080", className="Movies", fields=fields)


def test_class_name_is_required():
    with pytest.raises(ValidationError):
        SchemaCreate(url="localhost:8080", fields={"title": ["text"]})
