"""
Unit tests for the BatchCreate task
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import httpx
import pytest
import yaml
from pydantic import ValidationError

from weavesync.core.exceptions.custom_exceptions import (
    ConfigurationError,
    StorageError,
    WeaviateRequestError,
)
from weavesync.serializers import rowstream
from weavesync.weaviate.batch_create import BatchCreate
from weavesync.weaviate.models import InlineObjects, StoredObjects


class TestBatchCreateOptions:
    """Test option parsing"""

    def test_list_becomes_inline_objects(self, sample_movies):
        task = BatchCreate(url="localhost:8080", className="Movies", objects=sample_movies)
        assert isinstance(task.objects, InlineObjects)
        assert task.objects.items == sample_movies

    def test_string_becomes_stored_objects(self):
        task = BatchCreate(url="localhost:8080", className="Movies", objects="storage:///a/b.jsonl")
        assert isinstance(task.objects, StoredObjects)
        assert task.objects.uri == "storage:///a/b.jsonl"

    def test_invalid_objects_rejected(self):
        with pytest.raises(ValidationError):
            BatchCreate(url="localhost:8080", className="Movies", objects=42)

    def test_unknown_option_rejected(self, sample_movies):
        with pytest.raises(ValidationError):
            BatchCreate(
                url="localhost:8080", className="Movies", objects=sample_movies, batchSize=10
            )


class TestBatchCreateRun:
    """Test running BatchCreate against the fake server"""

    def test_inserts_objects_with_fresh_ids(self, fake_weaviate, run_context, sample_movies):
        task = BatchCreate(
            url="http://localhost:8080", className="{{ vars.cls }}", objects=sample_movies
        )

        output = task.run(run_context)

        assert output.created_count == 3
        sent = fake_weaviate.last_body()["objects"]
        assert [obj["class"] for obj in sent] == ["Movies"] * 3
        assert [obj["properties"] for obj in sent] == sample_movies
        ids = [obj["id"] for obj in sent]
        assert len(set(ids)) == 3
        for object_id in ids:
            uuid.UUID(object_id)
        assert len(fake_weaviate.requests) == 1

    def test_stores_created_properties(self, fake_weaviate, run_context, storage, sample_movies):
        task = BatchCreate(url="localhost:8080", className="Movies", objects=sample_movies)

        output = task.run(run_context)

        assert output.uri.startswith("storage:///exec/test/")
        assert output.uri.endswith(rowstream.FILE_SUFFIX)
        with storage.open(output.uri) as stream:
            assert list(rowstream.read_rows(stream)) == sample_movies

    def test_store_disabled(self, fake_weaviate, run_context, sample_movies):
        task = BatchCreate(
            url="localhost:8080", className="Movies", objects=sample_movies, store=False
        )

        output = task.run(run_context)

        assert output.uri is None
        assert output.to_dict() == {"createdCount": 3}

    def test_inline_items_are_rendered(self, fake_weaviate, run_context):
        task = BatchCreate(
            url="localhost:8080",
            className="Movies",
            objects=[{"title": "{{ vars.cls }} night", "year": 2001}],
        )

        task.run(run_context)

        assert fake_weaviate.last_body()["objects"][0]["properties"] == {
            "title": "Movies night",
            "year": 2001,
        }

    def test_reads_objects_from_uri(self, fake_weaviate, run_context, storage, sample_movies, tmp_path):
        source = tmp_path / "movies.jsonl"
        rowstream.write_file(source, sample_movies)
        uri = storage.put("inputs/movies.jsonl", source)

        task = BatchCreate(url="localhost:8080", className="Movies", objects=uri, store=False)
        output = task.run(run_context)

        assert output.created_count == 3
        assert [obj["properties"] for obj in fake_weaviate.last_body()["objects"]] == sample_movies

    def test_reads_objects_from_local_path(self, fake_weaviate, run_context, tmp_path):
        source = tmp_path / "one.jsonl"
        rowstream.write_file(source, [{"title": "Alien"}])

        task = BatchCreate(url="localhost:8080", className="Movies", objects=str(source))
        assert task.run(run_context).created_count == 1

    def test_missing_uri_fails(self, fake_weaviate, run_context):
        task = BatchCreate(url="localhost:8080", className="Movies", objects="storage:///nope.jsonl")

        with pytest.raises(StorageError):
            task.run(run_context)
        assert fake_weaviate.requests == []

    def test_per_object_errors_fail_the_call(self, fake_weaviate, run_context):
        task = BatchCreate(
            url="localhost:8080",
            className="Movies",
            objects=[{"title": "ok"}, {"_bad": 1}, {"_worse": 2}],
        )

        with pytest.raises(WeaviateRequestError) as exc_info:
            task.run(run_context)

        assert len(exc_info.value.messages) == 2
        assert ", " in exc_info.value.message

    def test_request_error_fails_the_call(self, fake_weaviate, run_context, sample_movies):
        fake_weaviate.next_response = httpx.Response(
            401, json={"error": [{"message": "anonymous access not enabled"}]}
        )
        task = BatchCreate(url="localhost:8080", className="Movies", objects=sample_movies)

        with pytest.raises(WeaviateRequestError) as exc_info:
            task.run(run_context)

        assert exc_info.value.message == "anonymous access not enabled"
        assert exc_info.value.status_code == 401

    def test_blank_class_name_fails_before_request(self, fake_weaviate, run_context):
        task = BatchCreate(url="localhost:8080", className="  ", objects=[{"a": 1}])

        with pytest.raises(ConfigurationError):
            task.run(run_context)
        assert fake_weaviate.requests == []

    def test_typed_values_from_stored_rows_are_sent_as_json(
        self, fake_weaviate, run_context, storage, tmp_path
    ):
        source = tmp_path / "typed.jsonl"
        rowstream.write_file(
            source,
            [
                {
                    "title": "Heat",
                    "released": datetime(1995, 12, 15, tzinfo=timezone.utc),
                    "budget": Decimal("60000000.50"),
                    "ref": UUID("6c0f3e4a-8a3b-4a2e-9a51-1b8c1f4f3c11"),
                    "poster": b"\x89PNG",
                }
            ],
        )
        uri = storage.put("inputs/typed.jsonl", source)

        task = BatchCreate(url="localhost:8080", className="Movies", objects=uri, store=False)
        output = task.run(run_context)

        assert output.created_count == 1
        assert fake_weaviate.last_body()["objects"][0]["properties"] == {
            "title": "Heat",
            "released": "1995-12-15T00:00:00+00:00",
            "budget": 60000000.5,
            "ref": "6c0f3e4a-8a3b-4a2e-9a51-1b8c1f4f3c11",
            "poster": "iVBORw==",
        }

    def test_inline_yaml_date_is_sent_as_rfc3339(self, fake_weaviate, run_context):
        definition = yaml.safe_load(
            "className: Movies\n"
            "objects:\n"
            "  - title: Heat\n"
            "    released: 1995-12-15\n"
        )
        task = BatchCreate(url="localhost:8080", **definition)

        task.run(run_context)

        assert fake_weaviate.last_body()["objects"][0]["properties"] == {
            "title": "Heat",
            "released": "1995-12-15T00:00:00+00:00",
        }
