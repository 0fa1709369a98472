"""
Pytest configuration and fixtures for WeaveSync tests
"""

import fnmatch
import json
import re
from functools import partial
from typing import Any, Dict, List, Optional

import httpx
import pytest

from weavesync.core.config.settings import settings
from weavesync.runtime.context import RunContext
from weavesync.runtime.storage import LocalStorage
from weavesync.weaviate.client import WeaviateClient

GET_CLASS_PATTERN = re.compile(r"Get\s*{\s*(\w+)")
OBJECT_PATH_PATTERN = re.compile(r"^/v1/objects/(\w+)/([\w-]+)$")


class FakeWeaviate:
    """
    In-memory stand-in for a Weaviate server, served through httpx.MockTransport.

    Objects whose properties carry a key starting with ``_`` are rejected by
    the batch endpoint with a per-object error.
    """

    def __init__(self):
        self.classes: Dict[str, Dict[str, Any]] = {}
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []
        self.next_response: Optional[httpx.Response] = None
        self.graphql_response: Optional[Dict[str, Any]] = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> Any:
        return json.loads(self.last_request.content)

    def add(self, class_name: str, object_id: str, properties: Dict[str, Any]) -> None:
        self.objects.setdefault(class_name, {})[object_id] = dict(properties)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.next_response is not None:
            response, self.next_response = self.next_response, None
            return response

        path = request.url.path
        body = json.loads(request.content) if request.content else None

        if path == "/v1/batch/objects" and request.method == "POST":
            return self._batch_create(body)
        if path == "/v1/batch/objects" and request.method == "DELETE":
            return self._batch_delete(body)
        if path == "/v1/graphql":
            return self._graphql(body)
        if path == "/v1/schema":
            return self._create_class(body)

        match = OBJECT_PATH_PATTERN.match(path)
        if match and request.method == "DELETE":
            class_name, object_id = match.groups()
            if self.objects.get(class_name, {}).pop(object_id, None) is None:
                return httpx.Response(404)
            return httpx.Response(204)

        return httpx.Response(404, json={"error": [{"message": f"no route {path}"}]})

    def _batch_create(self, body: Dict[str, Any]) -> httpx.Response:
        responses = []
        for obj in body["objects"]:
            response = dict(obj, result={})
            if any(key.startswith("_") for key in obj["properties"]):
                response["result"] = {
                    "errors": {"error": [{"message": f"invalid property on {obj['id']}"}]}
                }
            else:
                self.add(obj["class"], obj["id"], obj["properties"])
            responses.append(response)
        return httpx.Response(200, json=responses)

    def _batch_delete(self, body: Dict[str, Any]) -> httpx.Response:
        class_name = body["match"]["class"]
        where = body["match"]["where"]
        stored = self.objects.get(class_name, {})
        matched = [
            object_id
            for object_id, properties in stored.items()
            if self._matches(where, object_id, properties)
        ]
        for object_id in matched:
            del stored[object_id]
        return httpx.Response(
            200,
            json={
                "match": body["match"],
                "output": body["output"],
                "dryRun": body["dryRun"],
                "results": {
                    "matches": len(matched),
                    "limit": 10000,
                    "successful": len(matched),
                    "failed": 0,
                    "objects": [{"id": object_id, "status": "SUCCESS"} for object_id in matched],
                },
            },
        )

    def _matches(self, where: Dict[str, Any], object_id: str, properties: Dict[str, Any]) -> bool:
        operator = where["operator"]
        if operator == "And":
            return all(self._matches(op, object_id, properties) for op in where["operands"])

        field_name = where["path"][0]
        actual = object_id if field_name == "id" else properties.get(field_name)
        expected = next(
            where[key]
            for key in ("valueText", "valueBoolean", "valueNumber", "valueDate")
            if key in where
        )
        if operator == "Equal":
            return actual == expected
        if operator == "NotEqual":
            return actual != expected
        if operator == "Like":
            return actual is not None and fnmatch.fnmatchcase(str(actual), expected)
        raise AssertionError(f"unsupported operator {operator}")

    def _graphql(self, body: Dict[str, Any]) -> httpx.Response:
        if self.graphql_response is not None:
            return httpx.Response(200, json=self.graphql_response)

        match = GET_CLASS_PATTERN.search(body["query"])
        if not match:
            return httpx.Response(422, json={"error": [{"message": "invalid query"}]})

        class_name = match.group(1)
        if class_name not in self.objects and class_name not in self.classes:
            return httpx.Response(
                200,
                json={
                    "data": {"Get": None},
                    "errors": [
                        {"message": f'Cannot query field "{class_name}" on type "GetObjectsObj".'}
                    ],
                },
            )

        rows = [
            dict(properties, _additional={"id": object_id})
            for object_id, properties in self.objects.get(class_name, {}).items()
        ]
        return httpx.Response(200, json={"data": {"Get": {class_name: rows}}})

    def _create_class(self, body: Dict[str, Any]) -> httpx.Response:
        class_name = body["class"]
        if class_name in self.classes:
            return httpx.Response(
                422,
                json={"error": [{"message": f"class name {class_name!r} already exists"}]},
            )
        self.classes[class_name] = body
        return httpx.Response(200, json=body)


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Point the default internal storage at a per-test directory"""
    storage_dir = tmp_path / "storage"
    monkeypatch.setattr(settings, "STORAGE_DIR", str(storage_dir))
    return storage_dir


@pytest.fixture
def fake_weaviate(monkeypatch) -> FakeWeaviate:
    """A FakeWeaviate wired into every client the tasks build"""
    fake = FakeWeaviate()
    monkeypatch.setattr(
        "weavesync.weaviate.connection.WeaviateClient",
        partial(WeaviateClient, transport=fake.transport),
    )
    return fake


@pytest.fixture
def storage(isolated_storage) -> LocalStorage:
    return LocalStorage(isolated_storage)


@pytest.fixture
def run_context(storage):
    """Run context with sample variables, cleaned up after the test"""
    context = RunContext(
        variables={
            "vars": {"cls": "Movies", "api_key": "secret-key"},
            "outputs": {"lookup": {"row": {"_additional": {"id": "obj-1"}}}},
        },
        storage=storage,
        task_id="test",
        execution_id="exec",
    )
    yield context
    context.close()


@pytest.fixture
def sample_movies() -> List[Dict[str, Any]]:
    """Sample objects for insertion"""
    return [
        {"title": "The Godfather", "year": 1972, "classic": True},
        {"title": "Heat", "year": 1995, "classic": False},
        {"title": "Heathers", "year": 1988, "classic": False},
    ]
