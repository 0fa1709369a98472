"""
Thin synchronous client for the Weaviate REST and GraphQL endpoints.

Each method issues exactly one HTTP request and returns a WeaviateResult.
Server-side rejections do not raise: they are returned as a structured
error list so that every task decides how to surface them. Transport
failures (unreachable host, timeout, TLS) raise WeaviateConnectionError.

Endpoints used:
    POST   /v1/batch/objects            batch insert
    DELETE /v1/batch/objects            batch delete by where-filter
    DELETE /v1/objects/{class}/{id}     delete one object
    POST   /v1/graphql                  raw GraphQL query
    POST   /v1/schema                   class creation

Example:
    >>> config = ConnectionConfig(scheme="http", host="localhost:8080")
    >>> with WeaviateClient(config) as client:
    ...     result = client.graphql("{ Get { Movies { title } } }")
    ...     if result.has_errors:
    ...         print(result.error_messages)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from weavesync.core.config.settings import settings
from weavesync.core.exceptions.custom_exceptions import WeaviateConnectionError
from weavesync.core.logging.logger import get_logger
from weavesync.weaviate.models import (
    WeaviateClassDefinition,
    WeaviateObject,
    WhereFilter,
)

logger = get_logger(__name__)

API_PREFIX = "/v1"


@dataclass
class ConnectionConfig:
    """Where and how to reach a Weaviate instance"""

    scheme: str
    host: str
    api_key: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = field(default_factory=lambda: settings.HTTP_TIMEOUT)

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}{API_PREFIX}"

    def request_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", **self.headers}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


@dataclass
class WeaviateResult:
    """
    Outcome of one request.

    Attributes:
        status_code: HTTP status of the response
        result: Decoded JSON body on success, None otherwise
        error_messages: Server-reported error messages, empty on success
    """

    status_code: int
    result: Any = None
    error_messages: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.error_messages)


def extract_error_messages(payload: Any) -> List[str]:
    """
    Pull error messages out of a Weaviate error body.

    Weaviate reports errors as ``{"error": [{"message": ...}, ...]}``;
    some endpoints use ``{"message": ...}`` or a plain string instead.
    """
    if isinstance(payload, dict):
        if "error" in payload:
            return extract_error_messages(payload["error"])
        if "errors" in payload:
            return extract_error_messages(payload["errors"])
        if "message" in payload:
            return [str(payload["message"])]
        return []
    if isinstance(payload, list):
        messages: List[str] = []
        for item in payload:
            messages.extend(extract_error_messages(item))
        return messages
    if payload:
        return [str(payload)]
    return []


class WeaviateClient:
    """
    Stateless handle on one Weaviate instance.

    Use as a context manager so the underlying connection is released on
    every exit path.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self._http = httpx.Client(
            base_url=config.base_url,
            headers=config.request_headers(),
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    def _request(self, method: str, path: str, json_body: Any = None) -> WeaviateResult:
        try:
            response = self._http.request(method, path, json=json_body)
        except httpx.RequestError as e:
            raise WeaviateConnectionError(
                f"Request to {self.config.base_url}{path} failed: {e}",
                error_code="WEAVIATE_CONNECTION_ERROR",
                details={"host": self.config.host, "path": path},
            ) from e

        logger.debug("Weaviate response", method=method, path=path, status=response.status_code)

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if response.is_error:
            messages = extract_error_messages(body) or [
                f"HTTP {response.status_code} {response.reason_phrase}".strip()
            ]
            return WeaviateResult(status_code=response.status_code, error_messages=messages)

        return WeaviateResult(status_code=response.status_code, result=body)

    def batch_objects(self, objects: List[WeaviateObject]) -> WeaviateResult:
        """Insert objects in one batch request"""
        return self._request(
            "POST", "/batch/objects", {"objects": [obj.to_dict() for obj in objects]}
        )

    def delete_object(self, class_name: str, object_id: str) -> WeaviateResult:
        """Delete one object; a 404 is returned as an error result"""
        path = f"/objects/{quote(class_name, safe='')}/{quote(object_id, safe='')}"
        return self._request("DELETE", path)

    def batch_delete(
        self, class_name: str, where: WhereFilter, verbose: bool = True
    ) -> WeaviateResult:
        """Delete every object of a class matching a where-filter"""
        body = {
            "match": {"class": class_name, "where": where.to_dict()},
            "output": "verbose" if verbose else "minimal",
            "dryRun": False,
        }
        return self._request("DELETE", "/batch/objects", body)

    def graphql(self, query: str) -> WeaviateResult:
        """Send a raw GraphQL query; document errors stay inside ``result``"""
        return self._request("POST", "/graphql", {"query": query})

    def create_class(self, definition: WeaviateClassDefinition) -> WeaviateResult:
        return self._request("POST", "/schema", definition.to_dict())

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "WeaviateClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
