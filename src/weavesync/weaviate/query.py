"""
Query task: run a GraphQL query against Weaviate.

The response envelope ``{"Get": {"Movies": [row, ...], ...}, ...}`` is
flattened into ``(class_name, row)`` pairs across every verb and class, so
``size`` always counts rows, never classes.

Fetch types:
    FETCH_ONE  output the first row
    FETCH      output all rows
    STORE      store all rows in a row-stream file and output its URI (default)
    NONE       run the query and output nothing

Example definition:
    id: search
    type: weavesync.weaviate.Query
    url: localhost:8080
    fetchType: FETCH
    query: |
      {
        Get {
          Movies(limit: 50) {
            title
            _additional { id }
          }
        }
      }
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from pydantic import field_validator

from weavesync.core.exceptions.custom_exceptions import (
    ConfigurationError,
    QueryError,
    WeaviateRequestError,
)
from weavesync.runtime.context import RunContext
from weavesync.serializers import rowstream
from weavesync.tasks.base import TaskFactory, TaskOutput
from weavesync.weaviate.client import WeaviateResult, extract_error_messages
from weavesync.weaviate.connection import WeaviateConnection
from weavesync.weaviate.models import FetchType


class QueryRow(NamedTuple):
    class_name: str
    row: Dict[str, Any]


@dataclass
class QueryOutput(TaskOutput):
    """
    Attributes:
        size: Number of rows fetched
        row: First row (FETCH_ONE)
        class_name: Class of the first row (FETCH_ONE)
        rows: Every row (FETCH)
        uri: Row-stream file holding every row (STORE)
    """

    size: int = 0
    row: Optional[Dict[str, Any]] = None
    class_name: Optional[str] = None
    rows: Optional[List[Dict[str, Any]]] = None
    uri: Optional[str] = None


def extract_rows(data: Optional[Dict[str, Any]]) -> Iterator[QueryRow]:
    """
    Flatten a GraphQL ``data`` envelope into (class name, row) pairs.

    Verbs and classes are visited in response order; a ``null`` class entry
    yields nothing.
    """
    for classes in (data or {}).values():
        if not isinstance(classes, dict):
            continue
        for class_name, rows in classes.items():
            for row in rows or []:
                yield QueryRow(class_name, row)


def raise_for_errors(result: WeaviateResult) -> None:
    """
    Check both error channels of a GraphQL response.

    The transport channel (HTTP error) wins over the document channel
    (``errors`` in a 200 body) when both carry messages.
    """
    if result.has_errors:
        raise WeaviateRequestError.from_messages(
            result.error_messages, status_code=result.status_code
        )

    body = result.result if isinstance(result.result, dict) else {}
    document_errors = extract_error_messages(body.get("errors"))
    if document_errors:
        raise QueryError.from_messages(
            document_errors, status_code=result.status_code, error_code="GRAPHQL_ERROR"
        )


class Query(WeaviateConnection):
    """GraphQL query request to a Weaviate database"""

    query: str
    fetch_type: FetchType = FetchType.STORE

    @field_validator("query")
    @classmethod
    def validate_query_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("query must not be blank")
        return v

    @field_validator("fetch_type", mode="before")
    @classmethod
    def normalize_fetch_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def run(self, run_context: RunContext) -> QueryOutput:
        query = run_context.render(self.query)
        if not query.strip():
            raise ConfigurationError("query rendered to an empty string", error_code="CONFIG_EMPTY_QUERY")

        with self.connect(run_context) as client:
            result = client.graphql(query)
        raise_for_errors(result)

        data = result.result.get("data") if isinstance(result.result, dict) else None
        pairs = extract_rows(data)

        if self.fetch_type == FetchType.FETCH_ONE:
            first = next(pairs, None)
            output = QueryOutput(size=0)
            if first is not None:
                output = QueryOutput(size=1, row=first.row, class_name=first.class_name)
        elif self.fetch_type == FetchType.FETCH:
            rows = [pair.row for pair in pairs]
            output = QueryOutput(size=len(rows), rows=rows)
        elif self.fetch_type == FetchType.STORE:
            temp_file = run_context.temp_file(rowstream.FILE_SUFFIX)
            size = rowstream.write_file(temp_file, (pair.row for pair in pairs))
            output = QueryOutput(size=size, uri=run_context.put_temp_file(temp_file))
        else:
            output = QueryOutput(size=0)

        self.logger.info("Query executed", fetch_type=self.fetch_type.value, size=output.size)
        return output


TaskFactory.register("weavesync.weaviate.Query", Query)
