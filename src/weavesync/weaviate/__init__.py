"""
Weaviate task plugins

Importing this package registers every task type with the TaskFactory.
"""

from .batch_create import BatchCreate, BatchCreateOutput
from .client import ConnectionConfig, WeaviateClient, WeaviateResult
from .connection import WeaviateConnection
from .delete import Delete, DeleteOutput
from .models import FetchType, InlineObjects, StoredObjects, WeaviateObject
from .query import Query, QueryOutput
from .schema_create import SchemaCreate, SchemaCreateOutput

__all__ = [
    "BatchCreate",
    "BatchCreateOutput",
    "ConnectionConfig",
    "Delete",
    "DeleteOutput",
    "FetchType",
    "InlineObjects",
    "Query",
    "QueryOutput",
    "SchemaCreate",
    "SchemaCreateOutput",
    "StoredObjects",
    "WeaviateClient",
    "WeaviateConnection",
    "WeaviateObject",
    "WeaviateResult",
]
