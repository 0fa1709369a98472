"""
Data structures exchanged with Weaviate and between tasks.

Key Components:
    - WeaviateObject: An insertable record (id, class, properties)
    - Operator / WhereFilter: Where-filter trees for batch deletes
    - WeaviateClassDefinition / PropertyDefinition: Schema creation bodies
    - InlineObjects / StoredObjects: The two shapes of BatchCreate input
    - FetchType: How Query hands rows back to its host
"""

import base64
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def to_rfc3339(value: date) -> str:
    """Format a date or datetime as RFC 3339; naive values are taken as UTC"""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def to_json_value(value: Any) -> Any:
    """
    Convert a property value into a form Weaviate accepts as JSON.

    Dates become RFC 3339 text, Decimals numbers, UUIDs strings and bytes
    base64 text (Weaviate's ``blob``). Maps and lists are converted
    recursively; other values are returned unchanged.
    """
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    if isinstance(value, date):
        return to_rfc3339(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    return value


@dataclass
class WeaviateObject:
    """
    One object to insert.

    Attributes:
        class_name: Target class (collection) name
        properties: Property map, converted with to_json_value on send
        id: Object UUID, freshly generated when not given
    """

    class_name: str
    properties: Dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class": self.class_name,
            "id": self.id,
            "properties": to_json_value(self.properties),
        }


class Operator(str, Enum):
    """Where-filter operators used by the delete path"""

    AND = "And"
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    LIKE = "Like"


@dataclass
class WhereFilter:
    """
    A where-filter node.

    A leaf carries a path, an operator and exactly one typed value; an
    ``And`` node carries operands instead.
    """

    operator: Operator
    path: Optional[List[str]] = None
    value_text: Optional[str] = None
    value_boolean: Optional[bool] = None
    value_date: Optional[str] = None
    value_number: Optional[float] = None
    operands: List["WhereFilter"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"operator": self.operator.value}
        if self.operands:
            body["operands"] = [operand.to_dict() for operand in self.operands]
            return body

        body["path"] = self.path
        if self.value_text is not None:
            body["valueText"] = self.value_text
        elif self.value_boolean is not None:
            body["valueBoolean"] = self.value_boolean
        elif self.value_date is not None:
            body["valueDate"] = self.value_date
        elif self.value_number is not None:
            body["valueNumber"] = self.value_number
        return body


@dataclass
class PropertyDefinition:
    name: str
    data_type: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "dataType": list(self.data_type)}


@dataclass
class WeaviateClassDefinition:
    class_name: str
    properties: List[PropertyDefinition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class": self.class_name,
            "properties": [prop.to_dict() for prop in self.properties],
        }


class InlineObjects(BaseModel):
    """BatchCreate input given inline as a list of property maps"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    items: List[Dict[str, Any]]


class StoredObjects(BaseModel):
    """BatchCreate input given as the URI of a row-stream file"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["uri"] = "uri"
    uri: str


ObjectsSource = Annotated[Union[InlineObjects, StoredObjects], Field(discriminator="kind")]


def to_objects_source(value: Any) -> Any:
    """
    Turn a raw ``objects`` option into its tagged variant.

    A list becomes InlineObjects, a string becomes StoredObjects; mappings
    (already tagged) and variant instances pass through untouched.
    """
    if isinstance(value, (InlineObjects, StoredObjects, dict)):
        return value
    if isinstance(value, str):
        if not value.strip():
            raise ValueError("objects URI must not be blank")
        return StoredObjects(uri=value)
    if isinstance(value, (list, tuple)):
        return InlineObjects(items=list(value))
    raise ValueError(
        f"objects must be a list of maps or a URI string, got {type(value).__name__}"
    )


class FetchType(str, Enum):
    """
    How Query returns its rows.

    FETCH_ONE: output the first row
    FETCH: output all rows
    STORE: store all rows in a row-stream file, output only its URI
    NONE: run the query and output nothing
    """

    FETCH_ONE = "FETCH_ONE"
    FETCH = "FETCH"
    STORE = "STORE"
    NONE = "NONE"
