"""
Row-stream codec: the intermediate file format passed between tasks.

A row-stream file holds a sequence of row records, one JSON document per
line (JSON Lines, UTF-8). Files can be written and read incrementally, so a
task never needs to hold a whole file in memory while encoding or decoding.

Values JSON represents natively (strings, numbers, booleans, null, lists
and nested maps) are written as-is. Other common scalar types are written as
self-describing tagged objects and restored on read:

    datetime  -> {"$type": "datetime", "value": "2024-01-31T10:00:00+00:00"}
    date      -> {"$type": "date", "value": "2024-01-31"}
    Decimal   -> {"$type": "decimal", "value": "10.50"}
    UUID      -> {"$type": "uuid", "value": "6c0f..."}
    bytes     -> {"$type": "bytes", "value": "<base64>"}

A map of the row that itself has a ``$type`` key is written as
``{"$type": "map", "value": [[key, value], ...]}`` so that it is never
mistaken for a tagged scalar on read.

Key order inside each row is preserved on both sides.

Example:
    >>> import io
    >>> buffer = io.StringIO()
    >>> write_rows(buffer, [{"title": "Dune", "year": 1965}])
    1
    >>> buffer.seek(0)
    0
    >>> list(read_rows(buffer))
    [{'title': 'Dune', 'year': 1965}]
"""

import base64
import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterable, Iterator, List, Tuple, Union
from uuid import UUID

from weavesync.core.exceptions.custom_exceptions import RowStreamError

FILE_SUFFIX = ".jsonl"
TYPE_KEY = "$type"
VALUE_KEY = "value"
MAP_TAG = "map"

Row = Dict[str, Any]

# datetime before date: datetime is a date subclass
_ENCODERS: List[Tuple[type, str, Callable[[Any], Any]]] = [
    (datetime, "datetime", lambda v: v.isoformat()),
    (date, "date", lambda v: v.isoformat()),
    (Decimal, "decimal", str),
    (UUID, "uuid", str),
    (bytes, "bytes", lambda v: base64.b64encode(v).decode("ascii")),
]

_DECODERS: Dict[str, Callable[[Any], Any]] = {
    "datetime": datetime.fromisoformat,
    "date": date.fromisoformat,
    "decimal": Decimal,
    "uuid": UUID,
    "bytes": base64.b64decode,
}


def _escape_maps(value: Any) -> Any:
    if isinstance(value, dict):
        escaped = {k: _escape_maps(v) for k, v in value.items()}
        if TYPE_KEY in escaped:
            return {TYPE_KEY: MAP_TAG, VALUE_KEY: [[k, v] for k, v in escaped.items()]}
        return escaped
    if isinstance(value, (list, tuple)):
        return [_escape_maps(item) for item in value]
    return value


def _encode_value(value: Any) -> Dict[str, Any]:
    for value_type, tag, encode in _ENCODERS:
        if isinstance(value, value_type):
            return {TYPE_KEY: tag, VALUE_KEY: encode(value)}
    raise TypeError(f"Object of type {type(value).__name__} is not row-stream serializable")


def _decode_object(pairs: List[Tuple[str, Any]]) -> Any:
    if len(pairs) == 2:
        obj = dict(pairs)
        tag = obj.get(TYPE_KEY)
        if tag == MAP_TAG and isinstance(obj.get(VALUE_KEY), list):
            return dict(obj[VALUE_KEY])
        if tag in _DECODERS and VALUE_KEY in obj:
            return _DECODERS[tag](obj[VALUE_KEY])
    return dict(pairs)


def encode_row(row: Row) -> str:
    """Encode one row record as a single line (without the trailing newline)"""
    if not isinstance(row, dict):
        raise RowStreamError(
            f"Row must be a mapping, got {type(row).__name__}",
            error_code="ROWSTREAM_INVALID_ROW",
        )
    try:
        return json.dumps(_escape_maps(row), default=_encode_value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise RowStreamError(
            f"Failed to encode row: {e}", error_code="ROWSTREAM_ENCODE_ERROR"
        ) from e


def decode_row(line: str, line_number: int = 0) -> Row:
    """Decode one line produced by :func:`encode_row`"""
    try:
        row = json.loads(line, object_pairs_hook=_decode_object)
    except (ValueError, TypeError, ArithmeticError) as e:
        raise RowStreamError(
            f"Malformed row at line {line_number}: {e}",
            error_code="ROWSTREAM_DECODE_ERROR",
            details={"line": line_number},
        ) from e
    if not isinstance(row, dict):
        raise RowStreamError(
            f"Row at line {line_number} is not a mapping",
            error_code="ROWSTREAM_DECODE_ERROR",
            details={"line": line_number},
        )
    return row


def write_rows(stream: IO[str], rows: Iterable[Row]) -> int:
    """
    Write row records to a text stream, one per line.

    Args:
        stream: Writable text stream
        rows: Any iterable of row records, consumed lazily

    Returns:
        int: Number of rows written
    """
    count = 0
    for row in rows:
        stream.write(encode_row(row))
        stream.write("\n")
        count += 1
    return count


def read_rows(stream: IO[str]) -> Iterator[Row]:
    """
    Lazily read row records from a text stream.

    Blank lines are skipped. Decoding errors name the offending line.
    """
    for line_number, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        yield decode_row(line, line_number)


def write_file(path: Union[str, Path], rows: Iterable[Row]) -> int:
    """Write row records to a file, replacing it; returns the row count"""
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        return write_rows(f, rows)


def read_file(path: Union[str, Path]) -> List[Row]:
    """Read every row record of a file into a list"""
    with open(path, "r", encoding="utf-8") as f:
        return list(read_rows(f))
