"""
Where-filter construction for the delete path.

A flat ``{field: value}`` map becomes an ``And`` of one predicate per entry.
The operator and value field of each predicate are picked from a dispatch
table keyed by the value's type:

    str               Like   valueText (supports * and ? wildcards)
    bool              Equal  valueBoolean
    datetime / date   Equal  valueDate (RFC 3339)
    int / float       Equal  valueNumber
    anything else     Like   valueText of str(value)

The lookup walks the value's MRO, so ``bool`` resolves to its own entry
rather than to ``int``, and subclasses of the listed types are covered.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping

from weavesync.weaviate.models import Operator, WhereFilter, to_rfc3339

PredicateBuilder = Callable[[str, Any], WhereFilter]


def _text(path: str, value: str) -> WhereFilter:
    return WhereFilter(operator=Operator.LIKE, path=[path], value_text=value)


def _boolean(path: str, value: bool) -> WhereFilter:
    return WhereFilter(operator=Operator.EQUAL, path=[path], value_boolean=value)


def _date(path: str, value: date) -> WhereFilter:
    return WhereFilter(operator=Operator.EQUAL, path=[path], value_date=to_rfc3339(value))


def _number(path: str, value: float) -> WhereFilter:
    return WhereFilter(operator=Operator.EQUAL, path=[path], value_number=float(value))


def _fallback(path: str, value: Any) -> WhereFilter:
    return WhereFilter(operator=Operator.LIKE, path=[path], value_text=str(value))


PREDICATE_BUILDERS: Dict[type, PredicateBuilder] = {
    str: _text,
    bool: _boolean,
    datetime: _date,
    date: _date,
    int: _number,
    float: _number,
}


def build_predicate(path: str, value: Any) -> WhereFilter:
    """Build the predicate for one field/value pair"""
    for value_type in type(value).__mro__:
        builder = PREDICATE_BUILDERS.get(value_type)
        if builder is not None:
            return builder(path, value)
    return _fallback(path, value)


def build_filter(criteria: Mapping[str, Any]) -> WhereFilter:
    """
    Combine one predicate per entry under a single ``And``.

    Args:
        criteria: Non-empty flat map of field name to scalar value

    Raises:
        ValueError: If criteria is empty
    """
    if not criteria:
        raise ValueError("filter must contain at least one field")
    return WhereFilter(
        operator=Operator.AND,
        operands=[build_predicate(path, value) for path, value in criteria.items()],
    )


def match_all_filter() -> WhereFilter:
    """A predicate every object satisfies: ``id NotEqual ""``"""
    return WhereFilter(operator=Operator.NOT_EQUAL, path=["id"], value_text="")
