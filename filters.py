"""
Query-string to filter translation.

Filters are built from small expression types that know nothing about
MongoDB; ``database.to_mongo`` turns them into a native query. A
``Filter`` is the AND of its expressions, and an empty one matches every
document.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from validators import split_values


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""
    field: str
    text: str


@dataclass(frozen=True)
class Range:
    """Strict bounds; a missing bound is unconstrained."""
    field: str
    gt: Optional[float] = None
    lt: Optional[float] = None


@dataclass(frozen=True)
class SetIntersects:
    """Document's array holds at least one of the values."""
    field: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class SetSupersets:
    """Document's array holds every one of the values."""
    field: str
    values: Tuple[str, ...]


Expression = Union[Equals, Contains, Range, SetIntersects, SetSupersets]


@dataclass
class Filter:
    expressions: List[Expression] = field(default_factory=list)

    def add(self, expression: Expression) -> "Filter":
        self.expressions.append(expression)
        return self

    def __bool__(self) -> bool:
        return bool(self.expressions)


def _param(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def listing_filter(params: Mapping[str, Any]) -> Filter:
    """
    Text params are matched case-insensitively, tag params match any of the
    comma separated values and price params arrive already parsed as floats.
    """
    query = Filter()

    for key in ("name", "description"):
        text = _param(params, key)
        if text:
            query.add(Contains(key, text))

    for key in ("flower_type", "occasion"):
        values = split_values(_param(params, key))
        if values:
            query.add(SetIntersects(key, tuple(values)))

    price = params.get("price")
    if price is not None:
        query.add(Equals("price", price))

    greater, lesser = params.get("price_greater"), params.get("price_lesser")
    if greater is not None or lesser is not None:
        query.add(Range("price", gt=greater, lt=lesser))

    return query


def florist_filter(params: Mapping[str, Any]) -> Filter:
    query = Filter()
    for key in ("username", "login_email"):
        value = _param(params, key)
        if value:
            query.add(Equals(key, value))
    return query
