"""
List Query Builder

Turns a flat, untrusted query-string mapping into a structured read:

    builder = QueryBuilder(request.query_params.dict())
    query = builder.filter().sort().limit_fields().paginate().query

Each step returns a new builder; neither the raw params nor an earlier
builder is ever modified. The resulting ``ListQuery`` is storage-agnostic,
see ``shared.infrastructure.querysets`` for the ORM side.

Conventions understood by the steps:

- ``field=value``            equality condition
- ``field[gte|gt|lte|lt]=v`` range condition, numeric values coerced
- ``sort=-price,name``       composite ordering, ``-`` means descending
- ``fields=name,price``      projection, ``fields=-price`` hides fields instead
- ``page=2&limit=5``         page-based pagination
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

RESERVED_PARAMS = frozenset({"page", "sort", "limit", "fields"})
RANGE_OPERATORS = ("gte", "gt", "lte", "lt")

DEFAULT_ORDERING: tuple[str, ...] = ("-createdAt",)
METADATA_FIELDS: tuple[str, ...] = ("updatedAt",)
IDENTITY_FIELD = "id"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

_RANGE_KEY = re.compile(r"^(?P<field>.+?)\[(?P<op>gte|gt|lte|lt)\]$")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def coerce_number(value: Any) -> Any:
    """Return ``value`` as int/float when it looks numeric, unchanged otherwise."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not _NUMBER.match(text):
        return value
    number = float(text)
    if not math.isfinite(number):
        return value
    if number.is_integer() and "." not in text and "e" not in text.lower():
        return int(text)
    return number


def parse_positive_int(value: Any, default: int) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def split_csv(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


@dataclass(frozen=True)
class ListQuery:
    """Fully described read: predicate, ordering, projection and page window."""

    predicate: Mapping[str, Any] = field(default_factory=dict)
    ordering: tuple[str, ...] = DEFAULT_ORDERING
    fields: tuple[str, ...] | None = None
    excluded_fields: tuple[str, ...] = METADATA_FIELDS
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class QueryBuilder:
    """Immutable fluent builder producing a :class:`ListQuery`."""

    __slots__ = ("_params", "_query")

    def __init__(self, params: Mapping[str, Any] | None = None, query: ListQuery | None = None) -> None:
        self._params = dict(params or {})
        self._query = query or ListQuery()

    @property
    def query(self) -> ListQuery:
        return self._query

    def _with(self, **changes: Any) -> "QueryBuilder":
        return QueryBuilder(self._params, replace(self._query, **changes))

    def filter(self) -> "QueryBuilder":
        predicate: dict[str, Any] = {}
        for key, value in self._params.items():
            if key in RESERVED_PARAMS:
                continue
            match = _RANGE_KEY.match(key)
            if match is None:
                if not isinstance(predicate.get(key), dict):
                    predicate[key] = value
                continue
            name = match.group("field")
            condition = predicate.get(name)
            if not isinstance(condition, dict):
                # A range always wins over an equality on the same field.
                condition = {}
            condition[f"${match.group('op')}"] = coerce_number(value)
            predicate[name] = condition
        return self._with(predicate=predicate)

    def sort(self) -> "QueryBuilder":
        ordering = split_csv(self._params.get("sort"))
        return self._with(ordering=ordering or DEFAULT_ORDERING)

    def limit_fields(self) -> "QueryBuilder":
        selected = split_csv(self._params.get("fields"))
        if not selected:
            return self._with(fields=None, excluded_fields=METADATA_FIELDS)
        hidden = tuple(name[1:] for name in selected if name.startswith("-"))
        if hidden:
            if len(hidden) != len(selected):
                raise ValueError("Cannot mix included and excluded fields.")
            return self._with(fields=None, excluded_fields=tuple(dict.fromkeys(METADATA_FIELDS + hidden)))
        if IDENTITY_FIELD not in selected:
            selected = (IDENTITY_FIELD,) + selected
        return self._with(fields=tuple(dict.fromkeys(selected)), excluded_fields=())

    def paginate(self) -> "QueryBuilder":
        page = parse_positive_int(self._params.get("page"), DEFAULT_PAGE)
        page_size = min(
            parse_positive_int(self._params.get("limit"), DEFAULT_PAGE_SIZE),
            MAX_PAGE_SIZE,
        )
        return self._with(page=page, page_size=page_size)

    def build(self) -> ListQuery:
        """Apply every step in the conventional order."""
        return self.filter().sort().limit_fields().paginate().query
