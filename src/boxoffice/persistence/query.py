"""
Backend-neutral query objects.

Services describe what they want with Filter and Query; each backend
translates them to its own evaluation (Python comparisons or SQL). Tenant
predicates are *not* expressed as Filters: units of work add them from the
ScopedFilter they were opened with, so a Query can never widen or drop them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal

Operator = Literal["eq", "ne", "gt", "gte", "lt", "lte", "in", "not_in"]
Direction = Literal["asc", "desc"]

OPERATOR_SYMBOLS: dict[str, str] = {
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "in": "IN",
    "not_in": "NOT IN",
}


@dataclass(frozen=True)
class Filter:
    """
    A single condition on an entity field.

    Use the factory class methods rather than the constructor.

    Example:
        >>> Filter.eq("show_id", 4)
        Filter(field='show_id', operator='eq', value=4)
        >>> str(Filter.in_("id", [1, 2]))
        'id IN (1, 2)'
    """

    field: str
    operator: Operator
    value: Any

    @classmethod
    def eq(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def ne(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="ne", value=value)

    @classmethod
    def gt(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="gt", value=value)

    @classmethod
    def gte(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="gte", value=value)

    @classmethod
    def lt(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="lt", value=value)

    @classmethod
    def lte(cls, field: str, value: Any) -> Filter:
        return cls(field=field, operator="lte", value=value)

    @classmethod
    def in_(cls, field: str, values: list[Any] | tuple[Any, ...]) -> Filter:
        return cls(field=field, operator="in", value=tuple(values))

    @classmethod
    def not_in(cls, field: str, values: list[Any] | tuple[Any, ...]) -> Filter:
        return cls(field=field, operator="not_in", value=tuple(values))

    @classmethod
    def between(cls, field: str, low: Any, high: Any) -> tuple[Filter, Filter]:
        """Closed interval ``low <= field <= high`` as a pair of filters."""
        return cls.gte(field, low), cls.lte(field, high)

    def __str__(self) -> str:
        return f"{self.field} {OPERATOR_SYMBOLS[self.operator]} {self.value!r}"


@dataclass(frozen=True)
class Query:
    """
    Filters (combined with AND), ordering and pagination.

    Results are ordered by primary key (insertion order) unless ``order_by``
    is set; ties on ``order_by`` also fall back to primary key order.

    Attributes:
        filters: Conditions combined with AND
        order_by: Field to order by
        order_direction: 'asc' or 'desc'
        limit: Maximum number of rows
        offset: Rows to skip
    """

    filters: tuple[Filter, ...] = ()
    order_by: str | None = None
    order_direction: Direction = "asc"
    limit: int | None = None
    offset: int = 0

    @classmethod
    def where(cls, *filters: Filter) -> Query:
        return cls(filters=tuple(filters))

    def with_filter(self, *filters: Filter) -> Query:
        """New Query with additional filters."""
        return replace(self, filters=(*self.filters, *filters))

    def with_order(self, field: str, direction: Direction = "asc") -> Query:
        return replace(self, order_by=field, order_direction=direction)

    def with_pagination(self, limit: int, offset: int = 0) -> Query:
        if limit < 0 or offset < 0:
            raise ValueError(f"limit and offset must be >= 0, got {limit}/{offset}")
        return replace(self, limit=limit, offset=offset)

    def fields(self) -> set[str]:
        """Every field name the query refers to."""
        names = {f.field for f in self.filters}
        if self.order_by:
            names.add(self.order_by)
        return names

    def __str__(self) -> str:
        parts = []
        if self.filters:
            parts.append("WHERE " + " AND ".join(str(f) for f in self.filters))
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by} {self.order_direction.upper()}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        if self.offset:
            parts.append(f"OFFSET {self.offset}")
        return " ".join(parts) if parts else "(all rows)"


__all__ = ["Filter", "Query", "Operator", "Direction", "OPERATOR_SYMBOLS"]
