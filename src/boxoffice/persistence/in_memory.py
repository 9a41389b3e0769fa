"""
In-memory persistence backend.

Stores entities in per-type dictionaries keyed by primary key. Intended for
tests and development: all data is lost with the instance.

Units of work are serialized with one asyncio.Lock, so the read-validate-write
sequence of a service operation never interleaves with another one. Rollback
restores the table snapshot taken when the unit of work began.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from boxoffice.models import ENTITY_TYPES, Entity
from boxoffice.observability import Tracer
from boxoffice.persistence.base import BaseDatabase, BaseUnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.tenancy.classification import ENTITY_SCOPES, EntityScope, cascade_children
from boxoffice.tenancy.filters import ScopedFilter, TenantFilter

logger = logging.getLogger(__name__)

Tables = dict[type[Entity], dict[int, Entity]]


def _apply_filter(entity: Entity, filter_: Filter) -> bool:
    value = getattr(entity, filter_.field, None)
    operator = filter_.operator

    if operator == "eq":
        return bool(value == filter_.value)
    if operator == "ne":
        return bool(value != filter_.value)
    if operator == "in":
        return value in filter_.value
    if operator == "not_in":
        return value not in filter_.value
    if value is None or filter_.value is None:
        return False
    if operator == "gt":
        return bool(value > filter_.value)
    if operator == "gte":
        return bool(value >= filter_.value)
    if operator == "lt":
        return bool(value < filter_.value)
    if operator == "lte":
        return bool(value <= filter_.value)
    raise ValueError(f"Unsupported operator: {operator}")


def _sort_and_page(rows: list[Entity], query: Query) -> list[Entity]:
    rows = sorted(rows, key=lambda row: row.id or 0)
    if query.order_by:
        field = query.order_by
        present = [row for row in rows if getattr(row, field) is not None]
        missing = [row for row in rows if getattr(row, field) is None]
        present.sort(key=lambda row: getattr(row, field), reverse=query.order_direction == "desc")
        # NULLs sort last in both directions.
        rows = present + missing
    end = None if query.limit is None else query.offset + query.limit
    return rows[query.offset : end]


class InMemoryUnitOfWork(BaseUnitOfWork):
    """Unit of work over an InMemoryDatabase's tables."""

    def __init__(self, database: InMemoryDatabase, scoped_filter: ScopedFilter) -> None:
        super().__init__(scoped_filter, database.scopes, database.tracer, database.system)
        self._db = database
        self._snapshot: tuple[Tables, dict[type[Entity], int]] | None = None

    async def _begin(self) -> None:
        await self._db._lock.acquire()
        self._snapshot = (
            {entity_type: dict(rows) for entity_type, rows in self._db._tables.items()},
            dict(self._db._next_ids),
        )

    async def _commit(self) -> None:
        self._snapshot = None

    async def _rollback(self) -> None:
        if self._snapshot is not None:
            tables, next_ids = self._snapshot
            self._db._tables = tables
            self._db._next_ids = next_ids
            self._snapshot = None

    async def _end(self) -> None:
        self._snapshot = None
        self._db._lock.release()

    def _rows(self, entity_type: type[Entity]) -> dict[int, Entity]:
        return self._db._tables.setdefault(entity_type, {})

    async def _visible(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> list[Entity]:
        matched = []
        for row in self._rows(entity_type).values():
            if not all(_apply_filter(row, f) for f in query.filters):
                continue
            if await tenant_filter.matches(row, self._load_unfiltered):
                matched.append(row)
        return matched

    async def _select(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> list[Entity]:
        rows = await self._visible(entity_type, tenant_filter, query)
        return [row.model_copy(deep=True) for row in _sort_and_page(rows, query)]

    async def _count(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> int:
        return len(await self._visible(entity_type, tenant_filter, query))

    async def _load_unfiltered(self, entity_type: type[Entity], id: int) -> Entity | None:
        return self._rows(entity_type).get(id)

    async def _find_unfiltered(
        self, entity_type: type[Entity], field: str, value: Any
    ) -> Entity | None:
        for row in self._rows(entity_type).values():
            if getattr(row, field) == value:
                return row
        return None

    async def _insert(self, entity: Entity) -> Entity:
        entity_type = type(entity)
        new_id = self._db._next_ids.get(entity_type, 1)
        self._db._next_ids[entity_type] = new_id + 1
        stored = entity.model_copy(update={"id": new_id}, deep=True)
        self._rows(entity_type)[new_id] = stored
        return stored.model_copy(deep=True)

    async def _update(self, entity: Entity) -> Entity:
        stored = entity.model_copy(deep=True)
        self._rows(type(entity))[stored.id] = stored  # type: ignore[index]
        return stored.model_copy(deep=True)

    async def _delete(self, entity_type: type[Entity], id: int) -> None:
        for child_type, field in cascade_children(entity_type, self.scopes):
            children = [
                child.id
                for child in self._rows(child_type).values()
                if getattr(child, field) == id
            ]
            for child_id in children:
                await self._delete(child_type, child_id)  # type: ignore[arg-type]
        self._rows(entity_type).pop(id, None)


class InMemoryDatabase(BaseDatabase):
    """
    Dictionary-backed database.

    Example:
        >>> database = InMemoryDatabase(enable_tracing=False)
        >>> scoped = database.scoped_filter(TenantContext.for_tenant(1))
        >>> async with database.session(scoped) as uow:
        ...     venues = await uow.repository(Venue).find()
    """

    system = "memory"

    def __init__(
        self,
        scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        super().__init__(scopes, tracer, enable_tracing)
        self._tables: Tables = {entity_type: {} for entity_type in ENTITY_TYPES}
        self._next_ids: dict[type[Entity], int] = {}
        self._lock = asyncio.Lock()

    def session(self, scoped_filter: ScopedFilter) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self, scoped_filter)


__all__ = ["InMemoryDatabase", "InMemoryUnitOfWork"]
