"""
Backend-independent unit of work and repository logic.

BaseUnitOfWork owns the tenant rules every backend must honour; concrete
backends only implement the storage primitives (``_select``, ``_insert``
and friends), each of which receives the TenantFilter to apply. Keeping
the rules here means a new backend cannot forget a predicate on one of
its read paths.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from types import TracebackType
from typing import Any, Generic

from pydantic import ValidationError

from boxoffice.exceptions import (
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
)
from boxoffice.models import Entity, Tenant
from boxoffice.observability import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_DB_TABLE,
    ATTR_ENTITY_TYPE,
    ATTR_RESULT_COUNT,
    Tracer,
    create_tracer,
)
from boxoffice.persistence.interface import TEntity
from boxoffice.persistence.query import Filter, Query
from boxoffice.tenancy.classification import (
    ENTITY_SCOPES,
    TENANT_COLUMN,
    EntityScope,
    ScopeKind,
    verify_single_tenant,
)
from boxoffice.tenancy.context import TenantContext
from boxoffice.tenancy.exceptions import TenantMismatchError
from boxoffice.tenancy.filters import ScopedFilter, ScopedFilterBuilder, TenantFilter

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class ScopedRepository(Generic[TEntity]):
    """
    Repository for one entity type, bound to a unit of work.

    Created by BaseUnitOfWork.repository(); not meant to be built directly.
    """

    def __init__(self, unit_of_work: BaseUnitOfWork, entity_type: type[TEntity]) -> None:
        self._uow = unit_of_work
        self._entity_type = entity_type
        self._filter = unit_of_work.scoped_filter.for_entity(entity_type)
        self._scope = unit_of_work.scopes[entity_type]

    @property
    def entity_type(self) -> type[TEntity]:
        return self._entity_type

    @property
    def tenant_filter(self) -> TenantFilter:
        return self._filter

    def _span(self, operation: str, sql_operation: str) -> Any:
        return self._uow.tracer.span(
            f"boxoffice.repository.{operation}",
            {
                ATTR_ENTITY_TYPE: self._entity_type.__name__,
                ATTR_DB_SYSTEM: self._uow.system,
                ATTR_DB_OPERATION: sql_operation,
                ATTR_DB_TABLE: self._entity_type.table_name(),
            },
        )

    def _check_fields(self, query: Query) -> None:
        unknown = query.fields() - set(self._entity_type.model_fields)
        if unknown:
            raise ValueError(
                f"Unknown field(s) for {self._entity_type.__name__}: {', '.join(sorted(unknown))}"
            )

    async def find(self, query: Query | None = None) -> list[TEntity]:
        query = query or Query()
        self._check_fields(query)
        with self._span("find", "SELECT") as span:
            rows = await self._uow._select(self._entity_type, self._filter, query)
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(rows))
        return rows  # type: ignore[return-value]

    async def first(self, query: Query | None = None) -> TEntity | None:
        query = query or Query()
        rows = await self.find(query.with_pagination(1, query.offset))
        return rows[0] if rows else None

    async def count(self, query: Query | None = None) -> int:
        query = query or Query()
        self._check_fields(query)
        with self._span("count", "SELECT"):
            return await self._uow._count(self._entity_type, self._filter, query)

    async def get(self, id: int) -> TEntity | None:
        return await self.first(Query.where(Filter.eq("id", id)))

    async def get_by_external_id(self, value: Any) -> TEntity | None:
        key = self._entity_type.__external_key__
        try:
            value = self._entity_type.parse_external_key(value)
        except ValidationError as e:
            raise InvalidArgumentError(key, f"Not a valid {key.replace('_', ' ')}: {value!r}") from e
        return await self.first(Query.where(Filter.eq(key, value)))

    async def require_by_external_id(self, value: Any) -> TEntity:
        entity = await self.get_by_external_id(value)
        if entity is None:
            raise NotFoundError(self._entity_type.entity_name(), value)
        return entity

    async def add(self, entity: TEntity) -> TEntity:
        if not isinstance(entity, self._entity_type):
            raise TypeError(f"Expected {self._entity_type.__name__}, got {type(entity).__name__}")
        if entity.id is not None:
            raise PersistenceError(f"{entity} already has a primary key")

        with self._span("add", "INSERT"):
            await self._check_references(entity)
            await self._check_unique(entity)
            entity.created_at = utc_now()
            entity.updated_at = None
            stored = await self._uow._insert(entity)
        logger.debug("Inserted %s", stored)
        return stored  # type: ignore[return-value]

    async def update(self, entity: TEntity) -> TEntity:
        if entity.id is None:
            raise PersistenceError(f"{entity} has not been added")

        with self._span("update", "UPDATE"):
            existing = await self.get(entity.id)
            if existing is None:
                raise NotFoundError(self._entity_type.entity_name(), entity.external_key)
            for field in self._immutable_fields():
                if getattr(existing, field) != getattr(entity, field):
                    raise InvalidArgumentError(field, "Cannot be changed after creation")
            await self._check_unique(entity)
            entity.created_at = existing.created_at
            entity.updated_at = utc_now()
            stored = await self._uow._update(entity)
        logger.debug("Updated %s", stored)
        return stored  # type: ignore[return-value]

    async def delete(self, entity: TEntity) -> bool:
        if entity.id is None:
            return False
        with self._span("delete", "DELETE"):
            existing = await self.get(entity.id)
            if existing is None:
                return False
            await self._uow._delete(self._entity_type, existing.id)  # type: ignore[arg-type]
        logger.debug("Deleted %s", existing)
        return True

    async def lock(self, entity: TEntity) -> None:
        if entity.id is None:
            raise PersistenceError(f"{entity} has not been added")
        await self._uow._lock(self._entity_type, entity.id)

    def _immutable_fields(self) -> list[str]:
        fields = [link.field for link in self._scope.parents]
        if self._scope.kind is ScopeKind.ROOT:
            fields.append(TENANT_COLUMN)
        return fields

    async def _check_references(self, entity: Entity) -> None:
        scope = self._scope
        load = self._uow._load_unfiltered
        tenant_id = self._uow.scoped_filter.tenant_id

        if scope.kind is ScopeKind.UNSCOPED:
            return

        if scope.kind is ScopeKind.ROOT:
            owner = getattr(entity, TENANT_COLUMN)
            tenant = await load(Tenant, owner)
            if tenant is None or not tenant.is_active:  # type: ignore[attr-defined]
                raise InvalidArgumentError(
                    TENANT_COLUMN, f"Tenant {owner} does not exist or is inactive"
                )
        else:
            for link in scope.parents:
                if await load(link.parent, getattr(entity, link.field)) is None:
                    raise InvalidArgumentError(
                        link.field, f"Referenced {link.parent.entity_name().lower()} does not exist"
                    )
            owner = await verify_single_tenant(
                self._entity_type, entity, load, self._uow.scopes
            )

        if tenant_id is not None and owner != tenant_id:
            field = TENANT_COLUMN if scope.kind is ScopeKind.ROOT else scope.parents[0].field
            logger.warning(
                "Rejected %s write for tenant %s from tenant %s context",
                self._entity_type.__name__,
                owner,
                tenant_id,
            )
            raise TenantMismatchError(field, tenant_id, owner)

    async def _check_unique(self, entity: Entity) -> None:
        for field in self._entity_type.__unique_fields__:
            value = getattr(entity, field)
            clash = await self._uow._find_unfiltered(self._entity_type, field, value)
            if clash is not None and clash.id != entity.id:
                raise DuplicateKeyError(self._entity_type.entity_name(), field, value)


class BaseUnitOfWork(ABC):
    """
    Shared unit-of-work behaviour.

    Subclasses implement the storage primitives. Every ``_select`` and
    ``_count`` call receives the TenantFilter of the queried type and must
    apply it; ``_load_unfiltered`` and ``_find_unfiltered`` are reserved for
    reference and uniqueness checks and never leave this module.
    """

    def __init__(
        self,
        scoped_filter: ScopedFilter,
        scopes: Mapping[type[Entity], EntityScope],
        tracer: Tracer,
        system: str,
    ) -> None:
        self._scoped_filter = scoped_filter
        self._scopes = scopes
        self._tracer = tracer
        self._system = system
        self._repositories: dict[type[Entity], ScopedRepository[Any]] = {}
        self._active = False
        self._finished = False

    @property
    def scoped_filter(self) -> ScopedFilter:
        return self._scoped_filter

    @property
    def scopes(self) -> Mapping[type[Entity], EntityScope]:
        return self._scopes

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def system(self) -> str:
        return self._system

    def repository(self, entity_type: type[TEntity]) -> ScopedRepository[TEntity]:
        if not self._active:
            raise PersistenceError("Unit of work is not active; use it with 'async with'")
        repository = self._repositories.get(entity_type)
        if repository is None:
            repository = ScopedRepository(self, entity_type)
            self._repositories[entity_type] = repository
        return repository

    async def commit(self) -> None:
        if not self._active or self._finished:
            raise PersistenceError("Unit of work is not active")
        await self._commit()
        self._finished = True

    async def rollback(self) -> None:
        if not self._active or self._finished:
            return
        await self._rollback()
        self._finished = True

    async def __aenter__(self) -> BaseUnitOfWork:
        await self._begin()
        self._active = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if not self._finished:
                if exc_type is None:
                    logger.debug("Unit of work left without commit; rolling back")
                await self._rollback()
                self._finished = True
        finally:
            self._active = False
            await self._end()

    # Storage primitives

    @abstractmethod
    async def _begin(self) -> None: ...

    @abstractmethod
    async def _commit(self) -> None: ...

    @abstractmethod
    async def _rollback(self) -> None: ...

    async def _end(self) -> None:
        """Release resources held for the unit of work."""
        return None

    @abstractmethod
    async def _select(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> list[Entity]: ...

    @abstractmethod
    async def _count(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> int: ...

    @abstractmethod
    async def _load_unfiltered(self, entity_type: type[Entity], id: int) -> Entity | None: ...

    @abstractmethod
    async def _find_unfiltered(
        self, entity_type: type[Entity], field: str, value: Any
    ) -> Entity | None: ...

    @abstractmethod
    async def _insert(self, entity: Entity) -> Entity: ...

    @abstractmethod
    async def _update(self, entity: Entity) -> Entity: ...

    @abstractmethod
    async def _delete(self, entity_type: type[Entity], id: int) -> None:
        """Delete a row; dependents declared in the classification table go with it."""

    async def _lock(self, entity_type: type[Entity], id: int) -> None:
        """Row lock for the rest of the unit of work. No-op where units are serialized."""
        return None


class BaseDatabase(ABC):
    """
    Shared database behaviour: filter construction, tracing and lifecycle.

    The ScopedFilterBuilder is created here, once per database, from the
    classification table; services obtain their per-request filters from it.

    Args:
        scopes: Classification table (defaults to ENTITY_SCOPES)
        tracer: Optional tracer (created from enable_tracing if omitted)
        enable_tracing: Whether to record spans
    """

    system = "unknown"

    def __init__(
        self,
        scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._scopes = scopes
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._filter_builder = ScopedFilterBuilder(scopes)

    @property
    def scopes(self) -> Mapping[type[Entity], EntityScope]:
        return self._scopes

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    def scoped_filter(self, context: TenantContext) -> ScopedFilter:
        return self._filter_builder.build(context)

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    def session(self, scoped_filter: ScopedFilter) -> BaseUnitOfWork: ...

    async def __aenter__(self) -> BaseDatabase:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


__all__ = ["ScopedRepository", "BaseUnitOfWork", "BaseDatabase", "utc_now"]
