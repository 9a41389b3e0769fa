"""
PostgreSQL persistence backend using SQLAlchemy's async engine.

Uses native PostgreSQL types (UUID, TIMESTAMPTZ, NUMERIC). TIMESTAMPTZ
stores the absolute instant, so start times come back in the session time
zone rather than with the offset they were created with.

Each unit of work runs in one transaction on its own connection. Units of
work are not serialized in-process; services lock the parent row they
validate against (``SELECT ... FOR UPDATE``) before capacity checks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

from boxoffice.exceptions import DuplicateKeyError, PersistenceError
from boxoffice.models import Entity
from boxoffice.observability import Tracer
from boxoffice.persistence.base import BaseDatabase, BaseUnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.persistence.sql import PostgreSQLDialect, SQLCompiler, SQLStatement
from boxoffice.tenancy.classification import ENTITY_SCOPES, EntityScope
from boxoffice.tenancy.filters import ScopedFilter, TenantFilter

logger = logging.getLogger(__name__)


class PostgreSQLUnitOfWork(BaseUnitOfWork):
    """Unit of work running inside one PostgreSQL transaction."""

    def __init__(self, database: PostgreSQLDatabase, scoped_filter: ScopedFilter) -> None:
        super().__init__(scoped_filter, database.scopes, database.tracer, database.system)
        self._engine = database.engine
        self._compiler = database.compiler
        self._conn: AsyncConnection | None = None
        self._transaction: AsyncTransaction | None = None

    @property
    def connection(self) -> AsyncConnection:
        if self._conn is None:
            raise PersistenceError("Unit of work has no open connection")
        return self._conn

    async def _execute(self, statement: SQLStatement) -> Any:
        return await self.connection.execute(text(statement.sql), statement.params)

    async def _begin(self) -> None:
        self._conn = await self._engine.connect()
        self._transaction = await self._conn.begin()

    async def _commit(self) -> None:
        assert self._transaction is not None
        await self._transaction.commit()

    async def _rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            await self._transaction.rollback()

    async def _end(self) -> None:
        if self._conn is not None:
            await self._conn.close()
        self._conn = None
        self._transaction = None

    async def _select(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> list[Entity]:
        result = await self._execute(self._compiler.select(entity_type, tenant_filter, query))
        return [self._compiler.dialect.decode(entity_type, row._mapping) for row in result]

    async def _count(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> int:
        result = await self._execute(self._compiler.count(entity_type, tenant_filter, query))
        return int(result.scalar_one())

    async def _load_unfiltered(self, entity_type: type[Entity], id: int) -> Entity | None:
        return await self._find_unfiltered(entity_type, "id", id)

    async def _find_unfiltered(
        self, entity_type: type[Entity], field: str, value: Any
    ) -> Entity | None:
        statement = self._compiler.select(
            entity_type, None, Query.where(Filter.eq(field, value)).with_pagination(1)
        )
        row = (await self._execute(statement)).fetchone()
        return self._compiler.dialect.decode(entity_type, row._mapping) if row else None

    async def _insert(self, entity: Entity) -> Entity:
        try:
            async with self.connection.begin_nested():
                result = await self._execute(self._compiler.insert(entity))
        except IntegrityError as e:
            # Unique keys are checked before insert; a violation here is a concurrent insert.
            for field in type(entity).__unique_fields__:
                if f"({field})" in str(e.orig):
                    raise DuplicateKeyError(
                        type(entity).entity_name(), field, getattr(entity, field)
                    ) from e
            raise
        return entity.model_copy(update={"id": int(result.scalar_one())})

    async def _update(self, entity: Entity) -> Entity:
        await self._execute(self._compiler.update(entity))
        return entity.model_copy()

    async def _delete(self, entity_type: type[Entity], id: int) -> None:
        await self._execute(self._compiler.delete(entity_type, id))

    async def _lock(self, entity_type: type[Entity], id: int) -> None:
        statement = self._compiler.lock(entity_type, id)
        if statement is not None:
            await self._execute(statement)


class PostgreSQLDatabase(BaseDatabase):
    """
    PostgreSQL-backed database.

    Args:
        engine: SQLAlchemy async engine (e.g. ``postgresql+asyncpg://...``)
        scopes: Classification table (defaults to ENTITY_SCOPES)
        tracer: Optional tracer
        enable_tracing: Whether to record spans

    Example:
        >>> engine = create_async_engine("postgresql+asyncpg://localhost/boxoffice")
        >>> database = PostgreSQLDatabase(engine)
        >>> await database.initialize()
    """

    system = "postgresql"

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        super().__init__(scopes, tracer, enable_tracing)
        self._engine = engine
        self._compiler = SQLCompiler(PostgreSQLDialect(), scopes)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def compiler(self) -> SQLCompiler:
        return self._compiler

    async def initialize(self) -> None:
        """Create the schema if it does not exist."""
        async with self._engine.begin() as conn:
            for statement in self._compiler.schema():
                await conn.execute(text(statement))
        logger.debug("Initialized PostgreSQL schema")

    async def close(self) -> None:
        await self._engine.dispose()

    def session(self, scoped_filter: ScopedFilter) -> PostgreSQLUnitOfWork:
        return PostgreSQLUnitOfWork(self, scoped_filter)


__all__ = ["PostgreSQLDatabase", "PostgreSQLUnitOfWork"]
