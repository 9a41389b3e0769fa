"""
SQLite persistence backend using aiosqlite.

SQLite-specific adaptations:
- UUIDs and Decimals stored as TEXT
- Timestamps stored as ISO 8601 TEXT with their original offset, compared
  through the utc_instant() function registered on the connection, so ranges
  work on exact absolute instants
- Value objects (addresses, geographic points) stored as JSON TEXT
- Foreign keys with ON DELETE CASCADE (``PRAGMA foreign_keys = ON``)

A single connection is shared by all units of work. Each unit of work holds
the database's asyncio.Lock from ``BEGIN IMMEDIATE`` to ``COMMIT``/``ROLLBACK``,
which serializes read-validate-write sequences.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from typing import Any

import aiosqlite

from boxoffice.exceptions import DuplicateKeyError, PersistenceError
from boxoffice.models import Entity
from boxoffice.observability import Tracer
from boxoffice.persistence.base import BaseDatabase, BaseUnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.persistence.sql import (
    UTC_INSTANT_FUNCTION,
    SQLCompiler,
    SQLiteDialect,
    SQLStatement,
    utc_instant,
)
from boxoffice.tenancy.classification import ENTITY_SCOPES, EntityScope
from boxoffice.tenancy.filters import ScopedFilter, TenantFilter

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = re.compile(r"UNIQUE constraint failed: (\w+)\.(\w+)")


class SQLiteUnitOfWork(BaseUnitOfWork):
    """Unit of work running inside one SQLite transaction."""

    def __init__(self, database: SQLiteDatabase, scoped_filter: ScopedFilter) -> None:
        super().__init__(scoped_filter, database.scopes, database.tracer, database.system)
        self._db = database
        self._compiler = database.compiler

    @property
    def _connection(self) -> aiosqlite.Connection:
        return self._db.connection

    async def _execute(self, statement: SQLStatement) -> aiosqlite.Cursor:
        return await self._connection.execute(statement.sql, statement.params)

    async def _begin(self) -> None:
        await self._db._lock.acquire()
        try:
            await self._connection.execute("BEGIN IMMEDIATE")
        except BaseException:
            self._db._lock.release()
            raise

    async def _commit(self) -> None:
        await self._connection.execute("COMMIT")

    async def _rollback(self) -> None:
        await self._connection.execute("ROLLBACK")

    async def _end(self) -> None:
        self._db._lock.release()

    async def _select(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> list[Entity]:
        cursor = await self._execute(self._compiler.select(entity_type, tenant_filter, query))
        rows = await cursor.fetchall()
        return [self._compiler.dialect.decode(entity_type, row) for row in rows]

    async def _count(
        self, entity_type: type[Entity], tenant_filter: TenantFilter, query: Query
    ) -> int:
        cursor = await self._execute(self._compiler.count(entity_type, tenant_filter, query))
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def _load_unfiltered(self, entity_type: type[Entity], id: int) -> Entity | None:
        return await self._find_unfiltered(entity_type, "id", id)

    async def _find_unfiltered(
        self, entity_type: type[Entity], field: str, value: Any
    ) -> Entity | None:
        statement = self._compiler.select(
            entity_type, None, Query.where(Filter.eq(field, value)).with_pagination(1)
        )
        cursor = await self._execute(statement)
        row = await cursor.fetchone()
        return self._compiler.dialect.decode(entity_type, row) if row else None

    async def _insert(self, entity: Entity) -> Entity:
        try:
            cursor = await self._execute(self._compiler.insert(entity))
        except aiosqlite.IntegrityError as e:
            match = _UNIQUE_VIOLATION.search(str(e))
            if match is None:
                raise
            field = match.group(2)
            raise DuplicateKeyError(type(entity).entity_name(), field, getattr(entity, field)) from e
        return entity.model_copy(update={"id": cursor.lastrowid})

    async def _update(self, entity: Entity) -> Entity:
        await self._execute(self._compiler.update(entity))
        return entity.model_copy()

    async def _delete(self, entity_type: type[Entity], id: int) -> None:
        await self._execute(self._compiler.delete(entity_type, id))


class SQLiteDatabase(BaseDatabase):
    """
    SQLite-backed database.

    Args:
        database: Path to the database file, or ':memory:'
        busy_timeout: Milliseconds to wait on a locked database file
        scopes: Classification table (defaults to ENTITY_SCOPES)
        tracer: Optional tracer
        enable_tracing: Whether to record spans

    Example:
        >>> async with SQLiteDatabase("boxoffice.db") as database:
        ...     scoped = database.scoped_filter(TenantContext.for_tenant(1))
        ...     async with database.session(scoped) as uow:
        ...         shows = await uow.repository(Show).find()
    """

    system = "sqlite"

    def __init__(
        self,
        database: str = ":memory:",
        *,
        busy_timeout: int = 5000,
        scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        super().__init__(scopes, tracer, enable_tracing)
        self._database = database
        self._busy_timeout = busy_timeout
        self._connection: aiosqlite.Connection | None = None
        self._compiler = SQLCompiler(SQLiteDialect(), scopes)
        self._lock = asyncio.Lock()

    @property
    def compiler(self) -> SQLCompiler:
        return self._compiler

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise PersistenceError("SQLite database is not initialized; call initialize() first")
        return self._connection

    async def initialize(self) -> None:
        """Connect and create the schema. Safe to call more than once."""
        if self._connection is None:
            # Transactions are issued explicitly by units of work.
            self._connection = await aiosqlite.connect(self._database, isolation_level=None)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.create_function(
                UTC_INSTANT_FUNCTION, 1, utc_instant, deterministic=True
            )
            await self._connection.execute("PRAGMA foreign_keys = ON")
            await self._connection.execute(f"PRAGMA busy_timeout = {int(self._busy_timeout)}")
            logger.debug("Connected to SQLite database: %s", self._database)

        for statement in self._compiler.schema():
            await self._connection.execute(statement)

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.debug("Closed SQLite database connection: %s", self._database)

    def session(self, scoped_filter: ScopedFilter) -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(self, scoped_filter)


__all__ = ["SQLiteDatabase", "SQLiteUnitOfWork"]
