"""
Protocols for boxoffice persistence.

A Database hands out units of work. Each unit of work is opened with the
ScopedFilter of one request and exposes one Repository per entity type;
every read those repositories perform is narrowed by the matching tenant
predicate, and every write is checked against it.

Implementations:
- InMemoryDatabase: dict-backed, for tests and development
- SQLiteDatabase: aiosqlite
- PostgreSQLDatabase: SQLAlchemy async engine
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from boxoffice.models import Entity

if TYPE_CHECKING:
    from boxoffice.persistence.query import Query
    from boxoffice.tenancy.context import TenantContext
    from boxoffice.tenancy.filters import ScopedFilter

TEntity = TypeVar("TEntity", bound=Entity)


@runtime_checkable
class Repository(Protocol[TEntity]):
    """
    Tenant-scoped access to one entity type inside a unit of work.

    Key behaviours:
        - Every read applies the unit of work's tenant predicate
        - ``update`` and ``delete`` only touch rows visible under that predicate
        - ``add`` rejects rows whose parents belong to another tenant
        - Results are ordered by primary key unless the query orders them
    """

    async def get(self, id: int) -> TEntity | None:
        """Get a visible row by primary key."""
        ...

    async def get_by_external_id(self, value: Any) -> TEntity | None:
        """Get a visible row by its external identifier."""
        ...

    async def require_by_external_id(self, value: Any) -> TEntity:
        """
        Get a visible row by external identifier.

        Raises:
            NotFoundError: If no visible row has that identifier
        """
        ...

    async def find(self, query: Query | None = None) -> list[TEntity]:
        """Get every visible row matching the query."""
        ...

    async def first(self, query: Query | None = None) -> TEntity | None:
        ...

    async def count(self, query: Query | None = None) -> int:
        ...

    async def add(self, entity: TEntity) -> TEntity:
        """
        Insert a new row and return it with its primary key set.

        Raises:
            DuplicateKeyError: If a unique key is already taken
            TenantMismatchError: If the row would belong to another tenant
            InvalidArgumentError: If a referenced parent or tenant is missing
        """
        ...

    async def update(self, entity: TEntity) -> TEntity:
        """
        Persist changes to a visible row.

        Raises:
            NotFoundError: If the row is not visible under the current scope
            InvalidArgumentError: If an immutable reference was changed
        """
        ...

    async def delete(self, entity: TEntity) -> bool:
        """Delete a visible row and its dependents. False if it was not visible."""
        ...

    async def lock(self, entity: TEntity) -> None:
        """Hold a write lock on a row until the unit of work ends."""
        ...


@runtime_checkable
class UnitOfWork(Protocol):
    """
    One atomic read-validate-write sequence.

    Use as an async context manager; leaving the block without calling
    commit() discards every write.
    """

    @property
    def scoped_filter(self) -> ScopedFilter: ...

    def repository(self, entity_type: type[TEntity]) -> Repository[TEntity]: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class Database(Protocol):
    """A persistence backend."""

    @property
    def system(self) -> str:
        """Backend name used in span attributes ('memory', 'sqlite', 'postgresql')."""
        ...

    async def initialize(self) -> None:
        """Open connections and create the schema if needed."""
        ...

    async def close(self) -> None: ...

    def scoped_filter(self, context: TenantContext) -> ScopedFilter:
        """Build the per-request tenant predicates for a context."""
        ...

    def session(self, scoped_filter: ScopedFilter) -> UnitOfWork:
        """Open a unit of work bound to a request's tenant predicates."""
        ...


__all__ = ["Repository", "UnitOfWork", "Database", "TEntity"]
