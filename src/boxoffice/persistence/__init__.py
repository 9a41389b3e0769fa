"""
Persistence for boxoffice.

- **Query objects**: Filter and Query
- **Protocols**: Database, UnitOfWork, Repository
- **Backends**: InMemoryDatabase, SQLiteDatabase (aiosqlite) and
  PostgreSQLDatabase (SQLAlchemy async engine)

Every backend applies the tenant predicates of the ScopedFilter a unit of
work was opened with to every read it performs.
"""

from boxoffice.persistence.base import BaseDatabase, BaseUnitOfWork, ScopedRepository
from boxoffice.persistence.in_memory import InMemoryDatabase
from boxoffice.persistence.interface import Database, Repository, UnitOfWork
from boxoffice.persistence.postgresql import PostgreSQLDatabase
from boxoffice.persistence.query import Filter, Query
from boxoffice.persistence.sql import PostgreSQLDialect, SQLCompiler, SQLiteDialect
from boxoffice.persistence.sqlite import SQLiteDatabase

__all__ = [
    "Filter",
    "Query",
    "Database",
    "UnitOfWork",
    "Repository",
    "BaseDatabase",
    "BaseUnitOfWork",
    "ScopedRepository",
    "InMemoryDatabase",
    "SQLiteDatabase",
    "PostgreSQLDatabase",
    "SQLCompiler",
    "SQLiteDialect",
    "PostgreSQLDialect",
]
