"""
SQL generation shared by the relational backends.

SQLCompiler turns entity metadata, Query objects and TenantFilters into
parameterized statements. Dialects differ only in placeholder style,
column types, value encoding and how timestamps are compared:

- SQLite stores timestamps as ISO-8601 text with their original offset and
  compares them through the ``utc_instant()`` SQL function, which rewrites
  each value as fixed-width UTC text with microseconds, so range conditions
  and ordering work on exact absolute instants.
- PostgreSQL stores TIMESTAMPTZ and compares natively.

Tenant predicates for relationship-scoped types compile to nested
subqueries along the scoping path, e.g. for ticket offers::

    ticket_offers.show_id IN (
        SELECT shows.id FROM shows WHERE shows.venue_id IN (
            SELECT venues.id FROM venues WHERE venues.tenant_id = ?))

Identifiers come from entity classes and are checked against model fields
before reaching this module; values are always bound as parameters.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from boxoffice.models import ENTITY_TYPES, Entity
from boxoffice.persistence.query import OPERATOR_SYMBOLS, Filter, Query
from boxoffice.tenancy.classification import ENTITY_SCOPES, TENANT_COLUMN, EntityScope, ScopeKind
from boxoffice.tenancy.filters import TenantFilter


UTC_INSTANT_FUNCTION = "utc_instant"


def utc_instant(value: str | None) -> str | None:
    """
    Rewrite an ISO-8601 timestamp as fixed-width UTC text.

    Registered on SQLite connections as ``utc_instant()``. The result sorts
    lexicographically in instant order at full microsecond precision.

    Example:
        >>> utc_instant("2030-06-01T17:30:00.000300+05:30")
        '2030-06-01T12:00:00.000300'
    """
    if value is None:
        return None
    instant = datetime.fromisoformat(value).astimezone(UTC).replace(tzinfo=None)
    return instant.isoformat(timespec="microseconds")


class Params:
    """Collects bound values and hands out placeholders in statement order."""

    def __init__(self, named: bool) -> None:
        self._named = named
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        if self._named:
            return f":p{len(self.values) - 1}"
        return "?"

    def bind(self) -> list[Any] | dict[str, Any]:
        if self._named:
            return {f"p{index}": value for index, value in enumerate(self.values)}
        return list(self.values)


@dataclass(frozen=True)
class SQLStatement:
    sql: str
    params: list[Any] | dict[str, Any] = field(default_factory=list)


class SQLDialect(ABC):
    """Per-database details used by SQLCompiler."""

    name: str = ""
    named_params: bool = False
    supports_returning: bool = False
    supports_row_locks: bool = False
    primary_key_ddl: str = ""
    foreign_key_type: str = "INTEGER"
    type_map: Mapping[type, str] = {}
    nested_type: str = "TEXT"
    unbounded_limit: str | None = None

    def column_type(self, python_type: Any) -> str:
        if isinstance(python_type, type) and issubclass(python_type, BaseModel):
            return self.nested_type
        for candidate, sql_type in self.type_map.items():
            if python_type is candidate:
                return sql_type
        for candidate, sql_type in self.type_map.items():
            if isinstance(python_type, type) and issubclass(python_type, candidate):
                return sql_type
        return "TEXT"

    def comparable(self, entity_type: type[Entity], field_name: str, expression: str) -> str:
        """Wrap a column or placeholder so comparisons use the field's natural order."""
        return expression

    @abstractmethod
    def encode(self, value: Any) -> Any: ...

    def decode(self, entity_type: type[Entity], row: Mapping[str, Any]) -> Entity:
        data = dict(row)
        for name in entity_type.nested_fields():
            if isinstance(data.get(name), str):
                data[name] = json.loads(data[name])
        return entity_type.model_validate(data)


class SQLiteDialect(SQLDialect):
    name = "sqlite"
    named_params = False
    supports_returning = False
    primary_key_ddl = "id INTEGER PRIMARY KEY AUTOINCREMENT"
    unbounded_limit = "-1"
    foreign_key_type = "INTEGER"
    type_map = {
        bool: "INTEGER",
        int: "INTEGER",
        float: "REAL",
        Decimal: "TEXT",
        UUID: "TEXT",
        datetime: "TEXT",
        str: "TEXT",
    }

    def comparable(self, entity_type: type[Entity], field_name: str, expression: str) -> str:
        if field_name in entity_type.datetime_fields():
            return f"{UTC_INSTANT_FUNCTION}({expression})"
        return expression

    def encode(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, UUID | Decimal):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, BaseModel):
            return value.model_dump_json()
        return value


class PostgreSQLDialect(SQLDialect):
    name = "postgresql"
    named_params = True
    supports_returning = True
    supports_row_locks = True
    primary_key_ddl = "id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY"
    foreign_key_type = "BIGINT"
    type_map = {
        bool: "BOOLEAN",
        int: "INTEGER",
        float: "DOUBLE PRECISION",
        Decimal: "NUMERIC(12, 2)",
        UUID: "UUID",
        datetime: "TIMESTAMPTZ",
        str: "TEXT",
    }

    def encode(self, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump_json()
        return value


class SQLCompiler:
    """
    Builds statements for one dialect.

    Args:
        dialect: Target SQL dialect
        scopes: Classification table used for foreign keys in the schema
    """

    def __init__(
        self,
        dialect: SQLDialect,
        scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
    ) -> None:
        self.dialect = dialect
        self._scopes = scopes

    def _params(self) -> Params:
        return Params(self.dialect.named_params)

    def _columns(self, entity_type: type[Entity]) -> str:
        table = entity_type.table_name()
        return ", ".join(f"{table}.{name}" for name in entity_type.field_names())

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def tenant_predicate(self, tenant_filter: TenantFilter, params: Params) -> str | None:
        """Compile a tenant filter, or None when it allows every row."""
        if tenant_filter.allows_all:
            return None

        tables = [tenant_filter.entity_type, *(link.parent for link in tenant_filter.path)]
        root_table = tables[-1].table_name()
        condition = f"{root_table}.{TENANT_COLUMN} = {params.add(tenant_filter.tenant_id)}"
        for index in range(len(tenant_filter.path) - 1, -1, -1):
            link = tenant_filter.path[index]
            owner = tables[index].table_name()
            parent = tables[index + 1].table_name()
            condition = (
                f"{owner}.{link.field} IN "
                f"(SELECT {parent}.id FROM {parent} WHERE {condition})"  # nosec B608
            )
        return condition

    def filter_condition(self, entity_type: type[Entity], filter_: Filter, params: Params) -> str:
        dialect = self.dialect
        column = dialect.comparable(
            entity_type, filter_.field, f"{entity_type.table_name()}.{filter_.field}"
        )

        if filter_.operator in ("in", "not_in"):
            if not filter_.value:
                return "1 = 0" if filter_.operator == "in" else "1 = 1"
            placeholders = ", ".join(
                dialect.comparable(entity_type, filter_.field, params.add(dialect.encode(v)))
                for v in filter_.value
            )
            return f"{column} {OPERATOR_SYMBOLS[filter_.operator]} ({placeholders})"

        if filter_.value is None:
            if filter_.operator == "eq":
                return f"{column} IS NULL"
            if filter_.operator == "ne":
                return f"{column} IS NOT NULL"

        placeholder = dialect.comparable(
            entity_type, filter_.field, params.add(dialect.encode(filter_.value))
        )
        return f"{column} {OPERATOR_SYMBOLS[filter_.operator]} {placeholder}"

    def where_clause(
        self,
        entity_type: type[Entity],
        tenant_filter: TenantFilter | None,
        query: Query,
        params: Params,
    ) -> str:
        conditions: list[str] = []
        if tenant_filter is not None:
            tenant_condition = self.tenant_predicate(tenant_filter, params)
            if tenant_condition:
                conditions.append(tenant_condition)
        conditions.extend(self.filter_condition(entity_type, f, params) for f in query.filters)
        return f" WHERE {' AND '.join(conditions)}" if conditions else ""

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def select(
        self, entity_type: type[Entity], tenant_filter: TenantFilter | None, query: Query
    ) -> SQLStatement:
        table = entity_type.table_name()
        params = self._params()
        sql = f"SELECT {self._columns(entity_type)} FROM {table}"  # nosec B608
        sql += self.where_clause(entity_type, tenant_filter, query, params)

        order = []
        if query.order_by:
            column = self.dialect.comparable(
                entity_type, query.order_by, f"{table}.{query.order_by}"
            )
            order.append(f"{column} {query.order_direction.upper()}")
        order.append(f"{table}.id ASC")
        sql += f" ORDER BY {', '.join(order)}"

        if query.limit is not None:
            sql += f" LIMIT {params.add(query.limit)}"
        elif query.offset and self.dialect.unbounded_limit:
            sql += f" LIMIT {self.dialect.unbounded_limit}"
        if query.offset:
            sql += f" OFFSET {params.add(query.offset)}"
        return SQLStatement(sql, params.bind())

    def count(
        self, entity_type: type[Entity], tenant_filter: TenantFilter | None, query: Query
    ) -> SQLStatement:
        params = self._params()
        sql = f"SELECT COUNT(*) FROM {entity_type.table_name()}"  # nosec B608
        sql += self.where_clause(entity_type, tenant_filter, Query(filters=query.filters), params)
        return SQLStatement(sql, params.bind())

    def insert(self, entity: Entity) -> SQLStatement:
        entity_type = type(entity)
        columns = entity_type.column_names()
        params = self._params()
        placeholders = ", ".join(
            params.add(self.dialect.encode(getattr(entity, name))) for name in columns
        )
        sql = (
            f"INSERT INTO {entity_type.table_name()} ({', '.join(columns)}) "  # nosec B608
            f"VALUES ({placeholders})"
        )
        if self.dialect.supports_returning:
            sql += " RETURNING id"
        return SQLStatement(sql, params.bind())

    def update(self, entity: Entity) -> SQLStatement:
        entity_type = type(entity)
        params = self._params()
        assignments = ", ".join(
            f"{name} = {params.add(self.dialect.encode(getattr(entity, name)))}"
            for name in entity_type.column_names()
        )
        sql = (
            f"UPDATE {entity_type.table_name()} SET {assignments} "  # nosec B608
            f"WHERE id = {params.add(entity.id)}"
        )
        return SQLStatement(sql, params.bind())

    def delete(self, entity_type: type[Entity], id: int) -> SQLStatement:
        params = self._params()
        sql = f"DELETE FROM {entity_type.table_name()} WHERE id = {params.add(id)}"  # nosec B608
        return SQLStatement(sql, params.bind())

    def lock(self, entity_type: type[Entity], id: int) -> SQLStatement | None:
        if not self.dialect.supports_row_locks:
            return None
        params = self._params()
        sql = (
            f"SELECT id FROM {entity_type.table_name()} "  # nosec B608
            f"WHERE id = {params.add(id)} FOR UPDATE"
        )
        return SQLStatement(sql, params.bind())

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def create_table(self, entity_type: type[Entity]) -> str:
        scope = self._scopes.get(entity_type)
        references: dict[str, str] = {}
        if scope is not None:
            if scope.kind is ScopeKind.ROOT:
                references[TENANT_COLUMN] = "tenants(id)"
            for link in scope.parents:
                references[link.field] = f"{link.parent.table_name()}(id) ON DELETE CASCADE"

        lines = [self.dialect.primary_key_ddl]
        for name in entity_type.column_names():
            annotation = entity_type.model_fields[name].annotation
            python_type = entity_type.field_type(name)
            if name in references:
                column = f"{name} {self.dialect.foreign_key_type}"
            else:
                column = f"{name} {self.dialect.column_type(python_type)}"
            if python_type is annotation:
                column += " NOT NULL"
            if name in entity_type.__unique_fields__:
                column += " UNIQUE"
            if name in references:
                column += f" REFERENCES {references[name]}"
            lines.append(column)

        body = ",\n    ".join(lines)
        return f"CREATE TABLE IF NOT EXISTS {entity_type.table_name()} (\n    {body}\n)"

    def create_indexes(self, entity_type: type[Entity]) -> list[str]:
        scope = self._scopes.get(entity_type)
        if scope is None:
            return []
        columns = [link.field for link in scope.parents]
        if scope.kind is ScopeKind.ROOT:
            columns.append(TENANT_COLUMN)
        table = entity_type.table_name()
        return [
            f"CREATE INDEX IF NOT EXISTS ix_{table}_{column} ON {table} ({column})"
            for column in columns
        ]

    def schema(self, entity_types: tuple[type[Entity], ...] = ENTITY_TYPES) -> list[str]:
        """DDL for every entity type, parents before children."""
        statements: list[str] = []
        for entity_type in entity_types:
            statements.append(self.create_table(entity_type))
            statements.extend(self.create_indexes(entity_type))
        return statements


__all__ = [
    "UTC_INSTANT_FUNCTION",
    "utc_instant",
    "Params",
    "SQLStatement",
    "SQLDialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "SQLCompiler",
]
