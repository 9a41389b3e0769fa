"""Shared plumbing for domain services."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Final, TypeVar
from uuid import UUID

from pydantic import ValidationError

from boxoffice.exceptions import InvalidArgumentError
from boxoffice.models import Entity
from boxoffice.observability import ATTR_TENANT_ID, ATTR_TENANT_SCOPED, Tracer, create_tracer
from boxoffice.persistence.base import utc_now
from boxoffice.persistence.interface import Database, Repository, UnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.tenancy.context import TenantContext
from boxoffice.tenancy.filters import ScopedFilter

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
TEntity = TypeVar("TEntity", bound=Entity)
T = TypeVar("T")


class Unset:
    """Marker for partial-update arguments that were not supplied."""

    _instance: Unset | None = None

    def __new__(cls) -> Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = Unset()


def supplied(**values: Any) -> dict[str, Any]:
    """Keep only the keyword arguments that are not UNSET."""
    return {name: value for name, value in values.items() if value is not UNSET}


def identified(external_id: UUID | None) -> dict[str, UUID]:
    """Keyword arguments carrying a client-supplied external id, if any."""
    return {} if external_id is None else {"external_id": external_id}


def _first_error(error: ValidationError) -> tuple[str, str]:
    details = error.errors()[0]
    location = details.get("loc") or ("value",)
    return str(location[0]), details.get("msg", str(error))


def build(factory: Callable[..., T], **values: Any) -> T:
    """
    Construct a model, reporting validation failures as InvalidArgumentError.

    Raises:
        InvalidArgumentError: Naming the first invalid field
    """
    try:
        return factory(**values)
    except ValidationError as e:
        field, message = _first_error(e)
        raise InvalidArgumentError(field, message) from e


def assign(entity: TEntity, **changes: Any) -> TEntity:
    """
    Apply validated changes to a copy of an entity.

    Raises:
        InvalidArgumentError: Naming the first invalid field
    """
    updated = entity.model_copy(deep=True)
    try:
        for name, value in changes.items():
            setattr(updated, name, value)
    except ValidationError as e:
        field, message = _first_error(e)
        raise InvalidArgumentError(field, message) from e
    return updated


async def load_by_ids(repository: Repository[TEntity], ids: Iterable[int]) -> dict[int, TEntity]:
    """Fetch visible rows by primary key, keyed by id."""
    wanted = sorted(set(ids))
    if not wanted:
        return {}
    rows = await repository.find(Query.where(Filter.in_("id", wanted)))
    return {row.id: row for row in rows}  # type: ignore[misc]


class Service:
    """
    Base for tenant-scoped domain services.

    A service is bound to one request: it receives the ScopedFilter built
    from that request's TenantContext and opens a fresh unit of work with it
    for every operation.

    Args:
        database: Persistence backend
        scoped_filter: Per-request tenant predicates
        tracer: Optional tracer (created from enable_tracing if omitted)
        enable_tracing: Whether to record spans
        clock: Returns the current time; used for scheduling checks
    """

    component = "service"

    def __init__(
        self,
        database: Database,
        scoped_filter: ScopedFilter,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
        clock: Clock = utc_now,
    ) -> None:
        self._database = database
        self._scoped_filter = scoped_filter
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._clock = clock

    @property
    def context(self) -> TenantContext:
        return self._scoped_filter.context

    def _unit_of_work(self) -> UnitOfWork:
        return self._database.session(self._scoped_filter)

    def _span(self, operation: str, attributes: dict[str, Any] | None = None) -> Any:
        span_attributes: dict[str, Any] = {ATTR_TENANT_SCOPED: not self.context.is_unscoped}
        if self.context.tenant_id is not None:
            span_attributes[ATTR_TENANT_ID] = self.context.tenant_id
        span_attributes.update(attributes or {})
        return self._tracer.span(f"boxoffice.{self.component}.{operation}", span_attributes)


__all__ = [
    "Clock",
    "Service",
    "UNSET",
    "Unset",
    "assign",
    "build",
    "identified",
    "load_by_ids",
    "supplied",
]
