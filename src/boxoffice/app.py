"""
Application facade.

BoxOffice owns the persistence backend and hands out service bundles bound
to a tenant context:

- ``for_claims(claims)``: the path for authenticated requests; always scoped
- ``for_context(context)``: any explicit context, scoped or unscoped
- ``admin()``: unscoped services plus tenant administration

Example:
    >>> async with BoxOffice.create(BoxOfficeConfig(backend="sqlite")) as box:
    ...     tenant = await box.admin().tenants.create("Acme Events", "acme")
    ...     services = box.for_context(TenantContext.for_tenant(tenant.id))
    ...     venue = await services.venues.create("Main Hall", seating_capacity=500)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from sqlalchemy.ext.asyncio import create_async_engine

from boxoffice.config import BoxOfficeConfig
from boxoffice.observability import Tracer, create_tracer
from boxoffice.persistence.base import BaseDatabase, utc_now
from boxoffice.persistence.in_memory import InMemoryDatabase
from boxoffice.persistence.postgresql import PostgreSQLDatabase
from boxoffice.persistence.sqlite import SQLiteDatabase
from boxoffice.services import (
    ActService,
    Clock,
    CustomerService,
    ShowService,
    TenantService,
    TicketOfferService,
    TicketSaleService,
    VenueService,
)
from boxoffice.tenancy.context import UNSCOPED, TenantContext, tenant_context_from_claims

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantServices:
    """Domain services sharing one tenant context."""

    context: TenantContext
    venues: VenueService
    acts: ActService
    shows: ShowService
    ticket_offers: TicketOfferService
    ticket_sales: TicketSaleService
    customers: CustomerService


@dataclass(frozen=True)
class AdminServices(TenantServices):
    """Unscoped services plus tenant administration."""

    tenants: TenantService


def create_database(config: BoxOfficeConfig, tracer: Tracer | None = None) -> BaseDatabase:
    """Build the persistence backend selected by ``config.backend``."""
    if config.backend == "sqlite":
        return SQLiteDatabase(
            config.sqlite_path,
            busy_timeout=config.busy_timeout,
            tracer=tracer,
            enable_tracing=config.enable_tracing,
        )
    if config.backend == "postgresql":
        engine = create_async_engine(config.postgresql_url)  # type: ignore[arg-type]
        return PostgreSQLDatabase(engine, tracer=tracer, enable_tracing=config.enable_tracing)
    return InMemoryDatabase(tracer=tracer, enable_tracing=config.enable_tracing)


class BoxOffice:
    """
    Entry point tying a database to the domain services.

    Args:
        database: Persistence backend
        config: Application settings (defaults to BoxOfficeConfig())
        tracer: Optional tracer shared by all services
        clock: Current time source for scheduling checks
    """

    def __init__(
        self,
        database: BaseDatabase,
        config: BoxOfficeConfig | None = None,
        *,
        tracer: Tracer | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._database = database
        self._config = config or BoxOfficeConfig()
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._clock = clock

    @classmethod
    def create(
        cls,
        config: BoxOfficeConfig | None = None,
        *,
        tracer: Tracer | None = None,
        clock: Clock = utc_now,
    ) -> BoxOffice:
        """Build a BoxOffice with the backend the configuration names."""
        config = config or BoxOfficeConfig()
        return cls(create_database(config, tracer), config, tracer=tracer, clock=clock)

    @property
    def database(self) -> BaseDatabase:
        return self._database

    @property
    def config(self) -> BoxOfficeConfig:
        return self._config

    async def initialize(self) -> None:
        await self._database.initialize()
        logger.info("BoxOffice initialized with %s backend", self._database.system)

    async def close(self) -> None:
        await self._database.close()

    async def __aenter__(self) -> BoxOffice:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def for_context(self, context: TenantContext) -> TenantServices:
        """Services bound to an explicit tenant context."""
        return TenantServices(context=context, **self._services(context))

    def for_claims(self, claims: Mapping[str, Any] | None) -> TenantServices:
        """
        Services for an authenticated request.

        Raises:
            TenantContextRequiredError: If the claims carry no usable tenant id
        """
        return self.for_context(tenant_context_from_claims(claims))

    def admin(self) -> AdminServices:
        """Unscoped services, including tenant administration."""
        logger.debug("Handing out unscoped services")
        services = self._services(UNSCOPED)
        scoped_filter = self._database.scoped_filter(UNSCOPED)
        tenants = TenantService(self._database, scoped_filter, tracer=self._tracer, clock=self._clock)
        return AdminServices(context=UNSCOPED, tenants=tenants, **services)

    def _services(self, context: TenantContext) -> dict[str, Any]:
        scoped_filter = self._database.scoped_filter(context)
        options: dict[str, Any] = {"tracer": self._tracer, "clock": self._clock}
        return {
            "venues": VenueService(self._database, scoped_filter, **options),
            "acts": ActService(self._database, scoped_filter, **options),
            "shows": ShowService(
                self._database, scoped_filter, nearby_window=self._config.nearby_window, **options
            ),
            "ticket_offers": TicketOfferService(self._database, scoped_filter, **options),
            "ticket_sales": TicketSaleService(self._database, scoped_filter, **options),
            "customers": CustomerService(self._database, scoped_filter, **options),
        }


__all__ = ["AdminServices", "BoxOffice", "TenantServices", "create_database"]
