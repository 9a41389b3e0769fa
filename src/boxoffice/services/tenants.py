"""
Tenant administration.

Tenants are not tenant-scoped themselves, so this service is only handed
out by the administrative entry point and always runs unscoped.
"""

from __future__ import annotations

import logging

from boxoffice.exceptions import NotFoundError
from boxoffice.models import Tenant
from boxoffice.observability import ATTR_RESULT_COUNT, ATTR_TENANT_ID
from boxoffice.persistence.query import Filter, Query
from boxoffice.services._base import Service, assign, build
from boxoffice.views import TenantView

logger = logging.getLogger(__name__)


class TenantService(Service):
    component = "tenant"

    async def create(self, name: str, slug: str, identifier: str | None = None) -> TenantView:
        """
        Register an active tenant.

        Args:
            name: Display name
            slug: URL-safe handle (lowercase words joined by hyphens)
            identifier: Identity-provider key; defaults to the slug

        Raises:
            InvalidArgumentError: If a field is invalid
            DuplicateKeyError: If the slug or identifier is already taken
        """
        with self._span("create"):
            tenant = build(Tenant, name=name, slug=slug, identifier=identifier or slug)
            async with self._unit_of_work() as uow:
                stored = await uow.repository(Tenant).add(tenant)
                await uow.commit()

        logger.info("Created tenant %s (%s) with id %s", stored.slug, stored.identifier, stored.id)
        return TenantView.of(stored)

    async def get_by_id(self, tenant_id: int) -> TenantView:
        with self._span("get", {ATTR_TENANT_ID: tenant_id}):
            async with self._unit_of_work() as uow:
                tenant = await uow.repository(Tenant).get(tenant_id)
        if tenant is None:
            raise NotFoundError(Tenant.entity_name(), tenant_id)
        return TenantView.of(tenant)

    async def get_by_slug(self, slug: str) -> TenantView:
        return await self._get_by("slug", slug)

    async def get_by_identifier(self, identifier: str) -> TenantView:
        return await self._get_by("identifier", identifier)

    async def get_all(self) -> list[TenantView]:
        with self._span("get_all") as span:
            async with self._unit_of_work() as uow:
                tenants = await uow.repository(Tenant).find(Query().with_order("slug"))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(tenants))
        return [TenantView.of(tenant) for tenant in tenants]

    async def deactivate(self, tenant_id: int) -> TenantView:
        """
        Mark a tenant inactive. Existing data is kept and stays readable;
        new venues, acts and customers can no longer be created for it.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        with self._span("deactivate", {ATTR_TENANT_ID: tenant_id}):
            async with self._unit_of_work() as uow:
                tenants = uow.repository(Tenant)
                tenant = await tenants.get(tenant_id)
                if tenant is None:
                    raise NotFoundError(Tenant.entity_name(), tenant_id)
                stored = await tenants.update(assign(tenant, is_active=False))
                await uow.commit()

        logger.info("Deactivated tenant %s", stored.slug)
        return TenantView.of(stored)

    async def _get_by(self, field: str, value: str) -> TenantView:
        with self._span(f"get_by_{field}"):
            async with self._unit_of_work() as uow:
                tenant = await uow.repository(Tenant).first(Query.where(Filter.eq(field, value)))
        if tenant is None:
            raise NotFoundError(Tenant.entity_name(), value)
        return TenantView.of(tenant)


__all__ = ["TenantService"]
