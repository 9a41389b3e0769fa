"""Customer records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from boxoffice.models import Address, Customer
from boxoffice.observability import ATTR_EXTERNAL_ID, ATTR_RESULT_COUNT
from boxoffice.persistence.query import Query
from boxoffice.services._base import UNSET, Service, assign, build, identified, supplied
from boxoffice.tenancy.context import require_tenant_id
from boxoffice.views import CustomerView

logger = logging.getLogger(__name__)

AddressInput = Address | Mapping[str, Any]


class CustomerService(Service):
    component = "customer"

    async def create(
        self,
        name: str,
        billing_address: AddressInput,
        shipping_address: AddressInput | None = None,
        *,
        external_id: UUID | None = None,
    ) -> CustomerView:
        """
        Register a customer for the current tenant.

        Addresses may be given as Address instances or plain mappings.

        Raises:
            TenantContextRequiredError: If the context is unscoped
            InvalidArgumentError: If the name or an address field is invalid
        """
        tenant_id = require_tenant_id(self.context, "customer creation")
        with self._span("create"):
            customer = build(
                Customer,
                tenant_id=tenant_id,
                name=name,
                billing_address=billing_address,
                shipping_address=shipping_address,
                **identified(external_id),
            )
            async with self._unit_of_work() as uow:
                stored = await uow.repository(Customer).add(customer)
                await uow.commit()

        logger.info("Created customer %s for tenant %s", stored.external_id, tenant_id)
        return CustomerView.of(stored)

    async def get_all(self) -> list[CustomerView]:
        with self._span("get_all") as span:
            async with self._unit_of_work() as uow:
                customers = await uow.repository(Customer).find(Query().with_order("name"))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(customers))
        return [CustomerView.of(customer) for customer in customers]

    async def get_by_external_id(self, external_id: UUID) -> CustomerView:
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                customer = await uow.repository(Customer).require_by_external_id(external_id)
        return CustomerView.of(customer)

    async def update(
        self,
        external_id: UUID,
        *,
        name: Any = UNSET,
        billing_address: Any = UNSET,
        shipping_address: Any = UNSET,
    ) -> CustomerView:
        """Partial update; pass ``shipping_address=None`` to clear it."""
        changes = supplied(name=name, billing_address=billing_address, shipping_address=shipping_address)
        with self._span("update", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                customers = uow.repository(Customer)
                customer = await customers.require_by_external_id(external_id)
                stored = await customers.update(assign(customer, **changes))
                await uow.commit()

        logger.info("Updated customer %s", external_id)
        return CustomerView.of(stored)

    async def delete(self, external_id: UUID) -> bool:
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                customers = uow.repository(Customer)
                customer = await customers.get_by_external_id(external_id)
                if customer is None:
                    return False
                deleted = await customers.delete(customer)
                await uow.commit()

        logger.info("Deleted customer %s", external_id)
        return deleted


__all__ = ["CustomerService", "AddressInput"]
