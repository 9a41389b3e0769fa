"""Integration tests for customers."""

from __future__ import annotations

import pytest

from boxoffice import UNSCOPED, Address, BoxOffice, InvalidArgumentError, TenantContextRequiredError
from tests.fixtures import SeededTenant

BILLING = {
    "street_line1": "1 Main St",
    "city": "Springfield",
    "state_or_province": "IL",
    "postal_code": "62701",
    "country": "US",
}


class TestCustomerService:
    """Tests for customer CRUD."""

    @pytest.mark.asyncio
    async def test_create_from_mapping(self, acme: SeededTenant) -> None:
        customer = await acme.services.customers.create("Ada Lovelace", BILLING)

        assert customer.billing_address == Address(**BILLING)
        assert customer.shipping_address is None
        assert await acme.services.customers.get_by_external_id(customer.external_id) == customer

    @pytest.mark.asyncio
    async def test_create_with_shipping_address(self, acme: SeededTenant) -> None:
        shipping = Address(**{**BILLING, "street_line2": "Apt 4", "city": "Shelbyville"})
        customer = await acme.services.customers.create("Ada", BILLING, shipping)
        fetched = await acme.services.customers.get_by_external_id(customer.external_id)
        assert fetched.shipping_address == shipping

    @pytest.mark.asyncio
    async def test_invalid_address(self, acme: SeededTenant) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.customers.create("Ada", {**BILLING, "postal_code": ""})
        assert exc_info.value.field == "billing_address"

    @pytest.mark.asyncio
    async def test_partial_update(self, acme: SeededTenant) -> None:
        customers = acme.services.customers
        customer = await customers.create("Ada", BILLING, BILLING)

        renamed = await customers.update(customer.external_id, name="Ada King")
        assert renamed.name == "Ada King"
        assert renamed.shipping_address == Address(**BILLING)

        cleared = await customers.update(customer.external_id, shipping_address=None)
        assert cleared.shipping_address is None
        assert cleared.name == "Ada King"

    @pytest.mark.asyncio
    async def test_get_all_and_delete(self, acme: SeededTenant) -> None:
        customers = acme.services.customers
        zoe = await customers.create("Zoe", BILLING)
        await customers.create("Ada", BILLING)

        assert [c.name for c in await customers.get_all()] == ["Ada", "Zoe"]
        assert await customers.delete(zoe.external_id) is True
        assert [c.name for c in await customers.get_all()] == ["Ada"]

    @pytest.mark.asyncio
    async def test_unscoped_creation_rejected(self, box: BoxOffice) -> None:
        with pytest.raises(TenantContextRequiredError, match="customer creation"):
            await box.for_context(UNSCOPED).customers.create("Ada", BILLING)
