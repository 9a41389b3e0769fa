"""Integration tests for tenant administration."""

from __future__ import annotations

import pytest

from boxoffice import BoxOffice, DuplicateKeyError, InvalidArgumentError, NotFoundError
from tests.fixtures import SeededTenant, schedule_show


class TestTenantService:
    """Tests for creating and looking up tenants."""

    @pytest.mark.asyncio
    async def test_create_defaults_identifier_to_slug(self, box: BoxOffice) -> None:
        tenant = await box.admin().tenants.create("Acme Events", "acme-events")

        assert tenant.id is not None
        assert tenant.identifier == "acme-events"
        assert tenant.is_active is True

    @pytest.mark.asyncio
    async def test_lookups(self, box: BoxOffice) -> None:
        tenants = box.admin().tenants
        created = await tenants.create("Acme Events", "acme", identifier="idp|acme")

        assert await tenants.get_by_id(created.id) == created
        assert await tenants.get_by_slug("acme") == created
        assert await tenants.get_by_identifier("idp|acme") == created

    @pytest.mark.asyncio
    async def test_missing_tenant(self, box: BoxOffice) -> None:
        tenants = box.admin().tenants
        with pytest.raises(NotFoundError):
            await tenants.get_by_id(999)
        with pytest.raises(NotFoundError):
            await tenants.get_by_slug("nobody")
        with pytest.raises(NotFoundError):
            await tenants.deactivate(999)

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, box: BoxOffice) -> None:
        tenants = box.admin().tenants
        await tenants.create("Acme", "acme")
        with pytest.raises(DuplicateKeyError) as exc_info:
            await tenants.create("Acme Two", "acme", identifier="other")
        assert exc_info.value.field == "slug"

    @pytest.mark.asyncio
    async def test_duplicate_identifier(self, box: BoxOffice) -> None:
        tenants = box.admin().tenants
        await tenants.create("Acme", "acme", identifier="shared")
        with pytest.raises(DuplicateKeyError) as exc_info:
            await tenants.create("Globex", "globex", identifier="shared")
        assert exc_info.value.field == "identifier"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["Acme", "acme events", "acme_events"])
    async def test_invalid_slug(self, box: BoxOffice, slug: str) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await box.admin().tenants.create("Acme", slug)
        assert exc_info.value.field == "slug"

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_slug(
        self, box: BoxOffice, acme: SeededTenant, globex: SeededTenant
    ) -> None:
        await box.admin().tenants.create("Beta", "beta")
        slugs = [t.slug for t in await box.admin().tenants.get_all()]
        assert slugs == ["acme", "beta", "globex"]


class TestDeactivate:
    @pytest.mark.asyncio
    async def test_blocks_new_root_entities(self, box: BoxOffice, acme: SeededTenant) -> None:
        tenant = await box.admin().tenants.deactivate(acme.tenant.id)
        assert tenant.is_active is False

        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.venues.create("Annex", 10)
        assert exc_info.value.field == "tenant_id"
        with pytest.raises(InvalidArgumentError):
            await acme.services.acts.create("Encore")

    @pytest.mark.asyncio
    async def test_existing_data_stays_readable(self, box: BoxOffice, acme: SeededTenant) -> None:
        show = await schedule_show(acme)
        await box.admin().tenants.deactivate(acme.tenant.id)

        assert (await acme.services.venues.get_by_external_id(acme.venue.external_id)).name == "Main Hall"
        assert (await acme.services.shows.get_by_external_id(show.external_id)) == show
