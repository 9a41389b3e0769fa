"""Integration tests for ActService."""

from __future__ import annotations

from uuid import uuid4

import pytest

from boxoffice import UNSCOPED, BoxOffice, InvalidArgumentError, NotFoundError, TenantContextRequiredError
from tests.fixtures import SeededTenant, schedule_show


class TestActService:
    """Tests for act CRUD."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, acme: SeededTenant) -> None:
        act = await acme.services.acts.create("Jazz Trio")
        assert act.name == "Jazz Trio"
        assert await acme.services.acts.get_by_external_id(act.external_id) == act

    @pytest.mark.asyncio
    async def test_name_length(self, acme: SeededTenant) -> None:
        await acme.services.acts.create("x" * 100)
        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.acts.create("x" * 101)
        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_name(self, acme: SeededTenant) -> None:
        await acme.services.acts.create("Acrobats")
        names = [a.name for a in await acme.services.acts.get_all()]
        assert names == ["Acrobats", "The Headliners"]
        assert await acme.services.acts.count() == 2

    @pytest.mark.asyncio
    async def test_update_name(self, acme: SeededTenant) -> None:
        updated = await acme.services.acts.update(acme.act.external_id, name="The Openers")
        assert updated.name == "The Openers"
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_update_unknown(self, acme: SeededTenant) -> None:
        with pytest.raises(NotFoundError):
            await acme.services.acts.update(uuid4(), name="Ghost")

    @pytest.mark.asyncio
    async def test_delete_cascades_to_shows(self, acme: SeededTenant) -> None:
        await schedule_show(acme)
        assert await acme.services.acts.delete(acme.act.external_id) is True
        assert await acme.services.shows.list_all() == []
        assert await acme.services.acts.delete(acme.act.external_id) is False

    @pytest.mark.asyncio
    async def test_unscoped_creation_rejected(self, box: BoxOffice) -> None:
        with pytest.raises(TenantContextRequiredError, match="act creation"):
            await box.for_context(UNSCOPED).acts.create("Nobody")
