"""Integration tests for show scheduling."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from boxoffice import BoxOffice, InvalidArgumentError, NotFoundError, TenantMismatchError
from tests.fixtures import FIXED_NOW, FixedClock, SeededTenant, schedule_show

TOMORROW = FIXED_NOW + timedelta(days=1)


class TestCreateShow:
    """Tests for ShowService.create."""

    @pytest.mark.asyncio
    async def test_create(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme, ticket_count=75, start_time=TOMORROW)

        assert show.ticket_count == 75
        assert show.start_time == TOMORROW
        assert show.act_external_id == acme.act.external_id
        assert show.act_name == "The Headliners"
        assert show.venue_external_id == acme.venue.external_id
        assert show.venue_name == "Main Hall"
        assert show.venue_capacity == 100

    @pytest.mark.asyncio
    async def test_ticket_count_may_equal_capacity(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme, ticket_count=100)
        assert show.ticket_count == 100

    @pytest.mark.asyncio
    async def test_ticket_count_over_capacity(self, acme: SeededTenant) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await schedule_show(acme, ticket_count=500)

        assert exc_info.value.field == "ticket_count"
        assert "100" in exc_info.value.message
        assert await acme.services.shows.count() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ticket_count", [0, -1])
    async def test_ticket_count_must_be_positive(self, acme: SeededTenant, ticket_count: int) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await schedule_show(acme, ticket_count=ticket_count)
        assert exc_info.value.field == "ticket_count"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(minutes=-1), timedelta(days=-30)])
    async def test_start_time_must_be_in_the_future(
        self, acme: SeededTenant, offset: timedelta
    ) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await schedule_show(acme, start_time=FIXED_NOW + offset)
        assert exc_info.value.field == "start_time"
        assert exc_info.value.message == "Start time must be in the future"

    @pytest.mark.asyncio
    async def test_future_check_uses_injected_clock(
        self, acme: SeededTenant, clock: FixedClock
    ) -> None:
        clock.advance(days=2)
        with pytest.raises(InvalidArgumentError):
            await schedule_show(acme, start_time=TOMORROW)

    @pytest.mark.asyncio
    async def test_unknown_act_reported_before_venue(self, acme: SeededTenant) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await acme.services.shows.create(uuid4(), uuid4(), 10, TOMORROW)
        assert exc_info.value.entity == "Act"

    @pytest.mark.asyncio
    async def test_unknown_venue(self, acme: SeededTenant) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await acme.services.shows.create(acme.act.external_id, uuid4(), 10, TOMORROW)
        assert exc_info.value.entity == "Venue"

    @pytest.mark.asyncio
    async def test_unscoped_cannot_mix_tenants(
        self, box: BoxOffice, acme: SeededTenant, globex: SeededTenant
    ) -> None:
        with pytest.raises(TenantMismatchError) as exc_info:
            await box.admin().shows.create(
                acme.act.external_id, globex.venue.external_id, 10, TOMORROW
            )
        assert exc_info.value.field == "act_id"
        assert await box.admin().shows.count() == 0

    @pytest.mark.asyncio
    async def test_unscoped_may_schedule_within_one_tenant(
        self, box: BoxOffice, acme: SeededTenant
    ) -> None:
        show = await box.admin().shows.create(acme.act.external_id, acme.venue.external_id, 10, TOMORROW)
        assert (await acme.services.shows.get_by_external_id(show.external_id)) == show


class TestListShows:
    @pytest.mark.asyncio
    async def test_list_by_act_in_creation_order(self, acme: SeededTenant) -> None:
        later = await schedule_show(acme, start_time=TOMORROW + timedelta(days=5))
        earlier = await schedule_show(acme, start_time=TOMORROW)

        shows = await acme.services.shows.list_by_act_external_id(acme.act.external_id)
        assert [s.external_id for s in shows] == [later.external_id, earlier.external_id]

    @pytest.mark.asyncio
    async def test_list_by_act_without_shows(self, acme: SeededTenant) -> None:
        assert await acme.services.shows.list_by_act_external_id(acme.act.external_id) == []

    @pytest.mark.asyncio
    async def test_list_by_unknown_act(self, acme: SeededTenant) -> None:
        with pytest.raises(NotFoundError):
            await acme.services.shows.list_by_act_external_id(uuid4())

    @pytest.mark.asyncio
    async def test_list_all_ordered_by_start_time(self, acme: SeededTenant) -> None:
        later = await schedule_show(acme, start_time=TOMORROW + timedelta(hours=6))
        earlier = await schedule_show(acme, start_time=TOMORROW)

        shows = await acme.services.shows.list_all()
        assert [s.external_id for s in shows] == [earlier.external_id, later.external_id]


class TestUpdateShow:
    """Tests for rescheduling and resizing."""

    @pytest.mark.asyncio
    async def test_reschedule(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme)
        moved = await acme.services.shows.update(show.external_id, start_time=TOMORROW + timedelta(days=7))
        assert moved.start_time == TOMORROW + timedelta(days=7)
        assert moved.ticket_count == show.ticket_count

    @pytest.mark.asyncio
    async def test_reschedule_into_the_past(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme)
        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.shows.update(show.external_id, start_time=FIXED_NOW - timedelta(hours=1))
        assert exc_info.value.field == "start_time"

    @pytest.mark.asyncio
    async def test_resize_over_capacity(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme)
        with pytest.raises(InvalidArgumentError, match="venue capacity of 100"):
            await acme.services.shows.update(show.external_id, ticket_count=101)

    @pytest.mark.asyncio
    async def test_resize_below_allocated_offers(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme, ticket_count=50)
        await acme.services.ticket_offers.create(show.external_id, "General", "20.00", 30)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.shows.update(show.external_id, ticket_count=29)
        assert "30" in exc_info.value.message

        resized = await acme.services.shows.update(show.external_id, ticket_count=30)
        assert resized.ticket_count == 30


class TestDeleteShow:
    @pytest.mark.asyncio
    async def test_delete_cascades_to_offers_and_sales(self, acme: SeededTenant) -> None:
        show = await schedule_show(acme)
        offer = await acme.services.ticket_offers.create(show.external_id, "General", 10, 20)
        sale = await acme.services.ticket_sales.create(show.external_id, 2)

        assert await acme.services.shows.delete(show.external_id) is True

        with pytest.raises(NotFoundError):
            await acme.services.ticket_offers.get_by_external_id(offer.external_id)
        with pytest.raises(NotFoundError):
            await acme.services.ticket_sales.get_by_external_id(sale.external_id)
        assert await acme.services.shows.delete(show.external_id) is False
