"""
Integration tests for the nearby-show query.

The window is closed at both ends and compared on absolute instants, so the
boundary cases below mix UTC offsets on purpose.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from boxoffice import BoxOffice, BoxOfficeConfig, InvalidArgumentError, NotFoundError
from tests.fixtures import FIXED_NOW, FixedClock, SeededTenant, schedule_show, seed_tenant

REFERENCE = FIXED_NOW + timedelta(days=5)
WINDOW = timedelta(hours=48)
IST = timezone(timedelta(hours=5, minutes=30))
PST = timezone(timedelta(hours=-8))


class TestNearbyWindow:
    """Tests for the window boundaries."""

    @pytest.mark.asyncio
    async def test_boundaries_are_inclusive(self, acme: SeededTenant) -> None:
        after = await schedule_show(acme, ticket_count=10, start_time=REFERENCE + WINDOW)
        before = await schedule_show(acme, ticket_count=10, start_time=REFERENCE - WINDOW)

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert [s.show_external_id for s in result.shows] == [before.external_id, after.external_id]

    @pytest.mark.asyncio
    async def test_one_second_outside_is_excluded(self, acme: SeededTenant) -> None:
        await schedule_show(acme, ticket_count=10, start_time=REFERENCE + WINDOW + timedelta(seconds=1))
        await schedule_show(acme, ticket_count=10, start_time=REFERENCE - WINDOW - timedelta(seconds=1))

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert result.shows == ()
        assert result.message == "No other shows scheduled at this venue within 48 hours"

    @pytest.mark.asyncio
    async def test_one_microsecond_outside_is_excluded(self, acme: SeededTenant) -> None:
        edge = await schedule_show(acme, ticket_count=10, start_time=REFERENCE + WINDOW)
        await schedule_show(acme, ticket_count=10, start_time=REFERENCE + WINDOW + timedelta(microseconds=1))
        await schedule_show(acme, ticket_count=10, start_time=REFERENCE - WINDOW - timedelta(microseconds=300))

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert [s.show_external_id for s in result.shows] == [edge.external_id]

    @pytest.mark.asyncio
    async def test_ordered_below_a_millisecond(self, acme: SeededTenant) -> None:
        later = await schedule_show(acme, ticket_count=10, start_time=REFERENCE + timedelta(microseconds=400))
        earlier = await schedule_show(
            acme, ticket_count=10, start_time=(REFERENCE + timedelta(microseconds=100)).astimezone(PST)
        )

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert [s.show_external_id for s in result.shows] == [earlier.external_id, later.external_id]

    @pytest.mark.asyncio
    async def test_boundary_with_mixed_offsets(self, acme: SeededTenant) -> None:
        edge = (REFERENCE + WINDOW).astimezone(IST)
        outside = (REFERENCE + WINDOW + timedelta(seconds=1)).astimezone(IST)
        included = await schedule_show(acme, ticket_count=10, start_time=edge)
        await schedule_show(acme, ticket_count=10, start_time=outside)

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE.astimezone(PST))

        assert [s.show_external_id for s in result.shows] == [included.external_id]
        assert result.shows[0].start_time == edge

    @pytest.mark.asyncio
    async def test_ordered_by_instant_not_wall_clock(self, acme: SeededTenant) -> None:
        # 23:00 PST is 07:00 UTC the next day; 10:00 IST is 04:30 UTC the same day.
        day = REFERENCE.date()
        late_wall_clock_early_instant = datetime(day.year, day.month, day.day, 10, 0, tzinfo=IST)
        early_wall_clock_late_instant = datetime(day.year, day.month, day.day, 23, 0, tzinfo=PST)
        second = await schedule_show(acme, ticket_count=10, start_time=early_wall_clock_late_instant)
        first = await schedule_show(acme, ticket_count=10, start_time=late_wall_clock_early_instant)

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert [s.show_external_id for s in result.shows] == [first.external_id, second.external_id]
        assert result.message == "2 show(s) found within 48 hours"


class TestNearbyResult:
    @pytest.mark.asyncio
    async def test_result_describes_venue_and_acts(self, acme: SeededTenant) -> None:
        await schedule_show(acme, ticket_count=10, start_time=REFERENCE)

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)

        assert result.venue_external_id == acme.venue.external_id
        assert result.venue_name == "Main Hall"
        assert result.reference_time == REFERENCE
        assert result.shows[0].act_name == "The Headliners"
        assert result.message == "1 show(s) found within 48 hours"

    @pytest.mark.asyncio
    async def test_only_shows_at_the_venue(self, acme: SeededTenant) -> None:
        other = await acme.services.venues.create("Side Stage", 50)
        await acme.services.shows.create(acme.act.external_id, other.external_id, 10, REFERENCE)

        result = await acme.services.shows.nearby(acme.venue.external_id, REFERENCE)
        assert result.shows == ()

    @pytest.mark.asyncio
    async def test_other_tenants_venue_not_found(
        self, acme: SeededTenant, globex: SeededTenant
    ) -> None:
        await schedule_show(globex, ticket_count=10, start_time=REFERENCE)
        with pytest.raises(NotFoundError):
            await acme.services.shows.nearby(globex.venue.external_id, REFERENCE)

    @pytest.mark.asyncio
    async def test_unknown_venue(self, acme: SeededTenant) -> None:
        with pytest.raises(NotFoundError):
            await acme.services.shows.nearby(uuid4(), REFERENCE)

    @pytest.mark.asyncio
    async def test_reference_time_needs_offset(self, acme: SeededTenant) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await acme.services.shows.nearby(acme.venue.external_id, datetime(2030, 6, 6, 12))
        assert exc_info.value.field == "reference_time"


class TestConfiguredWindow:
    @pytest.mark.asyncio
    async def test_window_from_config(self, database, clock: FixedClock) -> None:
        box = BoxOffice(
            database,
            BoxOfficeConfig(nearby_window=timedelta(hours=2), enable_tracing=False),
            clock=clock,
        )
        seeded = await seed_tenant(box, "initech")
        await schedule_show(seeded, ticket_count=10, start_time=REFERENCE + timedelta(hours=2))
        await schedule_show(seeded, ticket_count=10, start_time=REFERENCE + timedelta(hours=3))

        result = await seeded.services.shows.nearby(seeded.venue.external_id, REFERENCE)

        assert len(result.shows) == 1
        assert result.message == "1 show(s) found within 2 hours"
