"""
Show scheduling.

A show binds an act to a venue at a point in time. It has no tenant column
of its own: it is visible exactly when its venue is, and creation refuses
to bind an act and a venue that belong to different tenants.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from boxoffice.models import Act, Show, TicketOffer, Venue
from boxoffice.observability import (
    ATTR_EXTERNAL_ID,
    ATTR_PARENT_EXTERNAL_ID,
    ATTR_RESULT_COUNT,
    ATTR_TICKET_COUNT,
    Tracer,
)
from boxoffice.persistence.base import utc_now
from boxoffice.persistence.interface import Database, UnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.services._base import UNSET, Clock, Service, assign, build, identified, load_by_ids, supplied
from boxoffice.services.capacity import check_show_ticket_count, check_show_ticket_reduction
from boxoffice.services.scheduling import (
    NEARBY_WINDOW,
    check_future_start,
    nearby_message,
    require_aware,
    window_bounds,
)
from boxoffice.tenancy.filters import ScopedFilter
from boxoffice.views import NearbyShow, NearbyShowsView, ShowView

logger = logging.getLogger(__name__)


async def allocated_tickets(uow: UnitOfWork, show: Show) -> int:
    """Sum of the ticket counts of a show's offers."""
    offers = await uow.repository(TicketOffer).find(Query.where(Filter.eq("show_id", show.id)))
    return sum(offer.ticket_count for offer in offers)


class ShowService(Service):
    """
    Schedule shows and answer the nearby-show query.

    Args:
        database: Persistence backend
        scoped_filter: Per-request tenant predicates
        tracer: Optional tracer
        enable_tracing: Whether to record spans
        clock: Current time, used for the future-start check
        nearby_window: Half-width of the nearby-show window
    """

    component = "show"

    def __init__(
        self,
        database: Database,
        scoped_filter: ScopedFilter,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
        clock: Clock = utc_now,
        nearby_window: timedelta = NEARBY_WINDOW,
    ) -> None:
        super().__init__(
            database, scoped_filter, tracer=tracer, enable_tracing=enable_tracing, clock=clock
        )
        self._nearby_window = nearby_window

    async def create(
        self,
        act_external_id: UUID,
        venue_external_id: UUID,
        ticket_count: int,
        start_time: datetime,
        *,
        external_id: UUID | None = None,
    ) -> ShowView:
        """
        Schedule an act at a venue.

        The act is resolved first, then the venue; both must be visible in
        the current context. The venue row is locked before its capacity is
        read.

        Raises:
            NotFoundError: If the act or the venue does not resolve
            InvalidArgumentError: If ``start_time`` is not in the future, or
                ``ticket_count`` is not positive or exceeds the venue capacity
            TenantMismatchError: If the act and venue belong to different tenants
        """
        attributes = {
            ATTR_PARENT_EXTERNAL_ID: str(venue_external_id),
            ATTR_TICKET_COUNT: ticket_count,
        }
        with self._span("create", attributes):
            async with self._unit_of_work() as uow:
                act = await uow.repository(Act).require_by_external_id(act_external_id)
                venues = uow.repository(Venue)
                venue = await venues.require_by_external_id(venue_external_id)
                await venues.lock(venue)

                check_future_start(start_time, self._clock())
                check_show_ticket_count(ticket_count, venue.seating_capacity)

                show = build(
                    Show,
                    venue_id=venue.id,
                    act_id=act.id,
                    ticket_count=ticket_count,
                    start_time=start_time,
                    **identified(external_id),
                )
                stored = await uow.repository(Show).add(show)
                await uow.commit()

        logger.info(
            "Scheduled show %s: act %s at venue %s (%s tickets)",
            stored.external_id,
            act.external_id,
            venue.external_id,
            ticket_count,
        )
        return ShowView.of(stored, venue, act)

    async def get_by_external_id(self, external_id: UUID) -> ShowView:
        """
        Raises:
            NotFoundError: If no visible show has this id
        """
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                show = await uow.repository(Show).require_by_external_id(external_id)
                venue = await uow.repository(Venue).get(show.venue_id)
                act = await uow.repository(Act).get(show.act_id)
        return ShowView.of(show, venue, act)  # type: ignore[arg-type]

    async def list_by_act_external_id(self, act_external_id: UUID) -> list[ShowView]:
        """
        Shows of an act, in creation order. An act without shows gives [].

        Raises:
            NotFoundError: If the act does not resolve
        """
        with self._span("list_by_act", {ATTR_PARENT_EXTERNAL_ID: str(act_external_id)}) as span:
            async with self._unit_of_work() as uow:
                act = await uow.repository(Act).require_by_external_id(act_external_id)
                shows = await uow.repository(Show).find(Query.where(Filter.eq("act_id", act.id)))
                venues = await load_by_ids(uow.repository(Venue), (s.venue_id for s in shows))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(shows))
        return [ShowView.of(show, venues[show.venue_id], act) for show in shows]

    async def list_all(self) -> list[ShowView]:
        """Every visible show, ordered by start time."""
        with self._span("list_all") as span:
            async with self._unit_of_work() as uow:
                shows = await uow.repository(Show).find(Query().with_order("start_time"))
                venues = await load_by_ids(uow.repository(Venue), (s.venue_id for s in shows))
                acts = await load_by_ids(uow.repository(Act), (s.act_id for s in shows))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(shows))
        return [ShowView.of(show, venues[show.venue_id], acts[show.act_id]) for show in shows]

    async def update(
        self,
        external_id: UUID,
        *,
        start_time: Any = UNSET,
        ticket_count: Any = UNSET,
    ) -> ShowView:
        """
        Reschedule a show or change its ticket count.

        A new start time must be in the future. A new ticket count must fit
        the venue and may not drop below the tickets already allocated to
        offers.

        Raises:
            NotFoundError: If no visible show has this id
            InvalidArgumentError: If a new value breaks one of the rules above
        """
        changes = supplied(start_time=start_time, ticket_count=ticket_count)
        with self._span("update", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                shows = uow.repository(Show)
                show = await shows.require_by_external_id(external_id)
                await shows.lock(show)
                venue = await uow.repository(Venue).get(show.venue_id)
                act = await uow.repository(Act).get(show.act_id)

                if "start_time" in changes:
                    check_future_start(changes["start_time"], self._clock())
                if "ticket_count" in changes:
                    check_show_ticket_count(changes["ticket_count"], venue.seating_capacity)  # type: ignore[union-attr]
                    check_show_ticket_reduction(
                        changes["ticket_count"], await allocated_tickets(uow, show)
                    )

                stored = await shows.update(assign(show, **changes))
                await uow.commit()

        logger.info("Updated show %s", external_id)
        return ShowView.of(stored, venue, act)  # type: ignore[arg-type]

    async def delete(self, external_id: UUID) -> bool:
        """Delete a show with its offers and sales. Returns False if not visible."""
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                shows = uow.repository(Show)
                show = await shows.get_by_external_id(external_id)
                if show is None:
                    return False
                deleted = await shows.delete(show)
                await uow.commit()

        logger.info("Deleted show %s", external_id)
        return deleted

    async def nearby(self, venue_external_id: UUID, reference_time: datetime) -> NearbyShowsView:
        """
        Shows at a venue starting within the nearby window around a time.

        The window is closed on both ends and compared on absolute instants,
        so a show exactly ``nearby_window`` away is included whatever offset
        either timestamp carries. Results are ordered by start time.

        Raises:
            NotFoundError: If the venue does not resolve
            InvalidArgumentError: If ``reference_time`` has no offset
        """
        require_aware("reference_time", reference_time)
        earliest, latest = window_bounds(reference_time, self._nearby_window)

        with self._span("nearby", {ATTR_PARENT_EXTERNAL_ID: str(venue_external_id)}) as span:
            async with self._unit_of_work() as uow:
                venue = await uow.repository(Venue).require_by_external_id(venue_external_id)
                shows = await uow.repository(Show).find(
                    Query.where(Filter.eq("venue_id", venue.id), *Filter.between("start_time", earliest, latest))
                    .with_order("start_time")
                )
                acts = await load_by_ids(uow.repository(Act), (s.act_id for s in shows))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(shows))

        logger.debug(
            "Found %d show(s) at venue %s between %s and %s",
            len(shows),
            venue_external_id,
            earliest.isoformat(),
            latest.isoformat(),
        )
        return NearbyShowsView(
            venue_external_id=venue.external_id,
            venue_name=venue.name,
            reference_time=reference_time,
            shows=tuple(
                NearbyShow(
                    show_external_id=show.external_id,
                    act_name=acts[show.act_id].name,
                    start_time=show.start_time,
                )
                for show in shows
            ),
            message=nearby_message(len(shows), self._nearby_window),
        )

    async def count(self) -> int:
        with self._span("count"):
            async with self._unit_of_work() as uow:
                return await uow.repository(Show).count()


__all__ = ["ShowService", "allocated_tickets"]
