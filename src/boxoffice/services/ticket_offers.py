"""
Ticket offers and show capacity.

Offers partition a show's ticket count. The running total is computed
from the offers themselves inside the unit of work that writes the new
offer, after the show row has been locked, so two concurrent creations
for the same show cannot both pass the check.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from boxoffice.models import Show, TicketOffer
from boxoffice.observability import (
    ATTR_ALLOCATED_TICKETS,
    ATTR_EXTERNAL_ID,
    ATTR_PARENT_EXTERNAL_ID,
    ATTR_RESULT_COUNT,
    ATTR_TICKET_COUNT,
)
from boxoffice.persistence.query import Filter, Query
from boxoffice.services._base import Service, build, identified, load_by_ids
from boxoffice.services.capacity import Allocation, check_offer_allocation, parse_price, require_positive
from boxoffice.services.shows import allocated_tickets
from boxoffice.views import ShowCapacityView, TicketOfferView

logger = logging.getLogger(__name__)


class TicketOfferService(Service):
    component = "ticket_offer"

    async def create(
        self,
        show_external_id: UUID,
        name: str,
        price: Decimal | int | float | str,
        ticket_count: int,
        *,
        external_id: UUID | None = None,
    ) -> TicketOfferView:
        """
        Carve a priced allocation out of a show's remaining tickets.

        Raises:
            NotFoundError: If the show does not resolve
            InvalidArgumentError: On ``price`` if it is not positive, on
                ``ticket_count`` if it is not positive or exceeds what is left
        """
        attributes = {
            ATTR_PARENT_EXTERNAL_ID: str(show_external_id),
            ATTR_TICKET_COUNT: ticket_count,
        }
        with self._span("create", attributes) as span:
            async with self._unit_of_work() as uow:
                shows = uow.repository(Show)
                show = await shows.require_by_external_id(show_external_id)

                amount = parse_price(price)
                require_positive("ticket_count", ticket_count, "Ticket count")

                await shows.lock(show)
                allocation = Allocation(total=show.ticket_count, allocated=await allocated_tickets(uow, show))
                if span is not None:
                    span.set_attribute(ATTR_ALLOCATED_TICKETS, allocation.allocated)
                check_offer_allocation(ticket_count, allocation)

                offer = build(
                    TicketOffer,
                    show_id=show.id,
                    name=name,
                    price=amount,
                    ticket_count=ticket_count,
                    **identified(external_id),
                )
                stored = await uow.repository(TicketOffer).add(offer)
                await uow.commit()

        logger.info(
            "Created ticket offer %s for show %s: %s tickets, %s left",
            stored.external_id,
            show.external_id,
            ticket_count,
            allocation.available - ticket_count,
        )
        return TicketOfferView.of(stored, show)

    async def list_by_show(self, show_external_id: UUID) -> list[TicketOfferView]:
        """
        Offers of a show in creation order.

        Raises:
            NotFoundError: If the show does not resolve
        """
        with self._span("list_by_show", {ATTR_PARENT_EXTERNAL_ID: str(show_external_id)}) as span:
            async with self._unit_of_work() as uow:
                show = await uow.repository(Show).require_by_external_id(show_external_id)
                offers = await uow.repository(TicketOffer).find(
                    Query.where(Filter.eq("show_id", show.id)).with_order("created_at")
                )
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(offers))
        return [TicketOfferView.of(offer, show) for offer in offers]

    async def capacity_summary(self, show_external_id: UUID) -> ShowCapacityView:
        """
        Raises:
            NotFoundError: If the show does not resolve
        """
        with self._span("capacity_summary", {ATTR_PARENT_EXTERNAL_ID: str(show_external_id)}):
            async with self._unit_of_work() as uow:
                show = await uow.repository(Show).require_by_external_id(show_external_id)
                allocation = Allocation(total=show.ticket_count, allocated=await allocated_tickets(uow, show))
        return ShowCapacityView(
            show_external_id=show.external_id,
            total_tickets=allocation.total,
            allocated_tickets=allocation.allocated,
            available_capacity=allocation.available,
        )

    async def get_by_external_id(self, external_id: UUID) -> TicketOfferView:
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                offer = await uow.repository(TicketOffer).require_by_external_id(external_id)
                shows = await load_by_ids(uow.repository(Show), [offer.show_id])
        return TicketOfferView.of(offer, shows[offer.show_id])

    async def delete(self, external_id: UUID) -> bool:
        """Delete an offer, releasing its tickets. Returns False if not visible."""
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                offers = uow.repository(TicketOffer)
                offer = await offers.get_by_external_id(external_id)
                if offer is None:
                    return False
                deleted = await offers.delete(offer)
                await uow.commit()

        logger.info("Deleted ticket offer %s", external_id)
        return deleted


__all__ = ["TicketOfferService"]
