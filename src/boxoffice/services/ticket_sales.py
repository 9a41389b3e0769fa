"""Ticket sales."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from boxoffice.models import Act, Show, TicketSale, Venue
from boxoffice.observability import ATTR_EXTERNAL_ID, ATTR_PARENT_EXTERNAL_ID, ATTR_RESULT_COUNT
from boxoffice.persistence.interface import UnitOfWork
from boxoffice.persistence.query import Filter, Query
from boxoffice.services._base import Service, assign, build, identified, load_by_ids
from boxoffice.views import TicketSaleView

logger = logging.getLogger(__name__)


class TicketSaleService(Service):
    """
    Record sales against shows.

    Quantities are recorded as given; they are not checked against the
    show's remaining tickets.
    """

    component = "ticket_sale"

    async def create(
        self,
        show_external_id: UUID,
        quantity: int,
        *,
        external_id: UUID | None = None,
    ) -> TicketSaleView:
        """
        Raises:
            NotFoundError: If the show does not resolve
            InvalidArgumentError: If ``quantity`` is below 1
        """
        with self._span("create", {ATTR_PARENT_EXTERNAL_ID: str(show_external_id)}):
            async with self._unit_of_work() as uow:
                show = await uow.repository(Show).require_by_external_id(show_external_id)
                sale = build(TicketSale, show_id=show.id, quantity=quantity, **identified(external_id))
                stored = await uow.repository(TicketSale).add(sale)
                view = (await self._views(uow, [stored]))[0]
                await uow.commit()

        logger.info("Recorded sale %s of %s ticket(s) for show %s", stored.external_id, quantity, show.external_id)
        return view

    async def get_all(self) -> list[TicketSaleView]:
        with self._span("get_all") as span:
            async with self._unit_of_work() as uow:
                sales = await uow.repository(TicketSale).find(Query().with_order("created_at"))
                views = await self._views(uow, sales)
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(views))
        return views

    async def get_by_external_id(self, external_id: UUID) -> TicketSaleView:
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                sale = await uow.repository(TicketSale).require_by_external_id(external_id)
                return (await self._views(uow, [sale]))[0]

    async def list_by_show(self, show_external_id: UUID) -> list[TicketSaleView]:
        """
        Raises:
            NotFoundError: If the show does not resolve
        """
        with self._span("list_by_show", {ATTR_PARENT_EXTERNAL_ID: str(show_external_id)}):
            async with self._unit_of_work() as uow:
                show = await uow.repository(Show).require_by_external_id(show_external_id)
                sales = await uow.repository(TicketSale).find(
                    Query.where(Filter.eq("show_id", show.id)).with_order("created_at")
                )
                return await self._views(uow, sales)

    async def update(self, external_id: UUID, *, quantity: int) -> TicketSaleView:
        with self._span("update", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                sales = uow.repository(TicketSale)
                sale = await sales.require_by_external_id(external_id)
                stored = await sales.update(assign(sale, quantity=quantity))
                view = (await self._views(uow, [stored]))[0]
                await uow.commit()

        logger.info("Updated sale %s", external_id)
        return view

    async def delete(self, external_id: UUID) -> bool:
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                sales = uow.repository(TicketSale)
                sale = await sales.get_by_external_id(external_id)
                if sale is None:
                    return False
                deleted = await sales.delete(sale)
                await uow.commit()

        logger.info("Deleted sale %s", external_id)
        return deleted

    @staticmethod
    async def _views(uow: UnitOfWork, sales: Iterable[TicketSale]) -> list[TicketSaleView]:
        sales = list(sales)
        shows = await load_by_ids(uow.repository(Show), (sale.show_id for sale in sales))
        venues = await load_by_ids(uow.repository(Venue), (show.venue_id for show in shows.values()))
        acts = await load_by_ids(uow.repository(Act), (show.act_id for show in shows.values()))
        views = []
        for sale in sales:
            show = shows[sale.show_id]
            views.append(TicketSaleView.of(sale, show, venues[show.venue_id], acts[show.act_id]))
        return views


__all__ = ["TicketSaleService"]
