"""Venue management."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from boxoffice.models import GeoPoint, Show, Venue
from boxoffice.observability import ATTR_EXTERNAL_ID, ATTR_RESULT_COUNT
from boxoffice.persistence.query import Filter, Query
from boxoffice.services._base import UNSET, Service, assign, build, identified, supplied
from boxoffice.services.capacity import check_venue_capacity_reduction
from boxoffice.tenancy.context import require_tenant_id
from boxoffice.views import VenueView

logger = logging.getLogger(__name__)


class VenueService(Service):
    """
    Create, read, update and delete venues of the current tenant.

    Venues are root-scoped: they carry the tenant id directly, taken from
    the request context at creation.
    """

    component = "venue"

    async def create(
        self,
        name: str,
        seating_capacity: int,
        *,
        address: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        description: str | None = None,
        external_id: UUID | None = None,
    ) -> VenueView:
        """
        Create a venue owned by the current tenant.

        Raises:
            TenantContextRequiredError: If the context is unscoped
            InvalidArgumentError: If a field is invalid
            DuplicateKeyError: If ``external_id`` is already taken
        """
        tenant_id = require_tenant_id(self.context, "venue creation")
        with self._span("create"):
            venue = build(
                Venue,
                tenant_id=tenant_id,
                name=name,
                seating_capacity=seating_capacity,
                address=address,
                location=self._location(latitude, longitude),
                description=description,
                **identified(external_id),
            )
            async with self._unit_of_work() as uow:
                stored = await uow.repository(Venue).add(venue)
                await uow.commit()

        logger.info("Created venue %s for tenant %s", stored.external_id, tenant_id)
        return VenueView.of(stored)

    async def get_all(self) -> list[VenueView]:
        with self._span("get_all") as span:
            async with self._unit_of_work() as uow:
                venues = await uow.repository(Venue).find(Query().with_order("name"))
            if span is not None:
                span.set_attribute(ATTR_RESULT_COUNT, len(venues))
        return [VenueView.of(venue) for venue in venues]

    async def get_by_external_id(self, external_id: UUID) -> VenueView:
        """
        Raises:
            NotFoundError: If no visible venue has this id
        """
        with self._span("get", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                venue = await uow.repository(Venue).require_by_external_id(external_id)
        return VenueView.of(venue)

    async def update(
        self,
        external_id: UUID,
        *,
        name: Any = UNSET,
        seating_capacity: Any = UNSET,
        address: Any = UNSET,
        latitude: Any = UNSET,
        longitude: Any = UNSET,
        description: Any = UNSET,
    ) -> VenueView:
        """
        Apply a partial update. Arguments left out keep their current value.

        Supplying only one coordinate moves the point along that axis; passing
        None for both clears the location.

        Raises:
            NotFoundError: If no visible venue has this id
            InvalidArgumentError: If a field is invalid, or the new capacity is
                below the ticket count of a show at this venue
        """
        changes = supplied(
            name=name,
            seating_capacity=seating_capacity,
            address=address,
            description=description,
        )
        with self._span("update", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                venues = uow.repository(Venue)
                venue = await venues.require_by_external_id(external_id)
                await venues.lock(venue)

                if latitude is not UNSET or longitude is not UNSET:
                    current = venue.location
                    changes["location"] = self._location(
                        latitude if latitude is not UNSET else (current.latitude if current else None),
                        longitude if longitude is not UNSET else (current.longitude if current else None),
                    )

                if "seating_capacity" in changes and changes["seating_capacity"] != venue.seating_capacity:
                    largest = await uow.repository(Show).first(
                        Query.where(Filter.eq("venue_id", venue.id)).with_order("ticket_count", "desc")
                    )
                    check_venue_capacity_reduction(
                        changes["seating_capacity"], largest.ticket_count if largest else 0
                    )

                stored = await venues.update(assign(venue, **changes))
                await uow.commit()

        logger.info("Updated venue %s", external_id)
        return VenueView.of(stored)

    async def delete(self, external_id: UUID) -> bool:
        """Delete a venue and, by cascade, its shows. Returns False if not visible."""
        with self._span("delete", {ATTR_EXTERNAL_ID: str(external_id)}):
            async with self._unit_of_work() as uow:
                venues = uow.repository(Venue)
                venue = await venues.get_by_external_id(external_id)
                if venue is None:
                    return False
                deleted = await venues.delete(venue)
                await uow.commit()

        logger.info("Deleted venue %s", external_id)
        return deleted

    async def count(self) -> int:
        with self._span("count"):
            async with self._unit_of_work() as uow:
                return await uow.repository(Venue).count()

    @staticmethod
    def _location(latitude: float | None, longitude: float | None) -> GeoPoint | None:
        return build(GeoPoint.from_coordinates, latitude=latitude, longitude=longitude)


__all__ = ["VenueService"]
