"""
Projections returned by domain services.

Views expose external identifiers only; internal primary keys never leave
the service layer. The one exception is TenantView.id, which the
administrative layer needs to bind ScopedTenant contexts.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from boxoffice.models import Act, Address, Customer, Show, Tenant, TicketOffer, TicketSale, Venue


class View(BaseModel):
    model_config = ConfigDict(frozen=True)


class TenantView(View):
    id: int
    identifier: str
    name: str
    slug: str
    is_active: bool
    created_at: datetime

    @classmethod
    def of(cls, tenant: Tenant) -> TenantView:
        return cls(
            id=tenant.id,
            identifier=tenant.identifier,
            name=tenant.name,
            slug=tenant.slug,
            is_active=tenant.is_active,
            created_at=tenant.created_at,
        )


class VenueView(View):
    external_id: UUID
    name: str
    address: str | None
    latitude: float | None
    longitude: float | None
    seating_capacity: int
    description: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def of(cls, venue: Venue) -> VenueView:
        return cls(
            external_id=venue.external_id,
            name=venue.name,
            address=venue.address,
            latitude=venue.location.latitude if venue.location else None,
            longitude=venue.location.longitude if venue.location else None,
            seating_capacity=venue.seating_capacity,
            description=venue.description,
            created_at=venue.created_at,
            updated_at=venue.updated_at,
        )


class ActView(View):
    external_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def of(cls, act: Act) -> ActView:
        return cls(
            external_id=act.external_id,
            name=act.name,
            created_at=act.created_at,
            updated_at=act.updated_at,
        )


class ShowView(View):
    external_id: UUID
    act_external_id: UUID
    act_name: str
    venue_external_id: UUID
    venue_name: str
    venue_capacity: int
    ticket_count: int
    start_time: datetime
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def of(cls, show: Show, venue: Venue, act: Act) -> ShowView:
        return cls(
            external_id=show.external_id,
            act_external_id=act.external_id,
            act_name=act.name,
            venue_external_id=venue.external_id,
            venue_name=venue.name,
            venue_capacity=venue.seating_capacity,
            ticket_count=show.ticket_count,
            start_time=show.start_time,
            created_at=show.created_at,
            updated_at=show.updated_at,
        )


class NearbyShow(View):
    show_external_id: UUID
    act_name: str
    start_time: datetime


class NearbyShowsView(View):
    """Shows at a venue around a reference time, with a human-readable summary."""

    venue_external_id: UUID
    venue_name: str
    reference_time: datetime
    shows: tuple[NearbyShow, ...]
    message: str


class TicketOfferView(View):
    external_id: UUID
    show_external_id: UUID
    name: str
    price: Decimal
    ticket_count: int
    created_at: datetime

    @classmethod
    def of(cls, offer: TicketOffer, show: Show) -> TicketOfferView:
        return cls(
            external_id=offer.external_id,
            show_external_id=show.external_id,
            name=offer.name,
            price=offer.price,
            ticket_count=offer.ticket_count,
            created_at=offer.created_at,
        )


class ShowCapacityView(View):
    show_external_id: UUID
    total_tickets: int
    allocated_tickets: int
    available_capacity: int


class TicketSaleView(View):
    external_id: UUID
    show_external_id: UUID
    show_start_time: datetime
    venue_name: str
    act_name: str
    quantity: int
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def of(cls, sale: TicketSale, show: Show, venue: Venue, act: Act) -> TicketSaleView:
        return cls(
            external_id=sale.external_id,
            show_external_id=show.external_id,
            show_start_time=show.start_time,
            venue_name=venue.name,
            act_name=act.name,
            quantity=sale.quantity,
            created_at=sale.created_at,
            updated_at=sale.updated_at,
        )


class CustomerView(View):
    external_id: UUID
    name: str
    billing_address: Address
    shipping_address: Address | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def of(cls, customer: Customer) -> CustomerView:
        return cls(
            external_id=customer.external_id,
            name=customer.name,
            billing_address=customer.billing_address,
            shipping_address=customer.shipping_address,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
        )


__all__ = [
    "View",
    "TenantView",
    "VenueView",
    "ActView",
    "ShowView",
    "NearbyShow",
    "NearbyShowsView",
    "TicketOfferView",
    "ShowCapacityView",
    "TicketSaleView",
    "CustomerView",
]
