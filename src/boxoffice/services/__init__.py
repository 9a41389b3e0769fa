"""
Domain services.

Each service is bound to one request's ScopedFilter and opens a unit of
work per operation. Capacity and scheduling rules live in the pure
``capacity`` and ``scheduling`` modules.
"""

from boxoffice.services._base import UNSET, Clock, Service
from boxoffice.services.acts import ActService
from boxoffice.services.capacity import (
    Allocation,
    check_offer_allocation,
    check_show_ticket_count,
    check_show_ticket_reduction,
    check_venue_capacity_reduction,
    parse_price,
)
from boxoffice.services.customers import CustomerService
from boxoffice.services.scheduling import NEARBY_WINDOW, check_future_start, nearby_message, window_bounds
from boxoffice.services.shows import ShowService
from boxoffice.services.tenants import TenantService
from boxoffice.services.ticket_offers import TicketOfferService
from boxoffice.services.ticket_sales import TicketSaleService
from boxoffice.services.venues import VenueService

__all__ = [
    "Service",
    "Clock",
    "UNSET",
    "VenueService",
    "ActService",
    "ShowService",
    "TicketOfferService",
    "TicketSaleService",
    "CustomerService",
    "TenantService",
    "Allocation",
    "check_offer_allocation",
    "check_show_ticket_count",
    "check_show_ticket_reduction",
    "check_venue_capacity_reduction",
    "parse_price",
    "NEARBY_WINDOW",
    "check_future_start",
    "nearby_message",
    "window_bounds",
]
