"""
Capacity allocation rules.

Two nested resources are accounted for:

- a show's ticket count is carved out of its venue's seating capacity
- ticket offers are carved out of a show's ticket count

The checks here are pure; services call them inside the unit of work that
performs the write, after locking the parent row they read the bound from.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from boxoffice.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Allocation:
    """
    Ticket accounting for one show.

    Attributes:
        total: The show's ticket count
        allocated: Sum of the ticket counts of its offers
    """

    total: int
    allocated: int

    @property
    def available(self) -> int:
        return self.total - self.allocated


def require_positive(field: str, value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(field, f"{label} must be a whole number")
    if value <= 0:
        raise InvalidArgumentError(field, f"{label} must be greater than zero")


def check_show_ticket_count(ticket_count: int, seating_capacity: int) -> None:
    """
    A show may not sell more tickets than its venue seats.

    Raises:
        InvalidArgumentError: On ``ticket_count``, quoting the venue capacity
    """
    require_positive("ticket_count", ticket_count, "Ticket count")
    if ticket_count > seating_capacity:
        raise InvalidArgumentError(
            "ticket_count",
            f"Ticket count cannot exceed venue capacity of {seating_capacity}",
        )


def check_offer_allocation(requested: int, allocation: Allocation) -> None:
    """
    Offers for a show may not add up to more than its ticket count.

    Raises:
        InvalidArgumentError: On ``ticket_count``, stating the remaining capacity
    """
    require_positive("ticket_count", requested, "Ticket count")
    if requested > allocation.available:
        raise InvalidArgumentError(
            "ticket_count",
            f"Cannot create ticket offer. Requested {requested} tickets, "
            f"but only {max(allocation.available, 0)} tickets available. "
            f"Show capacity: {allocation.total}, Already allocated: {allocation.allocated}",
        )


def check_show_ticket_reduction(ticket_count: int, allocated: int) -> None:
    """A show's ticket count may not drop below what its offers already hold."""
    if ticket_count < allocated:
        raise InvalidArgumentError(
            "ticket_count",
            f"Ticket count cannot be lower than the {allocated} tickets already allocated to offers",
        )


def check_venue_capacity_reduction(seating_capacity: int, largest_show: int) -> None:
    """A venue's capacity may not drop below the ticket count of a show scheduled there."""
    require_positive("seating_capacity", seating_capacity, "Seating capacity")
    if seating_capacity < largest_show:
        raise InvalidArgumentError(
            "seating_capacity",
            f"Seating capacity cannot be lower than {largest_show}, "
            "the ticket count of a show at this venue",
        )


def parse_price(price: Decimal | int | float | str) -> Decimal:
    """
    Normalize a price and check it is positive.

    Floats go through their shortest string form, so 19.99 stays 19.99.

    Raises:
        InvalidArgumentError: On ``price``
    """
    if isinstance(price, bool):
        raise InvalidArgumentError("price", "Price must be a number")
    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
    except InvalidOperation:
        raise InvalidArgumentError("price", "Price must be a number") from None
    if not value.is_finite():
        raise InvalidArgumentError("price", "Price must be a number")
    if value <= 0:
        raise InvalidArgumentError("price", "Price must be greater than zero")
    return value


__all__ = [
    "Allocation",
    "check_offer_allocation",
    "check_show_ticket_count",
    "check_show_ticket_reduction",
    "check_venue_capacity_reduction",
    "parse_price",
    "require_positive",
]
