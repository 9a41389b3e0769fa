"""Unit tests for entity models and their metadata helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import ValidationError

from boxoffice.models import (
    ENTITY_TYPES,
    Act,
    Address,
    Customer,
    GeoPoint,
    Show,
    Tenant,
    TicketOffer,
    TicketSale,
    Venue,
)

START = datetime(2030, 7, 1, 20, 0, tzinfo=UTC)


class TestEntityMetadata:
    """Tests for table and field introspection."""

    @pytest.mark.parametrize(
        ("entity_type", "table"),
        [
            (Tenant, "tenants"),
            (Venue, "venues"),
            (Act, "acts"),
            (Show, "shows"),
            (TicketOffer, "ticket_offers"),
            (TicketSale, "ticket_sales"),
            (Customer, "customers"),
        ],
    )
    def test_table_names(self, entity_type, table: str) -> None:
        assert entity_type.table_name() == table

    def test_entity_name(self) -> None:
        assert TicketOffer.entity_name() == "Ticket offer"
        assert Venue.entity_name() == "Venue"

    def test_column_names_exclude_primary_key(self) -> None:
        assert "id" not in Act.column_names()
        assert Act.column_names() == ["created_at", "updated_at", "external_id", "tenant_id", "name"]

    def test_datetime_fields(self) -> None:
        assert Show.datetime_fields() == {"created_at", "updated_at", "start_time"}
        assert Act.datetime_fields() == {"created_at", "updated_at"}

    def test_nested_fields(self) -> None:
        assert Venue.nested_fields() == {"location"}
        assert Customer.nested_fields() == {"billing_address", "shipping_address"}
        assert Show.nested_fields() == frozenset()

    def test_field_type_strips_optional(self) -> None:
        assert Venue.field_type("address") is str
        assert Venue.field_type("location") is GeoPoint

    def test_parents_listed_before_children(self) -> None:
        order = list(ENTITY_TYPES)
        assert order.index(Tenant) < order.index(Venue) < order.index(Show)
        assert order.index(Show) < order.index(TicketOffer)
        assert order.index(Show) < order.index(TicketSale)


class TestExternalKeys:
    def test_external_id_generated(self) -> None:
        act = Act(tenant_id=1, name="Band")
        assert isinstance(act.external_id, UUID)
        assert act.external_key == act.external_id
        assert Act(tenant_id=1, name="Band").external_id != act.external_id

    def test_tenant_keyed_by_identifier(self) -> None:
        tenant = Tenant(identifier="acme-corp", name="Acme", slug="acme")
        assert tenant.external_key == "acme-corp"
        assert Tenant.__unique_fields__ == ("identifier", "slug")

    def test_str(self) -> None:
        act = Act(id=3, tenant_id=1, name="Band")
        assert str(act) == f"Act(id=3, external_id={act.external_id})"


class TestValidation:
    """Tests for field constraints."""

    def test_show_requires_offset(self) -> None:
        with pytest.raises(ValidationError):
            Show(venue_id=1, act_id=1, ticket_count=10, start_time=datetime(2030, 7, 1, 20))

    def test_show_ticket_count_positive(self) -> None:
        with pytest.raises(ValidationError):
            Show(venue_id=1, act_id=1, ticket_count=0, start_time=START)

    def test_assignment_is_validated(self) -> None:
        venue = Venue(tenant_id=1, name="Hall", seating_capacity=10)
        with pytest.raises(ValidationError):
            venue.seating_capacity = 0
        assert venue.seating_capacity == 10

    @pytest.mark.parametrize("slug", ["Acme", "acme corp", "-acme", "acme-", ""])
    def test_tenant_slug_format(self, slug: str) -> None:
        with pytest.raises(ValidationError):
            Tenant(identifier="x", name="X", slug=slug)

    def test_offer_price_precision(self) -> None:
        TicketOffer(show_id=1, name="GA", price=Decimal("10.50"), ticket_count=1)
        with pytest.raises(ValidationError):
            TicketOffer(show_id=1, name="GA", price=Decimal("10.505"), ticket_count=1)

    def test_sale_quantity_at_least_one(self) -> None:
        with pytest.raises(ValidationError):
            TicketSale(show_id=1, quantity=0)

    def test_customer_address_required_fields(self) -> None:
        with pytest.raises(ValidationError):
            Customer(tenant_id=1, name="Ada", billing_address={"city": "Springfield"})


class TestValueObjects:
    def test_geopoint_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GeoPoint(latitude=91.0, longitude=0.0)
        with pytest.raises(ValidationError):
            GeoPoint(latitude=0.0, longitude=-181.0)

    def test_geopoint_from_partial_coordinates(self) -> None:
        assert GeoPoint.from_coordinates(None, 10.0) is None
        assert GeoPoint.from_coordinates(1.5, None) is None
        assert GeoPoint.from_coordinates(1.5, 10.0) == GeoPoint(latitude=1.5, longitude=10.0)

    def test_address_is_frozen(self) -> None:
        address = Address(
            street_line1="1 Main St",
            city="Springfield",
            state_or_province="IL",
            postal_code="62701",
            country="US",
        )
        with pytest.raises(ValidationError):
            address.city = "Shelbyville"  # type: ignore[misc]
