"""
Persisted entities for the boxoffice domain.

All entities share an opaque integer primary key (assigned by persistence,
never exposed in a projection), a separately exposed external identifier
and audit timestamps. Tenant scoping is *not* modelled here: whether an
entity carries ``tenant_id`` directly or derives it through a parent
reference is declared in :mod:`boxoffice.tenancy.classification`.
"""

from __future__ import annotations

import re
import types
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, ClassVar, Union, get_args, get_origin
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case ('TicketOffer' -> 'ticket_offer')."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _pluralize(name: str) -> str:
    if name.endswith("y") and len(name) > 1 and name[-2] not in "aeiou":
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class GeoPoint(BaseModel):
    """WGS84 point (SRID 4326)."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    @classmethod
    def from_coordinates(cls, latitude: float | None, longitude: float | None) -> GeoPoint | None:
        """Build a point, or None when either coordinate is missing."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude=latitude, longitude=longitude)


class Address(BaseModel):
    """Structured postal address used for customer billing and shipping."""

    model_config = ConfigDict(frozen=True)

    street_line1: str = Field(..., min_length=1, max_length=200)
    street_line2: str | None = Field(default=None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state_or_province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class Entity(BaseModel):
    """
    Base class for every persisted entity.

    Entities are mutable so services can apply partial updates; assignment
    is validated so an update can never store a value the constructor would
    have rejected.

    Attributes:
        id: Internal primary key, None until the entity is added
        created_at: Set by persistence when the row is inserted
        updated_at: Refreshed by persistence on every update, None until then
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: int | None = Field(default=None, description="Internal primary key")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = Field(default=None)

    __table_name__: ClassVar[str | None] = None
    __external_key__: ClassVar[str] = "external_id"
    __unique_fields__: ClassVar[tuple[str, ...]] = ("external_id",)

    @classmethod
    def table_name(cls) -> str:
        """Table name, derived from the class name unless __table_name__ is set."""
        if cls.__table_name__:
            return cls.__table_name__
        return _pluralize(_camel_to_snake(cls.__name__))

    @classmethod
    def entity_name(cls) -> str:
        """Display name used in error messages ('TicketOffer' -> 'Ticket offer')."""
        return _camel_to_snake(cls.__name__).replace("_", " ").capitalize()

    @classmethod
    def field_names(cls) -> list[str]:
        return list(cls.model_fields.keys())

    @classmethod
    def column_names(cls) -> list[str]:
        """Persisted columns other than the primary key."""
        return [name for name in cls.model_fields if name != "id"]

    @classmethod
    def field_type(cls, name: str) -> Any:
        """Field annotation with Optional stripped."""
        return _unwrap_optional(cls.model_fields[name].annotation)

    @classmethod
    def datetime_fields(cls) -> frozenset[str]:
        """Fields holding timestamps; compared as absolute instants by SQL backends."""
        return frozenset(
            name
            for name in cls.model_fields
            if isinstance(cls.field_type(name), type) and issubclass(cls.field_type(name), datetime)
        )

    @classmethod
    def nested_fields(cls) -> frozenset[str]:
        """Fields holding value objects, stored as JSON by SQL backends."""
        return frozenset(
            name
            for name in cls.model_fields
            if isinstance(cls.field_type(name), type) and issubclass(cls.field_type(name), BaseModel)
        )

    @classmethod
    def parse_external_key(cls, value: Any) -> Any:
        """
        Coerce a lookup value to the external key's type.

        Raises:
            pydantic.ValidationError: If the value cannot be converted
        """
        return TypeAdapter(cls.field_type(cls.__external_key__)).validate_python(value)

    @property
    def external_key(self) -> Any:
        """The value of this entity's external identifier field."""
        return getattr(self, self.__external_key__)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, {self.__external_key__}={self.external_key})"


class Tenant(Entity):
    """An isolated organizational owner of a disjoint subset of data."""

    __external_key__: ClassVar[str] = "identifier"
    __unique_fields__: ClassVar[tuple[str, ...]] = ("identifier", "slug")

    identifier: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    is_active: bool = True


class Venue(Entity):
    """A location with a fixed number of seats, owned by one tenant."""

    external_id: UUID = Field(default_factory=uuid4)
    tenant_id: int
    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(default=None, max_length=500)
    location: GeoPoint | None = None
    seating_capacity: int = Field(..., gt=0)
    description: str | None = Field(default=None, max_length=2000)


class Act(Entity):
    """A performer or production, owned by one tenant."""

    external_id: UUID = Field(default_factory=uuid4)
    tenant_id: int
    name: str = Field(..., min_length=1, max_length=100)


class Show(Entity):
    """An act scheduled at a venue. Tenant scope comes from the venue."""

    external_id: UUID = Field(default_factory=uuid4)
    venue_id: int
    act_id: int
    ticket_count: int = Field(..., gt=0)
    start_time: datetime

    @field_validator("start_time")
    @classmethod
    def _require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("start_time must carry a timezone offset")
        return value


class TicketOffer(Entity):
    """A named, priced allocation carved out of a show's ticket count."""

    external_id: UUID = Field(default_factory=uuid4)
    show_id: int
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    ticket_count: int = Field(..., gt=0)


class TicketSale(Entity):
    """A recorded sale of tickets for a show."""

    external_id: UUID = Field(default_factory=uuid4)
    show_id: int
    quantity: int = Field(..., ge=1)


class Customer(Entity):
    """A ticket buyer, owned by one tenant."""

    external_id: UUID = Field(default_factory=uuid4)
    tenant_id: int
    name: str = Field(..., min_length=1, max_length=200)
    billing_address: Address
    shipping_address: Address | None = None


ENTITY_TYPES: tuple[type[Entity], ...] = (
    Tenant,
    Venue,
    Act,
    Customer,
    Show,
    TicketOffer,
    TicketSale,
)
"""All entity types, parents before children."""


__all__ = [
    "Entity",
    "Tenant",
    "Venue",
    "Act",
    "Show",
    "TicketOffer",
    "TicketSale",
    "Customer",
    "GeoPoint",
    "Address",
    "ENTITY_TYPES",
]
