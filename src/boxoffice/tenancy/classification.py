"""
Entity classification: which tenant owns a row, and how to find out.

Every entity type is declared here as one of:

- UNSCOPED: visible regardless of tenant (Tenant itself)
- ROOT: carries its own ``tenant_id`` column
- RELATIONSHIP: carries no tenant column; ownership is inferred by following
  required parent references to a root-scoped ancestor

Relationship-scoped types list their parents. The first parent is the
scoping path used by the filter builder; any further parents are required
references that must resolve to the same tenant when the row is created.
Relationship-scoped entities never get a redundant tenant column.

This table is the only source of tenant ownership. A type that is not
declared here cannot be filtered and is rejected by scope_of().
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from boxoffice.models import Act, Customer, Entity, Show, Tenant, TicketOffer, TicketSale, Venue
from boxoffice.tenancy.exceptions import TenantMismatchError, UnclassifiedEntityError

TENANT_COLUMN = "tenant_id"

ParentLoader = Callable[[type[Entity], int], Awaitable[Entity | None]]
"""Loads a parent row by primary key, bypassing tenant filters."""


class ScopeKind(Enum):
    UNSCOPED = "unscoped"
    ROOT = "root"
    RELATIONSHIP = "relationship"


@dataclass(frozen=True)
class ParentLink:
    """A required reference from a child column to a parent entity's primary key."""

    field: str
    parent: type[Entity]


@dataclass(frozen=True)
class EntityScope:
    """Tenant classification of one entity type."""

    kind: ScopeKind
    parents: tuple[ParentLink, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is ScopeKind.RELATIONSHIP and not self.parents:
            raise ValueError("relationship-scoped entities need at least one parent link")

    @property
    def scoping_link(self) -> ParentLink | None:
        return self.parents[0] if self.kind is ScopeKind.RELATIONSHIP else None


_SCOPES: dict[type[Entity], EntityScope] = {
    Tenant: EntityScope(ScopeKind.UNSCOPED),
    Venue: EntityScope(ScopeKind.ROOT),
    Act: EntityScope(ScopeKind.ROOT),
    Customer: EntityScope(ScopeKind.ROOT),
    Show: EntityScope(
        ScopeKind.RELATIONSHIP,
        (ParentLink("venue_id", Venue), ParentLink("act_id", Act)),
    ),
    TicketOffer: EntityScope(ScopeKind.RELATIONSHIP, (ParentLink("show_id", Show),)),
    TicketSale: EntityScope(ScopeKind.RELATIONSHIP, (ParentLink("show_id", Show),)),
}

ENTITY_SCOPES: Mapping[type[Entity], EntityScope] = MappingProxyType(_SCOPES)


def scope_of(
    entity_type: type[Entity],
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> EntityScope:
    """
    Get the classification of an entity type.

    Raises:
        UnclassifiedEntityError: If the type is not in the table
    """
    try:
        return scopes[entity_type]
    except KeyError:
        raise UnclassifiedEntityError(entity_type) from None


def scoping_path(
    entity_type: type[Entity],
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> tuple[ParentLink, ...]:
    """
    Chain of parent links from an entity type to its nearest root-scoped ancestor.

    Root-scoped and unscoped types have an empty path.

    Example:
        >>> [link.field for link in scoping_path(TicketOffer)]
        ['show_id', 'venue_id']
    """
    path: list[ParentLink] = []
    current = entity_type
    seen: set[type[Entity]] = set()
    while True:
        link = scope_of(current, scopes).scoping_link
        if link is None:
            return tuple(path)
        if current in seen:
            raise ValueError(f"Cyclic scoping path through {current.__name__}")
        seen.add(current)
        path.append(link)
        current = link.parent


def root_type(
    entity_type: type[Entity],
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> type[Entity]:
    """Entity type at the end of the scoping path."""
    path = scoping_path(entity_type, scopes)
    return path[-1].parent if path else entity_type


def cascade_children(
    entity_type: type[Entity],
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> list[tuple[type[Entity], str]]:
    """
    Child types (and their referencing column) deleted along with a parent.

    Every parent link is a required reference, so deleting the parent
    deletes the children.
    """
    return [
        (child, link.field)
        for child, scope in scopes.items()
        for link in scope.parents
        if link.parent is entity_type
    ]


async def resolve_root_tenant(
    entity_type: type[Entity],
    entity: Entity,
    load_parent: ParentLoader,
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> int | None:
    """
    Find the tenant that owns a row.

    Root-scoped rows answer directly. Relationship-scoped rows walk their
    scoping path one parent lookup at a time. The loader must bypass tenant
    filters; callers use the result to decide visibility.

    Args:
        entity_type: Declared type of ``entity``
        entity: The row to resolve
        load_parent: Unfiltered parent lookup by primary key

    Returns:
        The owning tenant id, or None for unscoped rows and rows whose
        parent chain is broken
    """
    scope = scope_of(entity_type, scopes)
    if scope.kind is ScopeKind.UNSCOPED:
        return None
    if scope.kind is ScopeKind.ROOT:
        return getattr(entity, TENANT_COLUMN)

    current_type = entity_type
    current: Entity | None = entity
    for link in scoping_path(entity_type, scopes):
        assert current is not None
        parent_id = getattr(current, link.field)
        current = await load_parent(link.parent, parent_id)
        if current is None:
            return None
        current_type = link.parent
    assert scope_of(current_type, scopes).kind is ScopeKind.ROOT
    return getattr(current, TENANT_COLUMN)


async def verify_single_tenant(
    entity_type: type[Entity],
    entity: Entity,
    load_parent: ParentLoader,
    scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES,
) -> int | None:
    """
    Check that every required parent of a new row belongs to one tenant.

    Returns:
        The owning tenant id

    Raises:
        TenantMismatchError: If a secondary parent resolves to another tenant
    """
    scope = scope_of(entity_type, scopes)
    expected = await resolve_root_tenant(entity_type, entity, load_parent, scopes)
    for link in scope.parents[1:]:
        parent = await load_parent(link.parent, getattr(entity, link.field))
        actual = (
            await resolve_root_tenant(link.parent, parent, load_parent, scopes)
            if parent is not None
            else None
        )
        if actual != expected:
            raise TenantMismatchError(link.field, expected, actual)
    return expected


__all__ = [
    "ScopeKind",
    "ParentLink",
    "EntityScope",
    "ENTITY_SCOPES",
    "TENANT_COLUMN",
    "ParentLoader",
    "scope_of",
    "scoping_path",
    "root_type",
    "cascade_children",
    "resolve_root_tenant",
    "verify_single_tenant",
]
