"""
Scoped query filters.

A ScopedFilterBuilder is created once when a persistence backend is set up.
For each request it turns the resolved TenantContext into a ScopedFilter:
an immutable bundle holding one TenantFilter per classified entity type.
Units of work receive the ScopedFilter explicitly and apply the matching
TenantFilter on every read, so call sites cannot forget it.

A TenantFilter is backend-neutral data (tenant id + scoping path). Each
backend evaluates it in its own way: the in-memory backend walks parent
rows, the SQL backends compile nested ``IN (SELECT ...)`` subqueries.

Example:
    >>> builder = ScopedFilterBuilder()
    >>> scoped = builder.build(TenantContext.for_tenant(3))
    >>> show_filter = scoped.for_entity(Show)
    >>> [link.field for link in show_filter.path]
    ['venue_id']
    >>> show_filter.tenant_id
    3
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from boxoffice.models import Entity
from boxoffice.tenancy.classification import (
    ENTITY_SCOPES,
    TENANT_COLUMN,
    EntityScope,
    ParentLink,
    ParentLoader,
    ScopeKind,
    scoping_path,
)
from boxoffice.tenancy.context import TenantContext
from boxoffice.tenancy.exceptions import UnclassifiedEntityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantFilter:
    """
    Tenant predicate for one entity type.

    Attributes:
        entity_type: The filtered entity type
        kind: Classification of the type
        tenant_id: Tenant rows must belong to; None means every row passes
        path: Parent links from the type to its root-scoped ancestor
    """

    entity_type: type[Entity]
    kind: ScopeKind
    tenant_id: int | None
    path: tuple[ParentLink, ...] = ()

    @property
    def allows_all(self) -> bool:
        """True when the predicate is trivially satisfied."""
        return self.tenant_id is None or self.kind is ScopeKind.UNSCOPED

    async def matches(self, entity: Entity, load_parent: ParentLoader) -> bool:
        """
        Evaluate the predicate against a row.

        Args:
            entity: Row of ``entity_type``
            load_parent: Unfiltered parent lookup used for relationship paths
        """
        if self.allows_all:
            return True
        current: Entity | None = entity
        for link in self.path:
            assert current is not None
            current = await load_parent(link.parent, getattr(current, link.field))
            if current is None:
                return False
        return getattr(current, TENANT_COLUMN) == self.tenant_id


@dataclass(frozen=True)
class ScopedFilter:
    """The per-request set of tenant predicates, keyed by entity type."""

    context: TenantContext
    filters: Mapping[type[Entity], TenantFilter] = field(repr=False)

    @property
    def tenant_id(self) -> int | None:
        return self.context.tenant_id

    def for_entity(self, entity_type: type[Entity]) -> TenantFilter:
        """
        Get the predicate for an entity type.

        Raises:
            UnclassifiedEntityError: If the type was never classified
        """
        tenant_filter = self.filters.get(entity_type)
        if tenant_filter is None:
            raise UnclassifiedEntityError(entity_type)
        return tenant_filter


class ScopedFilterBuilder:
    """
    Builds ScopedFilter instances from tenant contexts.

    The scoping path of each entity type is computed once, when the builder
    is created; build() only binds the tenant id.

    Args:
        scopes: Classification table (defaults to ENTITY_SCOPES)
    """

    def __init__(self, scopes: Mapping[type[Entity], EntityScope] = ENTITY_SCOPES) -> None:
        self._scopes = scopes
        self._paths: dict[type[Entity], tuple[ParentLink, ...]] = {
            entity_type: scoping_path(entity_type, scopes) for entity_type in scopes
        }
        self._unscoped: ScopedFilter | None = None

    @property
    def entity_types(self) -> tuple[type[Entity], ...]:
        return tuple(self._scopes)

    def build(self, context: TenantContext) -> ScopedFilter:
        """
        Create the predicates for one request.

        Args:
            context: The request's resolved tenant context

        Returns:
            ScopedFilter with one TenantFilter per classified entity type
        """
        if context.is_unscoped and self._unscoped is not None:
            return self._unscoped

        tenant_id = context.tenant_id
        filters = {
            entity_type: TenantFilter(
                entity_type=entity_type,
                kind=scope.kind,
                tenant_id=None if scope.kind is ScopeKind.UNSCOPED else tenant_id,
                path=self._paths[entity_type],
            )
            for entity_type, scope in self._scopes.items()
        }
        scoped = ScopedFilter(context=context, filters=MappingProxyType(filters))
        logger.debug("Built scoped filter for %r over %d entity types", context, len(filters))

        if context.is_unscoped:
            self._unscoped = scoped
        return scoped


__all__ = [
    "TenantFilter",
    "ScopedFilter",
    "ScopedFilterBuilder",
]
