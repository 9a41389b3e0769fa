"""
Tenant isolation for boxoffice.

- **Context**: TenantContext values (ScopedTenant / Unscoped) passed
  explicitly from the request layer into services
- **Classification**: the static table declaring how each entity type is
  owned by a tenant, plus root-tenant resolution for relationship-scoped rows
- **Filters**: ScopedFilterBuilder, which turns a context into the per-request
  predicates every unit of work applies to its reads
- **Exceptions**: TenantContextRequiredError, TenantMismatchError,
  UnclassifiedEntityError
"""

from boxoffice.tenancy.classification import (
    ENTITY_SCOPES,
    EntityScope,
    ParentLink,
    ScopeKind,
    cascade_children,
    resolve_root_tenant,
    root_type,
    scope_of,
    scoping_path,
    verify_single_tenant,
)
from boxoffice.tenancy.context import (
    UNSCOPED,
    ScopedTenant,
    TenantContext,
    Unscoped,
    require_tenant_id,
    tenant_context_from_claims,
)
from boxoffice.tenancy.exceptions import (
    TenantContextRequiredError,
    TenantMismatchError,
    UnclassifiedEntityError,
)
from boxoffice.tenancy.filters import ScopedFilter, ScopedFilterBuilder, TenantFilter

__all__ = [
    # Context
    "TenantContext",
    "ScopedTenant",
    "Unscoped",
    "UNSCOPED",
    "require_tenant_id",
    "tenant_context_from_claims",
    # Classification
    "ENTITY_SCOPES",
    "EntityScope",
    "ParentLink",
    "ScopeKind",
    "cascade_children",
    "resolve_root_tenant",
    "root_type",
    "scope_of",
    "scoping_path",
    "verify_single_tenant",
    # Filters
    "ScopedFilter",
    "ScopedFilterBuilder",
    "TenantFilter",
    # Exceptions
    "TenantContextRequiredError",
    "TenantMismatchError",
    "UnclassifiedEntityError",
]
