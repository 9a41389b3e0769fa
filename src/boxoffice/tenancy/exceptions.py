"""
Tenancy exceptions.

This module provides exceptions specific to tenant scoping:
- TenantContextRequiredError: a tenant-bound operation ran without a tenant
- TenantMismatchError: required parents of a new entity belong to different tenants
- UnclassifiedEntityError: an entity type is missing from the classification table
"""

from __future__ import annotations

from boxoffice.exceptions import BoxOfficeError, InvalidArgumentError


class TenantContextRequiredError(InvalidArgumentError):
    """
    Raised when an operation needs a concrete tenant but none was supplied.

    Creating a root-scoped entity (Venue, Act, Customer) under the unscoped
    administrative context raises this, since there is no tenant to assign
    the new row to. Resolving a request context from claims that carry no
    tenant raises it too.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__("tenant_id", f"Tenant context is required for {operation}.")


class TenantMismatchError(InvalidArgumentError):
    """
    Raised when the required parents of a new entity resolve to different tenants.

    Attributes:
        field: The parent reference that disagreed with the scoping parent
        expected: Tenant id reached through the scoping parent
        actual: Tenant id reached through ``field``
    """

    def __init__(self, field: str, expected: int | None, actual: int | None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(field, "Referenced entity belongs to a different tenant")


class UnclassifiedEntityError(BoxOfficeError):
    """Raised when an entity type has no entry in the classification table."""

    def __init__(self, entity_type: type) -> None:
        self.entity_type = entity_type
        super().__init__(
            f"{entity_type.__name__} has no tenant scope declared. "
            "Add it to ENTITY_SCOPES before persisting it."
        )


__all__ = [
    "TenantContextRequiredError",
    "TenantMismatchError",
    "UnclassifiedEntityError",
]
