"""
Tenant context values.

A TenantContext is resolved once per request and then passed explicitly to
every service and unit of work; nothing reads it from ambient state. It has
exactly two variants:

- ScopedTenant(tenant_id): every read is narrowed to one tenant
- Unscoped: the administrative context that sees every tenant's rows

The unscoped variant is a distinct singleton, never a missing value, so
forgetting to supply a tenant cannot silently widen access. The request
layer builds contexts with tenant_context_from_claims(), which never yields
the unscoped variant.

Example:
    >>> ctx = TenantContext.for_tenant(7)
    >>> ctx.tenant_id
    7
    >>> require_tenant_id(ctx, "venue creation")
    7
    >>> TenantContext.unscoped().is_unscoped
    True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from boxoffice.tenancy.exceptions import TenantContextRequiredError

logger = logging.getLogger(__name__)

TENANT_CLAIM = "tenant_id"


class TenantContext:
    """Base of the two tenant context variants."""

    __slots__ = ()

    @property
    def is_unscoped(self) -> bool:
        return isinstance(self, Unscoped)

    @property
    def tenant_id(self) -> int | None:
        return None

    @staticmethod
    def for_tenant(tenant_id: int) -> ScopedTenant:
        return ScopedTenant(tenant_id)

    @staticmethod
    def unscoped() -> Unscoped:
        return UNSCOPED


@dataclass(frozen=True, slots=True)
class ScopedTenant(TenantContext):
    """Context bound to a single tenant."""

    id: int

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise TypeError(f"tenant_id must be an int, got {type(self.id).__name__}")
        if self.id < 1:
            raise ValueError(f"tenant_id must be positive, got {self.id}")

    @property
    def tenant_id(self) -> int:
        return self.id

    def __repr__(self) -> str:
        return f"ScopedTenant({self.id})"


@dataclass(frozen=True, slots=True)
class Unscoped(TenantContext):
    """Administrative context. Only reachable by asking for it explicitly."""

    def __repr__(self) -> str:
        return "Unscoped"


UNSCOPED = Unscoped()


def require_tenant_id(context: TenantContext, operation: str) -> int:
    """
    Get the tenant id of a scoped context.

    Args:
        context: The request's tenant context
        operation: Description used in the error message (e.g. "venue creation")

    Returns:
        The bound tenant id

    Raises:
        TenantContextRequiredError: If the context is unscoped
    """
    if isinstance(context, ScopedTenant):
        return context.id
    raise TenantContextRequiredError(operation)


def tenant_context_from_claims(claims: Mapping[str, Any] | None) -> ScopedTenant:
    """
    Resolve the tenant context of an authenticated request.

    The identity layer is trusted verbatim: the claim value is used as the
    tenant id without checking membership. A missing or malformed claim is
    an error rather than a fallback to the unscoped context.

    Args:
        claims: Claims of the authenticated principal

    Returns:
        ScopedTenant bound to the claimed tenant

    Raises:
        TenantContextRequiredError: If the tenant claim is missing or not a
            positive integer
    """
    raw = (claims or {}).get(TENANT_CLAIM)
    if raw is None or isinstance(raw, bool):
        raise TenantContextRequiredError("an authenticated request")
    try:
        tenant_id = int(str(raw).strip())
    except ValueError:
        logger.warning("Rejected malformed tenant claim %r", raw)
        raise TenantContextRequiredError("an authenticated request") from None
    if tenant_id < 1:
        logger.warning("Rejected non-positive tenant claim %r", raw)
        raise TenantContextRequiredError("an authenticated request")
    return ScopedTenant(tenant_id)


__all__ = [
    "TenantContext",
    "ScopedTenant",
    "Unscoped",
    "UNSCOPED",
    "TENANT_CLAIM",
    "require_tenant_id",
    "tenant_context_from_claims",
]
