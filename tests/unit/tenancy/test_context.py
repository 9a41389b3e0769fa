"""
Unit tests for tenant contexts.

Tests cover:
- ScopedTenant construction and validation
- The Unscoped singleton
- require_tenant_id for operations that need a tenant
- Resolving contexts from authenticated claims
"""

from __future__ import annotations

import pytest

from boxoffice.exceptions import ErrorKind, InvalidArgumentError
from boxoffice.tenancy import (
    UNSCOPED,
    ScopedTenant,
    TenantContext,
    TenantContextRequiredError,
    Unscoped,
    require_tenant_id,
    tenant_context_from_claims,
)


class TestScopedTenant:
    """Tests for ScopedTenant."""

    def test_for_tenant_binds_id(self) -> None:
        context = TenantContext.for_tenant(7)
        assert isinstance(context, ScopedTenant)
        assert context.tenant_id == 7
        assert context.is_unscoped is False

    def test_equal_ids_are_equal_contexts(self) -> None:
        assert ScopedTenant(3) == ScopedTenant(3)
        assert ScopedTenant(3) != ScopedTenant(4)
        assert hash(ScopedTenant(3)) == hash(ScopedTenant(3))

    def test_is_immutable(self) -> None:
        context = ScopedTenant(1)
        with pytest.raises(AttributeError):
            context.id = 2  # type: ignore[misc]

    @pytest.mark.parametrize("value", [0, -1])
    def test_rejects_non_positive_ids(self, value: int) -> None:
        with pytest.raises(ValueError):
            ScopedTenant(value)

    @pytest.mark.parametrize("value", ["1", 1.0, True, None])
    def test_rejects_non_int_ids(self, value: object) -> None:
        with pytest.raises(TypeError):
            ScopedTenant(value)  # type: ignore[arg-type]


class TestUnscoped:
    """Tests for the administrative context."""

    def test_unscoped_has_no_tenant(self) -> None:
        assert UNSCOPED.is_unscoped is True
        assert UNSCOPED.tenant_id is None

    def test_factory_returns_unscoped(self) -> None:
        assert isinstance(TenantContext.unscoped(), Unscoped)
        assert TenantContext.unscoped() == UNSCOPED

    def test_unscoped_is_not_a_scoped_tenant(self) -> None:
        assert not isinstance(UNSCOPED, ScopedTenant)


class TestRequireTenantId:
    """Tests for require_tenant_id."""

    def test_returns_bound_id(self) -> None:
        assert require_tenant_id(ScopedTenant(5), "venue creation") == 5

    def test_unscoped_raises_invalid_argument(self) -> None:
        with pytest.raises(TenantContextRequiredError) as exc_info:
            require_tenant_id(UNSCOPED, "venue creation")

        error = exc_info.value
        assert isinstance(error, InvalidArgumentError)
        assert error.kind is ErrorKind.INVALID_ARGUMENT
        assert error.field == "tenant_id"
        assert error.message == "Tenant context is required for venue creation."


class TestTenantContextFromClaims:
    """Tests for resolving a context from request claims."""

    def test_valid_claim(self) -> None:
        assert tenant_context_from_claims({"tenant_id": 12, "sub": "user"}) == ScopedTenant(12)

    def test_numeric_string_claim(self) -> None:
        """Identity providers often serialize claims as strings."""
        assert tenant_context_from_claims({"tenant_id": " 12 "}) == ScopedTenant(12)

    @pytest.mark.parametrize(
        "claims",
        [
            None,
            {},
            {"sub": "user"},
            {"tenant_id": None},
            {"tenant_id": "twelve"},
            {"tenant_id": 0},
            {"tenant_id": -4},
            {"tenant_id": True},
            {"tenant_id": 1.5},
        ],
    )
    def test_missing_or_malformed_claim_is_rejected(self, claims: dict | None) -> None:
        with pytest.raises(TenantContextRequiredError):
            tenant_context_from_claims(claims)

    def test_never_produces_unscoped(self) -> None:
        for claims in ({"tenant_id": None}, {}):
            with pytest.raises(TenantContextRequiredError):
                tenant_context_from_claims(claims)
