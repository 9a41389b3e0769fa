"""Unit tests for the error taxonomy."""

from uuid import UUID

import pytest

from boxoffice.exceptions import (
    AllocationConflictError,
    BoxOfficeError,
    ConflictError,
    DuplicateKeyError,
    ErrorKind,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
)
from boxoffice.tenancy import (
    TenantContextRequiredError,
    TenantMismatchError,
    UnclassifiedEntityError,
)

EXTERNAL_ID = UUID("12345678-1234-5678-1234-567812345678")


class TestErrorKinds:
    """Every domain error maps to exactly one kind."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (NotFoundError("Show", EXTERNAL_ID), ErrorKind.NOT_FOUND),
            (InvalidArgumentError("price", "Price must be greater than zero"), ErrorKind.INVALID_ARGUMENT),
            (DuplicateKeyError("Tenant", "slug", "acme"), ErrorKind.CONFLICT),
            (AllocationConflictError(EXTERNAL_ID), ErrorKind.CONFLICT),
            (TenantContextRequiredError("venue creation"), ErrorKind.INVALID_ARGUMENT),
            (TenantMismatchError("act_id", 1, 2), ErrorKind.INVALID_ARGUMENT),
        ],
    )
    def test_kind(self, error: BoxOfficeError, kind: ErrorKind) -> None:
        assert error.kind is kind
        assert isinstance(error, BoxOfficeError)

    def test_internal_errors_have_no_kind(self) -> None:
        assert PersistenceError("closed").kind is None
        assert UnclassifiedEntityError(dict).kind is None


class TestMessages:
    def test_not_found(self) -> None:
        error = NotFoundError("Show", EXTERNAL_ID)
        assert str(error) == f"Show with external id {EXTERNAL_ID} not found"
        assert error.entity == "Show"
        assert error.external_id == EXTERNAL_ID

    def test_invalid_argument_names_field(self) -> None:
        error = InvalidArgumentError("ticket_count", "Ticket count cannot exceed venue capacity of 100")
        assert error.field == "ticket_count"
        assert str(error) == "ticket_count: Ticket count cannot exceed venue capacity of 100"

    def test_duplicate_key(self) -> None:
        error = DuplicateKeyError("Venue", "external_id", EXTERNAL_ID)
        assert isinstance(error, ConflictError)
        assert str(error) == f"Venue with external id {EXTERNAL_ID} already exists"

    def test_tenant_context_required(self) -> None:
        error = TenantContextRequiredError("act creation")
        assert isinstance(error, InvalidArgumentError)
        assert error.field == "tenant_id"
        assert error.message == "Tenant context is required for act creation."

    def test_tenant_mismatch(self) -> None:
        error = TenantMismatchError("act_id", 1, 2)
        assert (error.field, error.expected, error.actual) == ("act_id", 1, 2)

    def test_unclassified_entity(self) -> None:
        assert "ENTITY_SCOPES" in str(UnclassifiedEntityError(dict))
