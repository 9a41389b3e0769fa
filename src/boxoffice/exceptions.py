"""
Error taxonomy for the boxoffice package.

Every failure a domain service raises carries one of a small, closed set of
kinds so the request layer can map it to a transport status without
inspecting messages:

- NOT_FOUND: an entity (or a required parent) does not resolve under the
  current tenant scope. "Belongs to another tenant" is indistinguishable
  from "does not exist".
- INVALID_ARGUMENT: a supplied value violates a stated invariant. The error
  names the offending field.
- CONFLICT: a write collides with existing state (duplicate external id).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Failure kinds surfaced to the request layer."""

    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    CONFLICT = "conflict"


class BoxOfficeError(Exception):
    """Base exception for the boxoffice package."""

    kind: ErrorKind | None = None


class NotFoundError(BoxOfficeError):
    """Raised when an entity does not resolve under the current scope."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, external_id: Any) -> None:
        self.entity = entity
        self.external_id = external_id
        super().__init__(f"{entity} with external id {external_id} not found")


class InvalidArgumentError(BoxOfficeError):
    """
    Raised when a supplied value violates a domain invariant.

    Attributes:
        field: Name of the offending input field
        message: Human-readable explanation of the violated bound
    """

    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ConflictError(BoxOfficeError):
    """Raised when a write collides with existing state."""

    kind = ErrorKind.CONFLICT


class DuplicateKeyError(ConflictError):
    """Raised when a unique key (external id, tenant slug) is already taken."""

    def __init__(self, entity: str, field: str, value: Any) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field.replace('_', ' ')} {value} already exists")


class AllocationConflictError(ConflictError):
    """
    Reserved for a concurrent allocation that lost a race on a show's capacity.

    Units of work are serialized per database, so no backend raises this today.
    """

    def __init__(self, show_external_id: Any) -> None:
        self.show_external_id = show_external_id
        super().__init__(f"Concurrent allocation conflict on show {show_external_id}")


class PersistenceError(BoxOfficeError):
    """Raised when a backend is used incorrectly (closed, not initialized)."""

    pass


__all__ = [
    "ErrorKind",
    "BoxOfficeError",
    "NotFoundError",
    "InvalidArgumentError",
    "ConflictError",
    "DuplicateKeyError",
    "AllocationConflictError",
    "PersistenceError",
]
