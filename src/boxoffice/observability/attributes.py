"""
Span attribute names used across boxoffice.

Database attributes follow OpenTelemetry semantic conventions; the rest are
namespaced under ``boxoffice.``.
"""

# =============================================================================
# Tenancy
# =============================================================================

ATTR_TENANT_ID = "boxoffice.tenant.id"
"""Tenant id of the request context; absent for unscoped contexts."""

ATTR_TENANT_SCOPED = "boxoffice.tenant.scoped"
"""Whether the request runs under a tenant-bound context (bool)."""

# =============================================================================
# Entities
# =============================================================================

ATTR_ENTITY_TYPE = "boxoffice.entity.type"
"""Entity class name (e.g., 'Show', 'TicketOffer')."""

ATTR_EXTERNAL_ID = "boxoffice.entity.external_id"
"""External identifier of the primary entity of an operation."""

ATTR_PARENT_EXTERNAL_ID = "boxoffice.entity.parent_external_id"
"""External identifier of the parent an operation resolves first."""

ATTR_RESULT_COUNT = "boxoffice.result.count"
"""Number of entities returned (integer)."""

# =============================================================================
# Capacity
# =============================================================================

ATTR_TICKET_COUNT = "boxoffice.ticket.count"
"""Ticket count requested by an operation (integer)."""

ATTR_ALLOCATED_TICKETS = "boxoffice.ticket.allocated"
"""Tickets already allocated to offers for a show (integer)."""

# =============================================================================
# Database (OpenTelemetry semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system ('sqlite', 'postgresql', 'memory')."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation (SELECT, INSERT, UPDATE, DELETE)."""

ATTR_DB_TABLE = "db.sql.table"
"""Table the operation targets."""


__all__ = [
    "ATTR_TENANT_ID",
    "ATTR_TENANT_SCOPED",
    "ATTR_ENTITY_TYPE",
    "ATTR_EXTERNAL_ID",
    "ATTR_PARENT_EXTERNAL_ID",
    "ATTR_RESULT_COUNT",
    "ATTR_TICKET_COUNT",
    "ATTR_ALLOCATED_TICKETS",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
    "ATTR_DB_TABLE",
]
