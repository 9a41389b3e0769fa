"""
Observability utilities for boxoffice.

Provides the composition-based Tracer used by services and persistence
backends, and the span attribute names they share.
"""

from boxoffice.observability.attributes import (
    ATTR_ALLOCATED_TICKETS,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_DB_TABLE,
    ATTR_ENTITY_TYPE,
    ATTR_EXTERNAL_ID,
    ATTR_PARENT_EXTERNAL_ID,
    ATTR_RESULT_COUNT,
    ATTR_TENANT_ID,
    ATTR_TENANT_SCOPED,
    ATTR_TICKET_COUNT,
)
from boxoffice.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
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
