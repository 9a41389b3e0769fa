"""
boxoffice - Multi-tenant venue, act, show and ticket management.

This library provides:
- Tenant isolation enforced transitively through entity relationships
- Domain services for venues, acts, shows, ticket offers, sales and customers
- Capacity allocation and nearby-show scheduling rules
- In-Memory, SQLite (aiosqlite) and PostgreSQL (SQLAlchemy) persistence
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("boxoffice")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

# Application
from boxoffice.app import AdminServices, BoxOffice, TenantServices, create_database
from boxoffice.config import BoxOfficeConfig

# Exceptions
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

# Entities
from boxoffice.models import Act, Address, Customer, GeoPoint, Show, Tenant, TicketOffer, TicketSale, Venue

# Observability
from boxoffice.observability import MockTracer, NullTracer, OpenTelemetryTracer, Tracer

# Persistence
from boxoffice.persistence import (
    Database,
    Filter,
    InMemoryDatabase,
    PostgreSQLDatabase,
    Query,
    Repository,
    SQLiteDatabase,
    UnitOfWork,
)

# Services
from boxoffice.services import (
    ActService,
    CustomerService,
    ShowService,
    TenantService,
    TicketOfferService,
    TicketSaleService,
    VenueService,
)

# Tenancy
from boxoffice.tenancy import (
    ENTITY_SCOPES,
    UNSCOPED,
    ScopedFilter,
    ScopedFilterBuilder,
    ScopedTenant,
    TenantContext,
    TenantContextRequiredError,
    TenantMismatchError,
    UnclassifiedEntityError,
    Unscoped,
    tenant_context_from_claims,
)

# Views
from boxoffice.views import (
    ActView,
    CustomerView,
    NearbyShow,
    NearbyShowsView,
    ShowCapacityView,
    ShowView,
    TenantView,
    TicketOfferView,
    TicketSaleView,
    VenueView,
)

__all__ = [
    "__version__",
    # Application
    "BoxOffice",
    "BoxOfficeConfig",
    "TenantServices",
    "AdminServices",
    "create_database",
    # Exceptions
    "ErrorKind",
    "BoxOfficeError",
    "NotFoundError",
    "InvalidArgumentError",
    "ConflictError",
    "DuplicateKeyError",
    "AllocationConflictError",
    "PersistenceError",
    # Entities
    "Tenant",
    "Venue",
    "Act",
    "Show",
    "TicketOffer",
    "TicketSale",
    "Customer",
    "Address",
    "GeoPoint",
    # Observability
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    # Persistence
    "Database",
    "UnitOfWork",
    "Repository",
    "Filter",
    "Query",
    "InMemoryDatabase",
    "SQLiteDatabase",
    "PostgreSQLDatabase",
    # Services
    "VenueService",
    "ActService",
    "ShowService",
    "TicketOfferService",
    "TicketSaleService",
    "CustomerService",
    "TenantService",
    # Tenancy
    "TenantContext",
    "ScopedTenant",
    "Unscoped",
    "UNSCOPED",
    "ENTITY_SCOPES",
    "ScopedFilter",
    "ScopedFilterBuilder",
    "tenant_context_from_claims",
    "TenantContextRequiredError",
    "TenantMismatchError",
    "UnclassifiedEntityError",
    # Views
    "TenantView",
    "VenueView",
    "ActView",
    "ShowView",
    "NearbyShow",
    "NearbyShowsView",
    "TicketOfferView",
    "ShowCapacityView",
    "TicketSaleView",
    "CustomerView",
]
