"""
Basic Usage Example

This example walks through one tenant's box office:
- Registering tenants through the administrative services
- Creating venues and acts under a tenant context
- Scheduling shows within venue capacity
- Carving ticket offers out of a show's tickets
- Seeing another tenant's data disappear

Run with: python examples/basic_usage.py
"""

import asyncio
from datetime import UTC, datetime, timedelta

from boxoffice import (
    BoxOffice,
    BoxOfficeConfig,
    InvalidArgumentError,
    NotFoundError,
    TenantContext,
)


async def main():
    """Demonstrate tenant-scoped scheduling and capacity checks."""
    print("=" * 60)
    print("Box Office Basic Usage Example")
    print("=" * 60)

    async with BoxOffice.create(BoxOfficeConfig(enable_tracing=False)) as box:
        # =====================================================================
        # Step 1: Register tenants
        # =====================================================================
        print("\n1. Registering tenants...")
        admin = box.admin()
        acme = await admin.tenants.create("Acme Events", "acme")
        globex = await admin.tenants.create("Globex Live", "globex")
        print(f"   {acme.name} -> id {acme.id}")
        print(f"   {globex.name} -> id {globex.id}")

        acme_services = box.for_context(TenantContext.for_tenant(acme.id))
        globex_services = box.for_context(TenantContext.for_tenant(globex.id))

        # =====================================================================
        # Step 2: Venues and acts
        # =====================================================================
        print("\n2. Creating a venue and an act for Acme...")
        venue = await acme_services.venues.create("Main Hall", seating_capacity=1000)
        act = await acme_services.acts.create("The Headliners")
        print(f"   Venue: {venue.name} ({venue.seating_capacity} seats)")
        print(f"   Act: {act.name}")

        # =====================================================================
        # Step 3: Schedule a show
        # =====================================================================
        print("\n3. Scheduling a show...")
        start = datetime.now(UTC) + timedelta(days=7)
        show = await acme_services.shows.create(act.external_id, venue.external_id, 1000, start)
        print(f"   Show {show.external_id} at {show.start_time:%Y-%m-%d %H:%M} UTC")

        try:
            await acme_services.shows.create(act.external_id, venue.external_id, 5000, start)
        except InvalidArgumentError as e:
            print(f"   Oversized show blocked: {e.message}")

        # =====================================================================
        # Step 4: Ticket offers
        # =====================================================================
        print("\n4. Creating ticket offers...")
        offers = acme_services.ticket_offers
        await offers.create(show.external_id, "General Admission", "45.00", 600)
        try:
            await offers.create(show.external_id, "Late Release", "55.00", 500)
        except InvalidArgumentError as e:
            print(f"   Over-allocation blocked: {e.message}")
        await offers.create(show.external_id, "Balcony", "35.00", 400)

        summary = await offers.capacity_summary(show.external_id)
        print(f"   Allocated {summary.allocated_tickets} of {summary.total_tickets}")
        print(f"   Remaining: {summary.available_capacity}")

        # =====================================================================
        # Step 5: Nearby shows
        # =====================================================================
        print("\n5. Shows near the same time at this venue:")
        nearby = await acme_services.shows.nearby(venue.external_id, start + timedelta(hours=3))
        print(f"   {nearby.message}")

        # =====================================================================
        # Step 6: Isolation
        # =====================================================================
        print("\n6. Globex looking for Acme's show:")
        try:
            await globex_services.shows.get_by_external_id(show.external_id)
        except NotFoundError as e:
            print(f"   {e}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
