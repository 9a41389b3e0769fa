"""
Shared test fixtures for the boxoffice library.

This module provides reusable test helpers:
- FixedClock, a controllable time source for scheduling checks
- Seed helpers that create tenants, venues, acts and shows through services

Usage:
    from tests.fixtures import (
        FIXED_NOW,
        FixedClock,
        SeededTenant,
        seed_tenant,
        schedule_show,
    )
"""

from tests.fixtures.clock import FIXED_NOW, FixedClock
from tests.fixtures.seed import SeededTenant, schedule_show, seed_tenant

__all__ = [
    "FIXED_NOW",
    "FixedClock",
    "SeededTenant",
    "seed_tenant",
    "schedule_show",
]
