"""
Shared pytest fixtures for the boxoffice tests.

This module provides:
- Backend fixtures (database), parametrized over the in-memory and the
  aiosqlite backends so service tests run against both
- Application fixtures (box, clock, tracer)
- Seeded tenant fixtures (acme, globex): each owns one venue (capacity 100)
  and one act
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from boxoffice import BoxOffice, BoxOfficeConfig, InMemoryDatabase, MockTracer, SQLiteDatabase
from boxoffice.persistence.base import BaseDatabase
from tests.fixtures import FixedClock, SeededTenant, seed_tenant

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for tests."""
    config.addinivalue_line("markers", "sqlite: marks tests that run against aiosqlite")


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def database(request: pytest.FixtureRequest) -> AsyncGenerator[BaseDatabase, None]:
    """
    Provide an initialized, empty database.

    Parametrized: every test using it runs once per backend. The SQLite
    variant uses a private ':memory:' database closed after the test.

    Yields:
        InMemoryDatabase or SQLiteDatabase
    """
    if request.param == "sqlite":
        db: BaseDatabase = SQLiteDatabase(":memory:", enable_tracing=False)
    else:
        db = InMemoryDatabase(enable_tracing=False)

    async with db:
        yield db


@pytest_asyncio.fixture
async def memory_database() -> AsyncGenerator[InMemoryDatabase, None]:
    """Provide an in-memory database only."""
    db = InMemoryDatabase(enable_tracing=False)
    async with db:
        yield db


@pytest_asyncio.fixture
async def sqlite_database() -> AsyncGenerator[SQLiteDatabase, None]:
    """Provide an initialized aiosqlite database on ':memory:'."""
    db = SQLiteDatabase(":memory:", enable_tracing=False)
    async with db:
        yield db


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    """
    Provide a clock frozen at FIXED_NOW.

    Returns:
        FixedClock that tests may advance
    """
    return FixedClock()


@pytest.fixture
def tracer() -> MockTracer:
    """Provide a tracer that records span names and attributes."""
    return MockTracer()


@pytest.fixture
def box(database: BaseDatabase, clock: FixedClock) -> BoxOffice:
    """
    Provide a BoxOffice over the parametrized database.

    Tracing is disabled; tests that inspect spans build their own BoxOffice
    with the tracer fixture.
    """
    return BoxOffice(database, BoxOfficeConfig(enable_tracing=False), clock=clock)


# ============================================================================
# Seeded Tenant Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def acme(box: BoxOffice) -> SeededTenant:
    """Tenant 'acme' with venue 'Main Hall' (capacity 100) and one act."""
    return await seed_tenant(box, "acme")


@pytest_asyncio.fixture
async def globex(box: BoxOffice, acme: SeededTenant) -> SeededTenant:
    """Tenant 'globex', created after acme, with its own venue and act."""
    return await seed_tenant(box, "globex", venue_name="Globex Arena", act_name="Globex Players")
