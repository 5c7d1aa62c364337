"""
Pytest configuration and fixtures for Calendarium tests.

This module provides:
- A fresh in-memory database per test (schema from the ORM metadata)
- A fixed clock injected into the application
- Test client fixtures
- User, admin and session token fixtures
"""

# Set environment variables BEFORE importing anything from calendarium
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GEOLOCATION_ENABLED"] = "false"
os.environ["DB_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
# Cheap Argon2 parameters keep hashing fast
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from calendarium.core.clock import FixedClock, get_clock
from calendarium.core.config import settings
from calendarium.core.database import create_sessionmaker, get_db
from calendarium.main import app
from calendarium.models import ADMIN_ROLE, Base
from calendarium.repositories.role_repository import RoleRepository
from calendarium.services.role_service import RoleService

TEST_DATABASE_URL = settings.test_database_url_str or "sqlite+aiosqlite:///:memory:"

# Monday morning, an hour before the standup event used across the tests
FROZEN_NOW = datetime(2024, 1, 15, 8, 0, tzinfo=UTC)

DEFAULT_PASSWORD = "secret1"


# ============================================================================
# Clock
# ============================================================================
@pytest.fixture
def clock() -> FixedClock:
    """Clock shared by the application and the test, frozen at FROZEN_NOW."""
    return FixedClock(FROZEN_NOW)


# ============================================================================
# Database Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a test database engine with a freshly created schema.

    The in-memory SQLite database lives as long as its single pooled
    connection, so every test starts from an empty database.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(
    test_engine: AsyncEngine, clock: FixedClock
) -> async_sessionmaker[AsyncSession]:
    """Session factory over the test engine, with the default roles seeded."""
    factory = create_sessionmaker(test_engine)
    async with factory() as session:
        await RoleService(session, clock).ensure_default_roles()
    return factory


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session for arranging and inspecting data directly."""
    async with session_factory() as session:
        yield session


# ============================================================================
# FastAPI Client Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FixedClock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async client wired to the test database and the fixed clock.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.state.sessionmaker = session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.sessionmaker = None


# ============================================================================
# User Fixtures
# ============================================================================
SignUp = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def sign_up(async_client: AsyncClient) -> SignUp:
    """
    Factory that signs a user up through the API and logs them in.

    Returns a dict with ``user_id``, ``email``, ``session_token``,
    ``refresh_token`` and ready-made ``headers``.
    """

    async def _sign_up(
        email: str,
        password: str = DEFAULT_PASSWORD,
        lastname: str = "Doe",
        firstname: str = "Jane",
    ) -> dict[str, Any]:
        response = await async_client.post(
            "/user",
            json={
                "lastname": lastname,
                "firstname": firstname,
                "email": email,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["data"]["user_id"]

        response = await async_client.post(
            "/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]

        return {
            "user_id": user_id,
            "email": email,
            "session_token": data["session_token"],
            "refresh_token": data["refresh_token"],
            "headers": {"Authorization": f"Bearer {data['session_token']}"},
        }

    return _sign_up


@pytest_asyncio.fixture
async def test_user(sign_up: SignUp) -> dict[str, Any]:
    """A regular user holding only the ``user`` role."""
    return await sign_up("j@x.io")


@pytest_asyncio.fixture
async def other_user(sign_up: SignUp) -> dict[str, Any]:
    """A second regular user with no access to test_user's calendars."""
    return await sign_up("k@x.io", firstname="Kim")


@pytest_asyncio.fixture
async def admin_user(
    sign_up: SignUp,
    session_factory: async_sessionmaker[AsyncSession],
    clock: FixedClock,
) -> dict[str, Any]:
    """A user who additionally holds the ``admin`` role."""
    admin = await sign_up("admin@x.io", firstname="Ada")
    async with session_factory() as session:
        admin_role = await RoleRepository(session).get_by_name(ADMIN_ROLE)
        await RoleService(session, clock).assign_role(admin["user_id"], admin_role.role_id)
    return admin


@pytest_asyncio.fixture
async def calendar_id(async_client: AsyncClient, test_user: dict[str, Any]) -> int:
    """A calendar created by test_user."""
    response = await async_client.post(
        "/calendar", json={"title": "Work"}, headers=test_user["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["calendar_id"]
