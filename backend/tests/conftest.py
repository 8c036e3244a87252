"""Shared test configuration and fixtures.

Every test gets a fresh in-memory storage and session store wired into the app
through dependency overrides, so API tests need no database. PostgreSQL-backed
tests live in ``test_storage/test_sql_storage.py`` and only run when
``TEST_DATABASE_URL`` is set.
"""

import asyncio
import uuid
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from havenstay.auth.dependencies import get_session_store
from havenstay.auth.passwords import hash_password
from havenstay.auth.sessions import InMemorySessionStore
from havenstay.config import settings
from havenstay.main import app
from havenstay.models import Property, User
from havenstay.storage.dependencies import get_storage
from havenstay.storage.memory import MemoryStorage

TEST_PASSWORD = "testpass123"


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore(timedelta(hours=settings.session_ttl_hours))


@pytest_asyncio.fixture
async def client(
    storage: MemoryStorage,
    sessions: InMemorySessionStore,
    tmp_path,
    monkeypatch,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the per-test stores."""

    async def override_get_storage() -> AsyncGenerator[MemoryStorage, None]:
        yield storage

    app.dependency_overrides[get_storage] = override_get_storage
    app.dependency_overrides[get_session_store] = lambda: sessions
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users and session cookies
# ---------------------------------------------------------------------------


async def make_user(storage: MemoryStorage, role: str = "guest", first_name: str = "Test") -> User:
    unique = uuid.uuid4().hex[:8]
    return await storage.add_user(
        User(
            email=f"{role}-{unique}@test.com",
            hashed_password=hash_password(TEST_PASSWORD),
            first_name=first_name,
            last_name="User",
            role=role,
            is_verified=False,
        )
    )


async def cookie_for(sessions: InMemorySessionStore, user: User) -> dict[str, str]:
    """Return a Cookie header carrying a fresh session for ``user``."""
    token = await sessions.create(user.id)
    return {"Cookie": f"{settings.session_cookie_name}={token}"}


@pytest_asyncio.fixture
async def guest(storage: MemoryStorage) -> User:
    return await make_user(storage, "guest", "Ada")


@pytest_asyncio.fixture
async def other_guest(storage: MemoryStorage) -> User:
    return await make_user(storage, "guest", "Bola")


@pytest_asyncio.fixture
async def host(storage: MemoryStorage) -> User:
    return await make_user(storage, "host", "Chidi")


@pytest_asyncio.fixture
async def other_host(storage: MemoryStorage) -> User:
    return await make_user(storage, "host", "Dayo")


@pytest_asyncio.fixture
async def admin(storage: MemoryStorage) -> User:
    return await make_user(storage, "admin", "Efe")


@pytest_asyncio.fixture
async def guest_headers(sessions: InMemorySessionStore, guest: User) -> dict[str, str]:
    return await cookie_for(sessions, guest)


@pytest_asyncio.fixture
async def other_guest_headers(sessions: InMemorySessionStore, other_guest: User) -> dict[str, str]:
    return await cookie_for(sessions, other_guest)


@pytest_asyncio.fixture
async def host_headers(sessions: InMemorySessionStore, host: User) -> dict[str, str]:
    return await cookie_for(sessions, host)


@pytest_asyncio.fixture
async def other_host_headers(sessions: InMemorySessionStore, other_host: User) -> dict[str, str]:
    return await cookie_for(sessions, other_host)


@pytest_asyncio.fixture
async def admin_headers(sessions: InMemorySessionStore, admin: User) -> dict[str, str]:
    return await cookie_for(sessions, admin)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def listing_payload(**overrides) -> dict:
    payload = {
        "title": "Sunny Lekki Apartment",
        "description": "Two-bedroom flat close to the beach.",
        "address": "12 Admiralty Way",
        "city": "Lagos",
        "neighborhood": "Lekki",
        "propertyType": "entire_apartment",
        "pricePerNight": 25000,
        "cleaningFee": 5000,
        "maxGuests": 4,
        "bedrooms": 2,
        "beds": 2,
        "bathrooms": 2,
        "amenities": ["wifi", "ac"],
    }
    payload.update(overrides)
    return payload


async def make_property(storage: MemoryStorage, host: User, approved: bool = True, **overrides) -> Property:
    data = {
        "title": "Sunny Lekki Apartment",
        "description": "Two-bedroom flat close to the beach.",
        "address": "12 Admiralty Way",
        "city": "Lagos",
        "neighborhood": "Lekki",
        "property_type": "entire_apartment",
        "price_per_night": 25000,
        "cleaning_fee": 5000,
        "max_guests": 4,
        "bedrooms": 2,
        "beds": 2,
        "bathrooms": 2,
        "amenities": ["wifi", "ac"],
        "images": [],
        "house_rules": None,
        "cancellation_policy": "moderate",
        "is_active": True,
    }
    data.update(overrides)
    return await storage.add_property(Property(host_id=host.id, is_approved=approved, **data))


@pytest_asyncio.fixture
async def listed_property(storage: MemoryStorage, host: User) -> Property:
    """An approved, active listing owned by ``host``."""
    return await make_property(storage, host)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


def suspend_during_overlap_check(monkeypatch, storage: MemoryStorage) -> None:
    """Make the overlap read hand control back to the event loop.

    Dict lookups never suspend, so without this concurrent bookings would run
    one after another whether or not the property lock is held.
    """
    read_active = storage.list_active_bookings

    async def list_active_bookings(property_id: uuid.UUID):
        await asyncio.sleep(0)
        bookings = await read_active(property_id)
        await asyncio.sleep(0)
        return bookings

    monkeypatch.setattr(storage, "list_active_bookings", list_active_bookings)


def drop_booking_lock(monkeypatch, storage: MemoryStorage) -> None:
    """Replace the per-property lock with a scope that serialises nothing."""

    @asynccontextmanager
    async def booking_scope(property_id: uuid.UUID) -> AsyncIterator[None]:
        yield

    monkeypatch.setattr(storage, "booking_scope", booking_scope)
