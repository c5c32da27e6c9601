"""
Pytest fixtures for stores, services, HTTP client and authentication.

The API runs against the in-memory ledger and catalog through FastAPI
dependency overrides; SQL store tests build their own SQLite database.
"""

import os

# Must be set before the application reads its settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LEDGER_BACKEND", "memory")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RESERVATION_BACKOFF_BASE_SECONDS", "0.001")
os.environ.setdefault("RESERVATION_BACKOFF_MAX_SECONDS", "0.01")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from seat_reservation.main import app
from seat_reservation.api.deps import get_availability_cache, get_event_catalog, get_ledger_store
from seat_reservation.core.security import create_access_token
from seat_reservation.domain import EventInfo
from seat_reservation.infrastructure import InMemoryEventCatalog, InMemoryLedgerStore
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.reservation_service import ReservationCoordinator, RetryPolicy

LABELLED_EVENT_ID = 1
NUMBERED_EVENT_ID = 2


@pytest.fixture
def concert() -> EventInfo:
    """Event with three labelled seats."""
    return EventInfo(
        id=LABELLED_EVENT_ID,
        name="Test Concert",
        seat_labels=("A1", "A2", "A3"),
        category="music",
        date="2026-12-01",
    )


@pytest.fixture
def hall() -> EventInfo:
    """Event with 50 numbered seats."""
    return EventInfo(id=NUMBERED_EVENT_ID, name="Lecture Hall", total_seats=50, category="talk")


@pytest.fixture
def ledger() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def catalog(concert: EventInfo, hall: EventInfo) -> InMemoryEventCatalog:
    return InMemoryEventCatalog([concert, hall])


@pytest.fixture
def availability(ledger, catalog) -> AvailabilityView:
    return AvailabilityView(ledger, catalog)


@pytest.fixture
def coordinator(ledger, availability) -> ReservationCoordinator:
    return ReservationCoordinator(
        ledger,
        availability,
        RetryPolicy(max_attempts=5, base_delay=0.0, max_delay=0.0),
    )


@pytest_asyncio.fixture(scope="function")
async def client(ledger, catalog) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the stores swapped for in-memory ones."""
    app.dependency_overrides[get_ledger_store] = lambda: ledger
    app.dependency_overrides[get_event_catalog] = lambda: catalog
    app.dependency_overrides[get_availability_cache] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def _headers(user_id: str, is_admin: bool = False) -> dict:
    token = create_access_token(data={"sub": user_id, "is_admin": is_admin})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> dict:
    return _headers("user-1")


@pytest.fixture
def other_headers() -> dict:
    return _headers("user-2")


@pytest.fixture
def admin_headers() -> dict:
    return _headers("admin-1", is_admin=True)
