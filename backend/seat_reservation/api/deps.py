"""
FastAPI dependencies wiring stores and services.

Stores are process-wide singletons built from settings on first use; tests
replace get_ledger_store / get_event_catalog through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends

from seat_reservation.core.config import get_settings
from seat_reservation.db.session import get_session_factory
from seat_reservation.infrastructure import (
    InMemoryEventCatalog,
    InMemoryLedgerStore,
    SqlEventCatalog,
    SqlLedgerStore,
)
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.cache_service import AvailabilityCache
from seat_reservation.services.history_service import HistoryService
from seat_reservation.services.interfaces import EventCatalog, LedgerStore
from seat_reservation.services.reservation_service import ReservationCoordinator, RetryPolicy

_ledger: Optional[LedgerStore] = None
_catalog: Optional[EventCatalog] = None


def _use_memory_backend() -> bool:
    return get_settings().LEDGER_BACKEND == "memory"


def get_ledger_store() -> LedgerStore:
    global _ledger
    if _ledger is None:
        _ledger = InMemoryLedgerStore() if _use_memory_backend() else SqlLedgerStore(get_session_factory())
    return _ledger


def get_event_catalog() -> EventCatalog:
    global _catalog
    if _catalog is None:
        _catalog = InMemoryEventCatalog() if _use_memory_backend() else SqlEventCatalog(get_session_factory())
    return _catalog


def get_availability_cache() -> Optional[AvailabilityCache]:
    return AvailabilityCache() if get_settings().REDIS_ENABLED else None


def get_availability_view(
    ledger: LedgerStore = Depends(get_ledger_store),
    catalog: EventCatalog = Depends(get_event_catalog),
    cache: Optional[AvailabilityCache] = Depends(get_availability_cache),
) -> AvailabilityView:
    return AvailabilityView(ledger, catalog, cache)


def get_coordinator(
    ledger: LedgerStore = Depends(get_ledger_store),
    availability: AvailabilityView = Depends(get_availability_view),
) -> ReservationCoordinator:
    return ReservationCoordinator(ledger, availability, RetryPolicy.from_settings(get_settings()))


def get_history_service(
    ledger: LedgerStore = Depends(get_ledger_store),
    catalog: EventCatalog = Depends(get_event_catalog),
) -> HistoryService:
    return HistoryService(ledger, catalog)
