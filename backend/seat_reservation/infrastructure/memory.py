"""
In-process ledger and catalog.

Used by the test suite and by LEDGER_BACKEND=memory for local runs. The
compare-and-set is guarded by a per-event asyncio.Lock held only for the
duration of the check-and-append itself, which is what a database row lock
would give us. Distinct events never share a lock.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from seat_reservation.domain import (
    AvailabilitySnapshot,
    Booking,
    CommitResult,
    Committed,
    EventInfo,
    NewBooking,
    VersionConflict,
    seat_key,
)
from seat_reservation.services.interfaces.catalog import EventCatalog
from seat_reservation.services.interfaces.ledger import LedgerStore


@dataclass
class _EventLedger:
    version: int = 0
    booked: dict = field(default_factory=dict)  # seat_key -> label
    bookings: list = field(default_factory=list)


class InMemoryLedgerStore(LedgerStore):
    def __init__(self):
        self._events: dict[int, _EventLedger] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._all: list[Booking] = []
        self._ids = itertools.count(1)

    def _ledger(self, event_id: int) -> _EventLedger:
        return self._events.setdefault(event_id, _EventLedger())

    def _lock(self, event_id: int) -> asyncio.Lock:
        return self._locks.setdefault(event_id, asyncio.Lock())

    async def read_snapshot(self, event_id: int) -> AvailabilitySnapshot:
        # Yield like a network round-trip would, so concurrent callers interleave
        await asyncio.sleep(0)
        ledger = self._ledger(event_id)
        return AvailabilitySnapshot(frozenset(ledger.booked.values()), ledger.version)

    async def insert_if_version_matches(
        self,
        event_id: int,
        expected_version: int,
        booking: NewBooking,
    ) -> CommitResult:
        await asyncio.sleep(0)
        async with self._lock(event_id):
            ledger = self._ledger(event_id)
            keys = [seat_key(seat) for seat in booking.seats]
            if ledger.version != expected_version or any(k in ledger.booked for k in keys):
                return VersionConflict(expected_version=expected_version)

            committed = Booking(
                id=next(self._ids),
                event_id=event_id,
                user_id=booking.user_id,
                seats=tuple(booking.seats),
                created_at=datetime.now(timezone.utc),
            )
            ledger.version += 1
            ledger.booked.update(zip(keys, booking.seats))
            ledger.bookings.append(committed)
            self._all.append(committed)
            return Committed(booking=committed, version=ledger.version)

    async def list_by_event(self, event_id: int) -> list[Booking]:
        return list(self._events[event_id].bookings) if event_id in self._events else []

    async def list_by_user(self, user_id: str) -> list[Booking]:
        return [b for b in self._all if b.user_id == user_id]

    async def list_all(self) -> list[Booking]:
        return list(self._all)


class InMemoryEventCatalog(EventCatalog):
    def __init__(self, events: Optional[Iterable[EventInfo]] = None):
        self._events: dict[int, EventInfo] = {e.id: e for e in events or ()}

    def add(self, event: EventInfo) -> EventInfo:
        self._events[event.id] = event
        return event

    def remove(self, event_id: int) -> None:
        self._events.pop(event_id, None)

    async def get_event(self, event_id: int) -> Optional[EventInfo]:
        return self._events.get(event_id)

    async def list_events(self, page: int = 1, page_size: int = 20) -> tuple[list[EventInfo], int]:
        ordered = [self._events[k] for k in sorted(self._events)]
        start = (page - 1) * page_size
        return ordered[start:start + page_size], len(ordered)
