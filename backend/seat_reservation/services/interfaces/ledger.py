"""
Booking ledger interface.
The reservation coordinator only talks to the store through this contract,
so the SQL store and the in-memory store are interchangeable.
"""

from abc import ABC, abstractmethod

from seat_reservation.domain import AvailabilitySnapshot, Booking, CommitResult, NewBooking


class LedgerStore(ABC):
    """
    Append-only record of committed bookings with a per-event version.

    Implementations:
    - SqlLedgerStore: PostgreSQL via SQLAlchemy, version row gated by UPDATE ... WHERE version = :expected
    - InMemoryLedgerStore: single-process store for tests and local runs
    """

    @abstractmethod
    async def read_snapshot(self, event_id: int) -> AvailabilitySnapshot:
        """
        Booked seats and current version for an event.

        An event with no bookings yet has version 0 and no booked seats.
        """
        pass

    @abstractmethod
    async def insert_if_version_matches(
        self,
        event_id: int,
        expected_version: int,
        booking: NewBooking,
    ) -> CommitResult:
        """
        Atomically append a booking if the event is still at expected_version.

        Returns:
            Committed(booking, version) with the assigned id, timestamp and the
            new version (expected_version + 1), or VersionConflict if another
            writer advanced the event first. Nothing is written on conflict.
        """
        pass

    @abstractmethod
    async def list_by_event(self, event_id: int) -> list[Booking]:
        """Bookings for one event in commit order (ascending version)."""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[Booking]:
        """
        Bookings made by one user.

        Bookings of the same event are in commit order. Commits of different
        events are not ordered against each other, so across events the order
        is only the store's allocation order, which approximates commit time.
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[Booking]:
        """Every booking; same ordering guarantee as list_by_user."""
        pass
