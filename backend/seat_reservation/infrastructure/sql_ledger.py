"""
SQL-backed booking ledger.

CONCURRENCY STRATEGY: Optimistic Locking on a per-event version row
====================================================================

Problem:
  Two users request seat A1 at the same moment. Both read the booked seats,
  both see A1 free, both insert. Result: double booking.

Solution:
  Every event has one `seat_ledgers` row holding a version counter.

  1. The coordinator reads (version, booked seats) for the event
  2. UPDATE seat_ledgers SET version = version + 1
     WHERE event_id = :event_id AND version = :expected
  3. If rows_affected == 0 another booking committed first -> VersionConflict
  4. Otherwise insert the booking and its booked_seats rows in the same
     transaction, so the version bump and the seats become visible together

  The first booking of an event INSERTs the row with version 1; a primary key
  collision there means another writer won the race. The unique constraint on
  booked_seats(event_id, seat_key) is the final safety net and is reported as
  a VersionConflict too: the re-read that follows turns it into a proper
  seat conflict.
"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from seat_reservation.core.exceptions import StoreUnavailable
from seat_reservation.core.logging import get_logger
from seat_reservation.domain import (
    AvailabilitySnapshot,
    Booking,
    CommitResult,
    Committed,
    NewBooking,
    VersionConflict,
    seat_from_key,
    seat_key,
)
from seat_reservation.models import BookedSeat, Booking as BookingRow, SeatLedger
from seat_reservation.services.interfaces.ledger import LedgerStore

logger = get_logger(__name__)


class _StaleVersion(Exception):
    """Raised inside the commit transaction to roll it back."""


def _to_domain(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        event_id=row.event_id,
        user_id=row.user_id,
        seats=tuple(row.seats),
        created_at=row.created_at,
    )


class SqlLedgerStore(LedgerStore):
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def read_snapshot(self, event_id: int) -> AvailabilitySnapshot:
        # Version first: seats read afterwards are at least that fresh, so a
        # stale version can only cost a retry, never hide a booked seat.
        try:
            async with self._session_factory() as session:
                version = (
                    await session.execute(
                        select(SeatLedger.version).where(SeatLedger.event_id == event_id)
                    )
                ).scalar_one_or_none()
                keys = (
                    await session.execute(
                        select(BookedSeat.seat_key).where(BookedSeat.event_id == event_id)
                    )
                ).scalars().all()
        except SQLAlchemyError as e:
            logger.error("ledger_read_failed", event_id=event_id, error=str(e))
            raise StoreUnavailable() from e

        return AvailabilitySnapshot(
            booked_seats=frozenset(seat_from_key(key) for key in keys),
            version=version or 0,
        )

    async def insert_if_version_matches(
        self,
        event_id: int,
        expected_version: int,
        booking: NewBooking,
    ) -> CommitResult:
        new_version = expected_version + 1
        created_at = datetime.now(timezone.utc)

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if expected_version == 0:
                        session.add(SeatLedger(event_id=event_id, version=new_version))
                        await session.flush()
                    else:
                        result = await session.execute(
                            update(SeatLedger)
                            .where(
                                SeatLedger.event_id == event_id,
                                SeatLedger.version == expected_version,
                            )
                            .values(version=SeatLedger.version + 1)
                        )
                        if result.rowcount == 0:
                            raise _StaleVersion()

                    row = BookingRow(
                        event_id=event_id,
                        user_id=booking.user_id,
                        seats=list(booking.seats),
                        version=new_version,
                        created_at=created_at,
                        updated_at=created_at,
                    )
                    session.add(row)
                    await session.flush()
                    session.add_all(
                        BookedSeat(booking_id=row.id, event_id=event_id, seat_key=seat_key(seat))
                        for seat in booking.seats
                    )
                    await session.flush()
                    committed = Booking(
                        id=row.id,
                        event_id=event_id,
                        user_id=booking.user_id,
                        seats=booking.seats,
                        created_at=created_at,
                    )
        except _StaleVersion:
            return VersionConflict(expected_version=expected_version)
        except IntegrityError as e:
            logger.info(
                "ledger_integrity_conflict",
                event_id=event_id,
                expected_version=expected_version,
                error=str(e.orig),
            )
            return VersionConflict(expected_version=expected_version)
        except SQLAlchemyError as e:
            logger.error("ledger_write_failed", event_id=event_id, error=str(e))
            raise StoreUnavailable() from e

        return Committed(booking=committed, version=new_version)

    async def _list(self, *criteria, order_by) -> list[Booking]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(BookingRow).where(*criteria).order_by(order_by)
                )
                return [_to_domain(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("ledger_list_failed", error=str(e))
            raise StoreUnavailable() from e

    async def list_by_event(self, event_id: int) -> list[Booking]:
        return await self._list(BookingRow.event_id == event_id, order_by=BookingRow.version.asc())

    # Ids are drawn at INSERT time. Within one event that is also commit order:
    # a booking at version v+1 could only be inserted after version v committed.
    # Across events ids only approximate commit time.
    async def list_by_user(self, user_id: str) -> list[Booking]:
        return await self._list(BookingRow.user_id == user_id, order_by=BookingRow.id.asc())

    async def list_all(self) -> list[Booking]:
        return await self._list(order_by=BookingRow.id.asc())
