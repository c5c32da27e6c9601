"""
Reservation coordinator: the only write path for bookings.

CONCURRENCY STRATEGY: Check, then version-gated commit, with bounded retry
==========================================================================

Problem:
  "Read booked seats, then insert" is a race. Two requests for seat A1 both
  see it free and both insert. Result: double booking.

Solution:
  1. Validate the request locally (non-empty, no duplicates, seats exist)
  2. Read the event's snapshot (booked seats, version) from the ledger
  3. If any requested seat is booked -> SeatConflict, terminal, never retried
  4. insert_if_version_matches(event, version, booking): the ledger appends
     only if nobody committed since our read
  5. VersionConflict means we lost a race, not that our seats are gone.
     Back off (exponential + jitter) and go back to step 2, at most
     max_attempts commits, then ReservationBusy

  No lock is held across ledger calls. Events never coordinate with each
  other; for one event, commits are totally ordered by version.

  A caller deadline stops the loop with ReservationTimeout. Since every ledger
  write is all-or-nothing, stopping early never leaves a partial booking.
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence

from seat_reservation.core.config import Settings
from seat_reservation.core.exceptions import (
    EventNotFound,
    ReservationBusy,
    ReservationError,
    ReservationTimeout,
    SeatConflict,
    ValidationError,
)
from seat_reservation.core.logging import get_logger
from seat_reservation.core.metrics import (
    record_ledger_commit,
    record_reservation,
    reservation_latency,
    reservation_retries,
)
from seat_reservation.domain import Booking, Committed, EventInfo, NewBooking, SeatLabel, is_seat_label, seat_key
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.interfaces import LedgerStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay: float = 0.01
    max_delay: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RESERVATION_MAX_ATTEMPTS,
            base_delay=settings.RESERVATION_BACKOFF_BASE_SECONDS,
            max_delay=settings.RESERVATION_BACKOFF_MAX_SECONDS,
        )

    def backoff(self, attempt: int, rng: random.Random) -> float:
        """Delay after the given failed attempt (1-based)."""
        delay = self.base_delay * (2 ** (attempt - 1)) + rng.uniform(0, self.base_delay)
        return min(delay, self.max_delay)


def _outcome(error: ReservationError) -> str:
    if isinstance(error, SeatConflict):
        return "conflict"
    if isinstance(error, ReservationTimeout):
        return "timeout"
    if isinstance(error, ReservationBusy):
        return "busy"
    if isinstance(error, (ValidationError, EventNotFound)):
        return "invalid"
    return "error"


def validate_seat_request(seats: Any) -> tuple[SeatLabel, ...]:
    """Shape checks that need no catalog: a non-empty list of distinct labels."""
    if not isinstance(seats, (list, tuple)):
        raise ValidationError("Seats must be a list of seat labels")
    if not seats:
        raise ValidationError("At least one seat must be requested")

    malformed = [seat for seat in seats if not is_seat_label(seat)]
    if malformed:
        raise ValidationError("Seat labels must be strings or integers", seats=malformed)

    seen: set[str] = set()
    duplicates = []
    for seat in seats:
        key = seat_key(seat)
        if key in seen and seat not in duplicates:
            duplicates.append(seat)
        seen.add(key)
    if duplicates:
        labels = ", ".join(str(seat) for seat in duplicates)
        raise ValidationError(f"Seats requested more than once: {labels}", seats=duplicates)

    return tuple(seats)


def validate_seat_space(event: EventInfo, seats: Sequence[SeatLabel]) -> None:
    unknown = [seat for seat in seats if not event.has_seat(seat)]
    if unknown:
        labels = ", ".join(str(seat) for seat in unknown)
        raise ValidationError(f"Seats {labels} do not exist for event {event.id}", seats=unknown)


class ReservationCoordinator:
    def __init__(
        self,
        ledger: LedgerStore,
        availability: AvailabilityView,
        policy: RetryPolicy = RetryPolicy(),
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.ledger = ledger
        self.availability = availability
        self.policy = policy
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def reserve(
        self,
        event_id: int,
        user_id: str,
        seats: Sequence[SeatLabel],
        deadline: Optional[float] = None,
    ) -> Booking:
        """
        Book the given seats for user_id, or raise.

        `deadline` is an absolute value of the coordinator's clock
        (time.monotonic by default).
        """
        started = time.perf_counter()
        try:
            booking = await self._reserve(event_id, user_id, seats, deadline)
        except ReservationError as e:
            record_reservation(_outcome(e))
            raise
        finally:
            reservation_latency.observe(time.perf_counter() - started)
        record_reservation("success")
        return booking

    async def _reserve(
        self,
        event_id: int,
        user_id: str,
        seats: Sequence[SeatLabel],
        deadline: Optional[float],
    ) -> Booking:
        requested = validate_seat_request(seats)
        event = await self.availability.require_event(event_id)
        validate_seat_space(event, requested)
        draft = NewBooking(event_id=event_id, user_id=user_id, seats=requested)

        for attempt in range(1, self.policy.max_attempts + 1):
            self._check_deadline(event_id, attempt - 1, deadline)

            snapshot = await self.availability.current_state(event_id)
            conflicting = snapshot.conflicts_with(requested)
            if conflicting:
                logger.warning(
                    "reservation_conflict",
                    event_id=event_id,
                    user_id=user_id,
                    conflicting=conflicting,
                    version=snapshot.version,
                )
                raise SeatConflict(event_id, conflicting)

            result = await self.ledger.insert_if_version_matches(event_id, snapshot.version, draft)
            record_ledger_commit(isinstance(result, Committed))

            if isinstance(result, Committed):
                logger.info(
                    "reservation_committed",
                    booking_id=result.booking.id,
                    event_id=event_id,
                    user_id=user_id,
                    seats=list(requested),
                    version=result.version,
                    attempt=attempt,
                )
                await self.availability.advance(
                    event_id, snapshot.with_booking(requested, result.version)
                )
                return result.booking

            logger.info(
                "reservation_retry",
                event_id=event_id,
                attempt=attempt,
                expected_version=snapshot.version,
                reason="version_conflict",
            )
            if attempt < self.policy.max_attempts:
                reservation_retries.inc()
                await self._backoff(event_id, attempt, deadline)

        logger.warning(
            "reservation_busy",
            event_id=event_id,
            user_id=user_id,
            attempts=self.policy.max_attempts,
        )
        raise ReservationBusy(event_id, self.policy.max_attempts)

    def _check_deadline(self, event_id: int, attempts: int, deadline: Optional[float]) -> None:
        if deadline is not None and self._clock() >= deadline:
            logger.warning("reservation_timeout", event_id=event_id, attempts=attempts)
            raise ReservationTimeout(event_id, attempts)

    async def _backoff(self, event_id: int, attempt: int, deadline: Optional[float]) -> None:
        delay = self.policy.backoff(attempt, self._rng)
        if deadline is not None and self._clock() + delay >= deadline:
            logger.warning("reservation_timeout", event_id=event_id, attempts=attempt)
            raise ReservationTimeout(event_id, attempt)
        await self._sleep(delay)
