"""Domain objects passed between the coordinator, the ledger and the catalog.

These are plain frozen dataclasses; SQLAlchemy rows live in
seat_reservation.models and are converted at the store boundary.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence, Union

SeatLabel = Union[str, int]


def is_seat_label(value: Any) -> bool:
    # bool is an int subclass but never a seat
    return isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool))


def seat_key(label: SeatLabel) -> str:
    """Canonical, type-preserving key for a label: 1 -> '1', "1" -> '"1"'."""
    return json.dumps(label)


def seat_from_key(key: str) -> SeatLabel:
    return json.loads(key)


@dataclass(frozen=True)
class EventInfo:
    """Read-only view of a catalog event."""

    id: int
    name: str
    total_seats: Optional[int] = None
    seat_labels: Optional[tuple[SeatLabel, ...]] = None
    category: Optional[str] = None
    date: Optional[str] = None
    image_url: Optional[str] = None
    _label_keys: frozenset = field(default=frozenset(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.seat_labels is not None:
            object.__setattr__(
                self, "_label_keys", frozenset(seat_key(label) for label in self.seat_labels)
            )

    @property
    def capacity(self) -> int:
        if self.seat_labels is not None:
            return len(self.seat_labels)
        return self.total_seats or 0

    def has_seat(self, label: Any) -> bool:
        if not is_seat_label(label):
            return False
        if self.seat_labels is not None:
            return seat_key(label) in self._label_keys
        if self.total_seats is None or isinstance(label, str):
            return False
        return 1 <= label <= self.total_seats


@dataclass(frozen=True)
class NewBooking:
    """A validated booking request that has not been committed yet."""

    event_id: int
    user_id: str
    seats: tuple[SeatLabel, ...]


@dataclass(frozen=True)
class Booking:
    id: int
    event_id: int
    user_id: str
    seats: tuple[SeatLabel, ...]
    created_at: datetime


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """Booked seats of one event as of a ledger version."""

    booked_seats: frozenset
    version: int = 0

    def conflicts_with(self, seats: Sequence[SeatLabel]) -> list[SeatLabel]:
        """Requested seats that are already taken, in request order."""
        taken = {seat_key(seat) for seat in self.booked_seats}
        return [seat for seat in seats if seat_key(seat) in taken]

    def with_booking(self, seats: Sequence[SeatLabel], version: int) -> "AvailabilitySnapshot":
        return AvailabilitySnapshot(self.booked_seats | frozenset(seats), version)


@dataclass(frozen=True)
class Committed:
    booking: Booking
    version: int


@dataclass(frozen=True)
class VersionConflict:
    expected_version: int


CommitResult = Union[Committed, VersionConflict]


@dataclass(frozen=True)
class HistoryEntry:
    booking: Booking
    event: Optional[EventInfo]
