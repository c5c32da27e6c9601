"""
Domain error taxonomy for seat reservation.

Every error carries a stable machine-readable code, the HTTP status it maps to
and a user-safe message. Services raise these; the API layer renders them via
the handler registered in main.py.
"""

from enum import Enum
from typing import Any, Iterable, Optional

from fastapi import status


class ErrorCode(Enum):
    VALIDATION_ERROR = "validation_error"
    EVENT_NOT_FOUND = "event_not_found"
    SEAT_CONFLICT = "seat_conflict"
    RESERVATION_BUSY = "reservation_busy"
    RESERVATION_TIMEOUT = "reservation_timeout"
    STORE_UNAVAILABLE = "store_unavailable"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


class ReservationError(Exception):
    """Base class for errors surfaced to API callers."""

    code: ErrorCode = ErrorCode.STORE_UNAVAILABLE
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        """Additional fields for the error response body."""
        return {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(ReservationError):
    """Malformed seat request: empty, duplicated or out-of-range labels."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, seats: Optional[Iterable[Any]] = None) -> None:
        super().__init__(message)
        self.seats = list(seats) if seats is not None else []

    def extra(self) -> dict[str, Any]:
        return {"invalid_seats": self.seats} if self.seats else {}


class EventNotFound(ReservationError):
    code = ErrorCode.EVENT_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class SeatConflict(ReservationError):
    """Requested seats are already committed to another booking. Terminal."""

    code = ErrorCode.SEAT_CONFLICT
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, event_id: int, conflicting_seats: Iterable[Any]) -> None:
        self.event_id = event_id
        self.conflicting_seats = list(conflicting_seats)
        labels = ", ".join(str(seat) for seat in self.conflicting_seats)
        super().__init__(f"Seats {labels} are already booked")

    def extra(self) -> dict[str, Any]:
        return {"conflicting_seats": self.conflicting_seats}


class ReservationBusy(ReservationError):
    """Optimistic retry budget exhausted. Transient; the caller may retry."""

    code = ErrorCode.RESERVATION_BUSY
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, event_id: int, attempts: int, message: Optional[str] = None) -> None:
        super().__init__(message or "Booking failed due to high demand. Please try again.")
        self.event_id = event_id
        self.attempts = attempts

    def extra(self) -> dict[str, Any]:
        return {"attempts": self.attempts}


class ReservationTimeout(ReservationBusy):
    """The caller's deadline passed before a commit succeeded."""

    code = ErrorCode.RESERVATION_TIMEOUT

    def __init__(self, event_id: int, attempts: int) -> None:
        super().__init__(event_id, attempts, "Booking deadline exceeded. Please try again.")


class StoreUnavailable(ReservationError):
    """The backing ledger or catalog could not be reached."""

    code = ErrorCode.STORE_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Booking store is unavailable") -> None:
        super().__init__(message)


class Unauthorized(ReservationError):
    code = ErrorCode.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class Forbidden(ReservationError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)
