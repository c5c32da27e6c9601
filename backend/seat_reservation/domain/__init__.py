from seat_reservation.domain.models import (
    AvailabilitySnapshot,
    Booking,
    CommitResult,
    Committed,
    EventInfo,
    HistoryEntry,
    NewBooking,
    SeatLabel,
    VersionConflict,
    is_seat_label,
    seat_from_key,
    seat_key,
)

__all__ = [
    "AvailabilitySnapshot", "Booking", "CommitResult", "Committed", "EventInfo",
    "HistoryEntry", "NewBooking", "SeatLabel", "VersionConflict",
    "is_seat_label", "seat_from_key", "seat_key",
]
