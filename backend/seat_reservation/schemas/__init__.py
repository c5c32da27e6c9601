from seat_reservation.schemas.event import EventResponse, EventListResponse
from seat_reservation.schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingResponse,
    HistoryEntryResponse,
)

__all__ = [
    "EventResponse", "EventListResponse",
    "AvailabilityResponse", "BookingCreate", "BookingResponse", "HistoryEntryResponse",
]
