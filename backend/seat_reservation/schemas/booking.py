"""
Pydantic schemas for booking-related request/response validation.

Only the JSON shape is checked here. Empty lists, duplicates and seats outside
the event are domain errors (400) raised by the reservation coordinator.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, StrictInt, StrictStr

from seat_reservation.domain import Booking, HistoryEntry
from seat_reservation.schemas.event import EventResponse

SeatLabelField = Union[StrictInt, StrictStr]


class BookingCreate(BaseModel):
    event_id: int
    seats: list[SeatLabelField]


class BookingResponse(BaseModel):
    id: int
    event_id: int
    user_id: str
    seats: list[SeatLabelField]
    created_at: datetime

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            event_id=booking.event_id,
            user_id=booking.user_id,
            seats=list(booking.seats),
            created_at=booking.created_at,
        )


class HistoryEntryResponse(BaseModel):
    booking: BookingResponse
    event: Optional[EventResponse]

    @classmethod
    def from_domain(cls, entry: HistoryEntry) -> "HistoryEntryResponse":
        return cls(
            booking=BookingResponse.from_domain(entry.booking),
            event=EventResponse.from_domain(entry.event) if entry.event else None,
        )


class AvailabilityResponse(BaseModel):
    event_id: int
    booked_seats: list[SeatLabelField]
    version: int
