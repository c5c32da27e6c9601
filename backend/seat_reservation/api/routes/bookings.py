"""
Booking endpoints with concurrency-safe seat reservation.
"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from seat_reservation.api.deps import get_coordinator, get_history_service
from seat_reservation.core.config import get_settings
from seat_reservation.core.security import Principal, get_current_principal
from seat_reservation.schemas.booking import BookingCreate, BookingResponse, HistoryEntryResponse
from seat_reservation.services.history_service import HistoryService
from seat_reservation.services.reservation_service import ReservationCoordinator

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    coordinator: ReservationCoordinator = Depends(get_coordinator),
):
    """
    Reserve specific seats for an event.

    The commit is gated on the event's ledger version, so two requests can
    never both claim a seat. Lost races are retried internally; a seat that is
    genuinely taken returns 409 with the conflicting seats, and a request that
    keeps losing races returns 503 so the client can try again.
    """
    deadline = time.monotonic() + get_settings().RESERVATION_TIMEOUT_SECONDS
    booking = await coordinator.reserve(
        booking_data.event_id,
        principal.user_id,
        booking_data.seats,
        deadline=deadline,
    )
    return BookingResponse.from_domain(booking)


@router.get("/history", response_model=list[HistoryEntryResponse])
async def booking_history(
    user_id: Optional[str] = Query(None),
    user_id_camel: Optional[str] = Query(None, alias="userId", include_in_schema=False),
    principal: Principal = Depends(get_current_principal),
    history_service: HistoryService = Depends(get_history_service),
):
    """
    Bookings joined with their events.
    Users see their own history; admins may pass user_id or list everything.
    """
    entries = await history_service.history_for(principal, user_id or user_id_camel)
    return [HistoryEntryResponse.from_domain(entry) for entry in entries]
