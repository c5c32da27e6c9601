"""
Event catalog reads and live seat availability.
"""

from fastapi import APIRouter, Depends, Query

from seat_reservation.api.deps import get_availability_view, get_event_catalog
from seat_reservation.schemas.booking import AvailabilityResponse
from seat_reservation.schemas.event import EventListResponse, EventResponse
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.event_service import get_event, list_events
from seat_reservation.services.interfaces import EventCatalog

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    catalog: EventCatalog = Depends(get_event_catalog),
):
    """List catalog events with pagination."""
    events, total = await list_events(catalog, page, page_size)
    return EventListResponse(
        events=[EventResponse.from_domain(e) for e in events],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: int,
    catalog: EventCatalog = Depends(get_event_catalog),
):
    event = await get_event(catalog, event_id)
    return EventResponse.from_domain(event)


@router.get("/{event_id}/availability", response_model=AvailabilityResponse)
async def get_availability_endpoint(
    event_id: int,
    availability: AvailabilityView = Depends(get_availability_view),
):
    """
    Seats already booked for an event.
    May be served from cache; it always includes the caller's own completed bookings.
    """
    snapshot = await availability.cached_state(event_id)
    booked = sorted(snapshot.booked_seats, key=lambda s: (isinstance(s, str), s))
    return AvailabilityResponse(event_id=event_id, booked_seats=booked, version=snapshot.version)
