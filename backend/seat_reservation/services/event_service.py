"""
Event catalog reads exposed over the API.
"""

from seat_reservation.core.exceptions import EventNotFound
from seat_reservation.domain import EventInfo
from seat_reservation.services.interfaces import EventCatalog


async def get_event(catalog: EventCatalog, event_id: int) -> EventInfo:
    event = await catalog.get_event(event_id)
    if event is None:
        raise EventNotFound(event_id)
    return event


async def list_events(
    catalog: EventCatalog,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[EventInfo], int]:
    return await catalog.list_events(page, page_size)
