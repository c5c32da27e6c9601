"""
Read-only access to the events table.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from seat_reservation.core.exceptions import StoreUnavailable
from seat_reservation.core.logging import get_logger
from seat_reservation.domain import EventInfo
from seat_reservation.models import Event
from seat_reservation.services.interfaces.catalog import EventCatalog

logger = get_logger(__name__)


def event_to_domain(event: Event) -> EventInfo:
    return EventInfo(
        id=event.id,
        name=event.name,
        total_seats=event.total_seats,
        seat_labels=tuple(event.seat_labels) if event.seat_labels is not None else None,
        category=event.category,
        date=event.date,
        image_url=event.image_url,
    )


class SqlEventCatalog(EventCatalog):
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def get_event(self, event_id: int) -> Optional[EventInfo]:
        try:
            async with self._session_factory() as session:
                event = await session.get(Event, event_id)
        except SQLAlchemyError as e:
            logger.error("catalog_read_failed", event_id=event_id, error=str(e))
            raise StoreUnavailable("Event catalog is unavailable") from e
        return event_to_domain(event) if event else None

    async def list_events(self, page: int = 1, page_size: int = 20) -> tuple[list[EventInfo], int]:
        try:
            async with self._session_factory() as session:
                total = (await session.execute(select(func.count()).select_from(Event))).scalar()
                result = await session.execute(
                    select(Event)
                    .order_by(Event.id.asc())
                    .offset((page - 1) * page_size)
                    .limit(page_size)
                )
                events = [event_to_domain(e) for e in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("catalog_list_failed", error=str(e))
            raise StoreUnavailable("Event catalog is unavailable") from e
        return events, total or 0
