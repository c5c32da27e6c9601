"""
Event catalog interface.
The catalog is owned by another write path; this service only reads it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from seat_reservation.domain import EventInfo


class EventCatalog(ABC):

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[EventInfo]:
        """Return the event, or None if the catalog does not know it."""
        pass

    @abstractmethod
    async def list_events(self, page: int = 1, page_size: int = 20) -> tuple[list[EventInfo], int]:
        """One page of events ordered by id, plus the total count."""
        pass
