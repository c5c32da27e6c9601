"""
Booking history joined with catalog data for display.
"""

from typing import Optional

from seat_reservation.core.exceptions import Forbidden
from seat_reservation.core.logging import get_logger
from seat_reservation.core.security import Principal
from seat_reservation.domain import EventInfo, HistoryEntry
from seat_reservation.services.interfaces import EventCatalog, LedgerStore

logger = get_logger(__name__)


class HistoryService:
    def __init__(self, ledger: LedgerStore, catalog: EventCatalog):
        self.ledger = ledger
        self.catalog = catalog

    async def history(self, user_id: Optional[str] = None) -> list[HistoryEntry]:
        """
        Bookings (all, or one user's) each paired with its event.

        An event the catalog can no longer resolve is returned as None rather
        than dropping the booking or failing the whole listing.
        """
        if user_id is None:
            bookings = await self.ledger.list_all()
        else:
            bookings = await self.ledger.list_by_user(user_id)

        events: dict[int, Optional[EventInfo]] = {}
        for event_id in {b.event_id for b in bookings}:
            events[event_id] = await self.catalog.get_event(event_id)

        missing = sorted(event_id for event_id, event in events.items() if event is None)
        if missing:
            logger.warning("history_events_unresolved", event_ids=missing)

        return [HistoryEntry(booking=b, event=events[b.event_id]) for b in bookings]

    async def history_for(self, principal: Principal, user_id: Optional[str] = None) -> list[HistoryEntry]:
        """Apply access rules: users see their own bookings, admins see any."""
        if principal.is_admin:
            return await self.history(user_id)
        if user_id is not None and user_id != principal.user_id:
            raise Forbidden("You can only view your own booking history")
        return await self.history(principal.user_id)
