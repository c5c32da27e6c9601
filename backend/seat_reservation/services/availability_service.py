"""
Seat availability view: which seats of an event are taken, as of which version.
"""

from typing import Optional

from seat_reservation.core.exceptions import EventNotFound
from seat_reservation.core.logging import get_logger
from seat_reservation.domain import AvailabilitySnapshot, EventInfo
from seat_reservation.services.cache_service import AvailabilityCache
from seat_reservation.services.interfaces import EventCatalog, LedgerStore

logger = get_logger(__name__)


class AvailabilityView:
    def __init__(
        self,
        ledger: LedgerStore,
        catalog: EventCatalog,
        cache: Optional[AvailabilityCache] = None,
    ):
        self.ledger = ledger
        self.catalog = catalog
        self.cache = cache

    async def require_event(self, event_id: int) -> EventInfo:
        event = await self.catalog.get_event(event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    async def current_state(self, event_id: int) -> AvailabilitySnapshot:
        """
        Authoritative snapshot read straight from the ledger.

        The version returned is the one insert_if_version_matches accepts as
        its precondition. Never served from cache.
        """
        await self.require_event(event_id)
        return await self.ledger.read_snapshot(event_id)

    async def cached_state(self, event_id: int) -> AvailabilitySnapshot:
        """Snapshot for display. May come from cache; never use it to gate a commit."""
        await self.require_event(event_id)

        if self.cache is not None:
            cached = await self.cache.get(event_id)
            if cached is not None:
                return cached

        snapshot = await self.ledger.read_snapshot(event_id)
        if self.cache is not None:
            await self.cache.put(event_id, snapshot)
        return snapshot

    async def advance(self, event_id: int, snapshot: AvailabilitySnapshot) -> None:
        """Publish the snapshot produced by a commit so readers see it immediately."""
        if self.cache is not None:
            await self.cache.put(event_id, snapshot)
