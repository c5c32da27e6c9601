"""
Redis cache for seat availability snapshots.

CACHING STRATEGY
================

What we cache:
  - The (booked seats, version) snapshot served by GET /events/{id}/availability
  - Cache key pattern: "availability:{event_id}"

Why:
  - Availability is polled far more often than seats are booked
  - Serving from Redis avoids a scan of booked_seats per request

Freshness:
  - After every commit the coordinator publishes the new snapshot, so a caller
    who just booked always reads their own seats back
  - A snapshot only replaces a cached one with a lower or equal version
    (WATCH/MULTI, re-run whenever the key changes underneath), so a slow
    reader can never roll the cache back past a commit
  - TTL-based expiry as safety net

What we DON'T use it for:
  - The conflict check before a commit always reads the ledger directly.
    The cache is advisory; if Redis is disabled or down we fall back to the
    ledger and log, never fail the request.
"""

import json
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from seat_reservation.core.config import get_settings
from seat_reservation.core.logging import get_logger
from seat_reservation.core.metrics import record_cache_operation
from seat_reservation.domain import AvailabilitySnapshot
from seat_reservation.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

ClientProvider = Callable[[], Awaitable[Optional[redis.Redis]]]

# Anything json.loads or the payload shape check can raise on a foreign entry
_DECODE_ERRORS = (ValueError, KeyError, TypeError)


def _make_availability_key(event_id: int) -> str:
    return f"availability:{event_id}"


def _encode(snapshot: AvailabilitySnapshot) -> str:
    seats = sorted(snapshot.booked_seats, key=lambda s: (isinstance(s, str), s))
    return json.dumps({"version": snapshot.version, "seats": seats})


def _decode(data: str) -> AvailabilitySnapshot:
    payload = json.loads(data)
    return AvailabilitySnapshot(frozenset(payload["seats"]), int(payload["version"]))


def _decode_or_none(key: str, data: Optional[str]) -> Optional[AvailabilitySnapshot]:
    if data is None:
        return None
    try:
        return _decode(data)
    except _DECODE_ERRORS as e:
        logger.warning("cache_corrupt_entry", key=key, error=str(e))
        return None


class AvailabilityCache:
    def __init__(self, client_provider: ClientProvider = get_redis, ttl: Optional[int] = None):
        self._client_provider = client_provider
        self._ttl = ttl if ttl is not None else get_settings().REDIS_CACHE_TTL

    async def get(self, event_id: int) -> Optional[AvailabilitySnapshot]:
        client = await self._client_provider()
        if not client:
            return None

        key = _make_availability_key(event_id)
        try:
            data = await client.get(key)
        except RedisError as e:
            logger.error("cache_get_error", key=key, error=str(e))
            return None

        record_cache_operation("get", hit=data is not None)
        if data is None:
            logger.debug("cache_miss", key=key)
        return _decode_or_none(key, data)

    async def put(self, event_id: int, snapshot: AvailabilitySnapshot) -> None:
        """
        Store a snapshot unless the cache already holds a newer version.

        The compare and the write run under WATCH; if another client touches
        the key in between, redis-py re-runs the whole compare-and-write, so a
        concurrent older snapshot can never displace this one. Corrupt entries
        are overwritten.
        """
        client = await self._client_provider()
        if not client:
            return

        key = _make_availability_key(event_id)
        payload = _encode(snapshot)

        async def write_if_not_older(pipe) -> bool:
            current = _decode_or_none(key, await pipe.get(key))
            if current is not None and current.version > snapshot.version:
                await pipe.unwatch()
                return False
            pipe.multi()
            pipe.setex(key, self._ttl, payload)
            return True

        try:
            written = await client.transaction(write_if_not_older, key, value_from_callable=True)
        except RedisError as e:
            logger.error("cache_set_error", key=key, error=str(e))
            return

        if written:
            record_cache_operation("set", hit=True)
            logger.debug("cache_set", key=key, version=snapshot.version, ttl=self._ttl)
        else:
            logger.debug("cache_set_skipped_stale", key=key, version=snapshot.version)


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except RedisError as e:
        return {"status": "error", "error": str(e)}
