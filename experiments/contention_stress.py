#!/usr/bin/env python3
"""
Contention stress test - runs the reservation coordinator in-process.
Many users race for a small block of seats; afterwards the ledger is checked
for double booking.

Usage:
    PYTHONPATH=backend python experiments/contention_stress.py
"""

import asyncio
import random
import time
from collections import Counter
from itertools import combinations

from seat_reservation.core.exceptions import ReservationBusy, SeatConflict
from seat_reservation.domain import EventInfo
from seat_reservation.infrastructure import InMemoryEventCatalog, InMemoryLedgerStore
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.reservation_service import ReservationCoordinator, RetryPolicy

EVENT_ID = 1


async def run_test(users: int, seats: int, max_attempts: int):
    print(f"\n{'='*60}")
    print(f"Users: {users} | Seats: {seats} | Max attempts: {max_attempts}")
    print(f"{'='*60}\n")

    ledger = InMemoryLedgerStore()
    catalog = InMemoryEventCatalog([EventInfo(id=EVENT_ID, name="Stress", total_seats=seats)])
    coordinator = ReservationCoordinator(
        ledger,
        AvailabilityView(ledger, catalog),
        RetryPolicy(max_attempts=max_attempts, base_delay=0.001, max_delay=0.02),
    )

    outcomes = Counter()
    response_times = []

    async def one_user(user: int):
        wanted = random.sample(range(1, seats + 1), random.randint(1, 3))
        start = time.perf_counter()
        try:
            await coordinator.reserve(EVENT_ID, f"user-{user}", wanted)
            outcomes["success"] += 1
        except SeatConflict:
            outcomes["conflict"] += 1
        except ReservationBusy:
            outcomes["busy"] += 1
        response_times.append((time.perf_counter() - start) * 1000)

    start_time = time.perf_counter()
    await asyncio.gather(*[one_user(i) for i in range(users)])
    total_time = time.perf_counter() - start_time

    committed = await ledger.list_by_event(EVENT_ID)
    snapshot = await ledger.read_snapshot(EVENT_ID)
    times = sorted(response_times)

    print(f"Time:        {total_time:.3f}s")
    print(f"Successful:  {outcomes['success']}")
    print(f"Conflicts:   {outcomes['conflict']}")
    print(f"Busy:        {outcomes['busy']}")
    print(f"Seats taken: {len(snapshot.booked_seats)} / {seats} (version {snapshot.version})")

    if times:
        print("\nResponse times:")
        print(f"  Avg: {sum(times)/len(times):.1f}ms")
        print(f"  P95: {times[int(len(times)*0.95)]:.1f}ms")
        print(f"  Max: {max(times):.1f}ms")

    overlaps = [
        (a.id, b.id) for a, b in combinations(committed, 2) if set(a.seats) & set(b.seats)
    ]
    print(f"\n{'='*60}")
    if not overlaps and snapshot.version == len(committed):
        print("PASS: No double booking")
    else:
        print(f"FAIL: overlapping bookings {overlaps}")
    print(f"{'='*60}")


async def main():
    print("\n" + "="*60)
    print("SEAT RESERVATION CONTENTION TEST")
    print("="*60)

    await run_test(users=100, seats=10, max_attempts=5)
    await run_test(users=200, seats=50, max_attempts=5)
    # Small retry budget: expect some busy responses, still no double booking
    await run_test(users=200, seats=200, max_attempts=2)


if __name__ == "__main__":
    asyncio.run(main())
