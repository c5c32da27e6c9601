"""
Tests for the reservation coordinator: validation, conflict handling,
optimistic retry, deadlines and the no-double-booking invariant.
"""

import asyncio
import random
from itertools import combinations

import pytest

from seat_reservation.core.exceptions import (
    EventNotFound,
    ReservationBusy,
    ReservationTimeout,
    SeatConflict,
    StoreUnavailable,
    ValidationError,
)
from seat_reservation.domain import EventInfo, VersionConflict, seat_key
from seat_reservation.infrastructure import InMemoryLedgerStore
from seat_reservation.services.availability_service import AvailabilityView
from seat_reservation.services.reservation_service import (
    ReservationCoordinator,
    RetryPolicy,
    validate_seat_request,
)


class StaleLedger(InMemoryLedgerStore):
    """Reports a version conflict for the first `failures` commits (or forever)."""

    def __init__(self, failures=None):
        super().__init__()
        self.failures = failures
        self.commit_calls = 0

    async def insert_if_version_matches(self, event_id, expected_version, booking):
        self.commit_calls += 1
        if self.failures is None or self.commit_calls <= self.failures:
            return VersionConflict(expected_version=expected_version)
        return await super().insert_if_version_matches(event_id, expected_version, booking)


class BrokenLedger(InMemoryLedgerStore):
    def __init__(self):
        super().__init__()
        self.commit_calls = 0

    async def insert_if_version_matches(self, event_id, expected_version, booking):
        self.commit_calls += 1
        raise StoreUnavailable()


def make_coordinator(ledger, catalog, **kwargs):
    policy = kwargs.pop("policy", RetryPolicy(max_attempts=5, base_delay=0.0, max_delay=0.0))
    return ReservationCoordinator(ledger, AvailabilityView(ledger, catalog), policy, **kwargs)


@pytest.mark.asyncio
async def test_reserve_commits_booking(coordinator, ledger):
    booking = await coordinator.reserve(1, "user-1", ["A2", "A1"])

    assert booking.id > 0
    assert booking.seats == ("A2", "A1")
    assert booking.user_id == "user-1"
    assert booking.created_at is not None

    snapshot = await ledger.read_snapshot(1)
    assert snapshot.version == 1
    assert snapshot.booked_seats == frozenset({"A1", "A2"})
    assert await ledger.list_by_event(1) == [booking]


@pytest.mark.asyncio
async def test_unknown_event_raises_not_found(coordinator, ledger):
    with pytest.raises(EventNotFound):
        await coordinator.reserve(42, "user-1", [1])
    assert await ledger.list_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("seats", [[], ["A1", "A1"], ["Z9"], [True], [1.5], "A1"])
async def test_invalid_requests_fail_without_side_effects(coordinator, ledger, seats):
    with pytest.raises(ValidationError):
        await coordinator.reserve(1, "user-1", seats)
    assert await ledger.list_all() == []
    assert (await ledger.read_snapshot(1)).version == 0


@pytest.mark.asyncio
async def test_integer_and_string_labels_are_distinct(ledger, catalog, coordinator):
    catalog.add(EventInfo(id=3, name="Mixed", seat_labels=(1, "1")))
    await coordinator.reserve(3, "user-1", [1])
    booking = await coordinator.reserve(3, "user-2", ["1"])
    assert booking.seats == ("1",)

    with pytest.raises(SeatConflict) as exc:
        await coordinator.reserve(3, "user-3", [1])
    assert exc.value.conflicting_seats == [1]


@pytest.mark.asyncio
async def test_conflict_names_only_taken_seats(coordinator, ledger):
    await coordinator.reserve(1, "user-1", ["A1"])

    with pytest.raises(SeatConflict) as exc:
        await coordinator.reserve(1, "user-2", ["A1", "A2"])
    assert exc.value.conflicting_seats == ["A1"]

    # A2 was not consumed by the failed attempt
    booking = await coordinator.reserve(1, "user-2", ["A2"])
    assert booking.seats == ("A2",)


@pytest.mark.asyncio
async def test_conflict_is_not_retried(catalog):
    ledger = StaleLedger(failures=0)
    coordinator = make_coordinator(ledger, catalog)
    await coordinator.reserve(1, "user-1", ["A1"])
    calls = ledger.commit_calls

    with pytest.raises(SeatConflict):
        await coordinator.reserve(1, "user-2", ["A1"])
    assert ledger.commit_calls == calls


@pytest.mark.asyncio
async def test_two_concurrent_requests_for_same_seat(coordinator, ledger):
    results = await asyncio.gather(
        coordinator.reserve(1, "user-1", ["A1"]),
        coordinator.reserve(1, "user-2", ["A1"]),
        return_exceptions=True,
    )
    bookings = [r for r in results if not isinstance(r, Exception)]
    errors = [r for r in results if isinstance(r, Exception)]

    assert len(bookings) == 1
    assert bookings[0].seats == ("A1",)
    assert len(errors) == 1
    assert isinstance(errors[0], SeatConflict)
    assert errors[0].conflicting_seats == ["A1"]


@pytest.mark.asyncio
async def test_fifty_concurrent_disjoint_requests_all_succeed(ledger, catalog):
    coordinator = make_coordinator(
        ledger, catalog, policy=RetryPolicy(max_attempts=64, base_delay=0.001, max_delay=0.005)
    )

    bookings = await asyncio.gather(*[
        coordinator.reserve(2, f"user-{seat}", [seat]) for seat in range(1, 51)
    ])

    assert len(bookings) == 50
    snapshot = await ledger.read_snapshot(2)
    assert snapshot.booked_seats == frozenset(range(1, 51))
    assert snapshot.version == 50
    assert len(await ledger.list_by_event(2)) == 50


@pytest.mark.asyncio
async def test_contended_requests_never_double_book(ledger, catalog):
    coordinator = make_coordinator(
        ledger, catalog, policy=RetryPolicy(max_attempts=8, base_delay=0.0005, max_delay=0.002)
    )
    rng = random.Random(7)
    requests = [rng.sample(range(1, 21), rng.randint(1, 3)) for _ in range(60)]

    results = await asyncio.gather(
        *[coordinator.reserve(2, f"user-{i}", seats) for i, seats in enumerate(requests)],
        return_exceptions=True,
    )

    for result in results:
        assert not isinstance(result, Exception) or isinstance(result, (SeatConflict, ReservationBusy))

    committed = await ledger.list_by_event(2)
    for first, second in combinations(committed, 2):
        assert not set(first.seats) & set(second.seats)
    for booking in committed:
        assert all(1 <= seat <= 50 for seat in booking.seats)

    snapshot = await ledger.read_snapshot(2)
    assert snapshot.version == len(committed)
    assert len(snapshot.booked_seats) == sum(len(b.seats) for b in committed)


@pytest.mark.asyncio
async def test_version_race_is_retried_transparently(catalog):
    ledger = StaleLedger(failures=2)
    coordinator = make_coordinator(ledger, catalog)

    booking = await coordinator.reserve(1, "user-1", ["A3"])

    assert booking.seats == ("A3",)
    assert ledger.commit_calls == 3
    assert (await ledger.read_snapshot(1)).version == 1


@pytest.mark.asyncio
async def test_exhausted_retry_budget_raises_busy(catalog):
    ledger = StaleLedger()
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    coordinator = make_coordinator(
        ledger,
        catalog,
        policy=RetryPolicy(max_attempts=5, base_delay=0.01, max_delay=0.05),
        sleep=fake_sleep,
    )

    with pytest.raises(ReservationBusy) as exc:
        await coordinator.reserve(1, "user-1", ["A1"])

    assert not isinstance(exc.value, ReservationTimeout)
    assert exc.value.attempts == 5
    assert ledger.commit_calls == 5
    assert len(sleeps) == 4
    assert all(0.01 <= delay <= 0.05 for delay in sleeps)
    assert await ledger.list_by_event(1) == []


@pytest.mark.asyncio
async def test_store_unavailable_is_not_retried(catalog):
    ledger = BrokenLedger()
    coordinator = make_coordinator(ledger, catalog)

    with pytest.raises(StoreUnavailable):
        await coordinator.reserve(1, "user-1", ["A1"])
    assert ledger.commit_calls == 1


@pytest.mark.asyncio
async def test_expired_deadline_aborts_before_commit(catalog):
    ledger = StaleLedger(failures=0)
    coordinator = make_coordinator(ledger, catalog, clock=lambda: 100.0)

    with pytest.raises(ReservationTimeout) as exc:
        await coordinator.reserve(1, "user-1", ["A1"], deadline=99.0)

    assert isinstance(exc.value, ReservationBusy)
    assert exc.value.attempts == 0
    assert ledger.commit_calls == 0
    assert await ledger.list_all() == []


@pytest.mark.asyncio
async def test_backoff_never_sleeps_past_deadline(catalog):
    ledger = StaleLedger()
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    coordinator = make_coordinator(
        ledger,
        catalog,
        policy=RetryPolicy(max_attempts=5, base_delay=0.01, max_delay=1.0),
        clock=lambda: 0.0,
        sleep=fake_sleep,
    )

    with pytest.raises(ReservationTimeout) as exc:
        await coordinator.reserve(1, "user-1", ["A1"], deadline=0.005)

    assert exc.value.attempts == 1
    assert ledger.commit_calls == 1
    assert sleeps == []


def test_backoff_grows_and_is_capped():
    policy = RetryPolicy(max_attempts=5, base_delay=0.01, max_delay=0.05)
    rng = random.Random(1)

    first = policy.backoff(1, rng)
    second = policy.backoff(2, rng)
    assert 0.01 <= first < 0.02
    assert 0.02 <= second < 0.03
    assert policy.backoff(10, rng) == 0.05


def test_validate_seat_request_keeps_order():
    assert validate_seat_request(["B2", "A1", 3]) == ("B2", "A1", 3)


def test_validate_seat_request_reports_each_duplicate_once():
    with pytest.raises(ValidationError) as exc:
        validate_seat_request(["A1", "A1", "A1", "B1", "B1"])
    assert exc.value.seats == ["A1", "B1"]


def test_seat_key_distinguishes_types():
    assert seat_key(1) != seat_key("1")
