from seat_reservation.domain import AvailabilitySnapshot, EventInfo, is_seat_label


def test_numbered_seat_space():
    hall = EventInfo(id=2, name="Hall", total_seats=3)
    assert hall.capacity == 3
    assert hall.has_seat(1) and hall.has_seat(3)
    assert not hall.has_seat(0)
    assert not hall.has_seat(4)
    assert not hall.has_seat("1")
    assert not hall.has_seat(True)


def test_labels_take_precedence_over_total():
    event = EventInfo(id=1, name="Club", total_seats=100, seat_labels=("VIP-1", 7))
    assert event.capacity == 2
    assert event.has_seat("VIP-1")
    assert event.has_seat(7)
    assert not event.has_seat(1)
    assert not event.has_seat("7")


def test_conflicts_follow_request_order():
    snapshot = AvailabilitySnapshot(frozenset({"A1", "A3", 5}), 4)
    assert snapshot.conflicts_with(["A3", "A2", 5, "A1"]) == ["A3", 5, "A1"]
    assert snapshot.conflicts_with(["5"]) == []


def test_with_booking_advances_version():
    snapshot = AvailabilitySnapshot(frozenset({"A1"}), 1).with_booking(["A2"], 2)
    assert snapshot == AvailabilitySnapshot(frozenset({"A1", "A2"}), 2)


def test_seat_label_types():
    assert is_seat_label("A1")
    assert is_seat_label(0)
    assert not is_seat_label(False)
    assert not is_seat_label(None)
    assert not is_seat_label(2.0)
