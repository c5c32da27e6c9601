from seat_reservation.models.event import Event
from seat_reservation.models.ledger import SeatLedger
from seat_reservation.models.booking import Booking, BookedSeat

__all__ = ["Event", "SeatLedger", "Booking", "BookedSeat"]
