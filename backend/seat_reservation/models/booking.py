"""
Booking records.

Key design decisions:
- Bookings are append-only; there is no status column and no update path
- `seats` keeps the labels in request order as JSON
- One `booked_seats` row per (event, seat) with a unique constraint, so the
  database itself refuses a double booking even if the version gate were bypassed
- `version` records the ledger version the booking produced, giving commit order
"""

from sqlalchemy import Column, Integer, String, Text, JSON, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from seat_reservation.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    seats = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False)

    booked_seats = relationship("BookedSeat", back_populates="booking")

    __table_args__ = (
        UniqueConstraint("event_id", "version", name="uq_booking_event_version"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, seats={self.seats})>"


class BookedSeat(Base):
    __tablename__ = "booked_seats"

    id = Column(Integer, primary_key=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    event_id = Column(Integer, nullable=False)
    # JSON-encoded label so that 1 and "1" stay distinct; unbounded because
    # json.dumps escapes non-ASCII labels to several characters each
    seat_key = Column(Text, nullable=False)

    booking = relationship("Booking", back_populates="booked_seats")

    __table_args__ = (
        UniqueConstraint("event_id", "seat_key", name="uq_booked_seat_per_event"),
        Index("ix_booked_seats_event_id", "event_id"),
    )
