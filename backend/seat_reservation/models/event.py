"""
Event catalog table.

Rows are written by the catalog's own admin path; this service only reads
them. The seat space is either `total_seats` (labels 1..N) or an explicit
`seat_labels` JSON list, which takes precedence when present.
"""

from sqlalchemy import Column, Integer, String, JSON, Index, CheckConstraint

from seat_reservation.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    # Opaque to the reservation core, kept as the catalog supplies it
    date = Column(String(64), nullable=True)
    image_url = Column(String(1000), nullable=True)
    total_seats = Column(Integer, nullable=True)
    seat_labels = Column(JSON, nullable=True)

    __table_args__ = (
        CheckConstraint("total_seats IS NULL OR total_seats > 0", name="check_total_seats_positive"),
        Index("ix_events_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, seats={self.total_seats})>"
