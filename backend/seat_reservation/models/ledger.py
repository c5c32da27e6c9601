"""
Per-event version row used as the compare-and-set gate for commits.

A row is created by the first successful commit for an event (version 1);
every later commit bumps it by exactly one with
UPDATE ... WHERE event_id = :id AND version = :expected.
"""

from sqlalchemy import Column, Integer, CheckConstraint

from seat_reservation.db.base import Base, TimestampMixin


class SeatLedger(Base, TimestampMixin):
    __tablename__ = "seat_ledgers"

    # No FK to events: the catalog may live elsewhere and may delete events
    event_id = Column(Integer, primary_key=True, autoincrement=False)
    version = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("version > 0", name="check_ledger_version_positive"),
    )

    def __repr__(self) -> str:
        return f"<SeatLedger(event={self.event_id}, version={self.version})>"
