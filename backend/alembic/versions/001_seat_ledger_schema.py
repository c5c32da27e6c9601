"""Seat reservation schema: events, seat_ledgers, bookings, booked_seats.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Catalog table; written by the catalog's admin path, read-only here
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("date", sa.String(64), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("total_seats", sa.Integer(), nullable=True),
        sa.Column("seat_labels", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("total_seats IS NULL OR total_seats > 0", name="check_total_seats_positive"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_category", "events", ["category"])

    # One version row per event. Every commit is
    # UPDATE ... SET version = version + 1 WHERE event_id = :id AND version = :expected,
    # so two writers that read the same version cannot both commit.
    op.create_table(
        "seat_ledgers",
        sa.Column("event_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("version > 0", name="check_ledger_version_positive"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("seats", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "version", name="uq_booking_event_version"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])

    # The database-level guarantee against double booking: one row per
    # (event, seat). Even a buggy writer that skipped the version gate
    # would fail here instead of overbooking.
    op.create_table(
        "booked_seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("seat_key", sa.Text(), nullable=False),
        sa.UniqueConstraint("event_id", "seat_key", name="uq_booked_seat_per_event"),
    )
    op.create_index("ix_booked_seats_event_id", "booked_seats", ["event_id"])


def downgrade() -> None:
    op.drop_table("booked_seats")
    op.drop_table("bookings")
    op.drop_table("seat_ledgers")
    op.drop_table("events")
