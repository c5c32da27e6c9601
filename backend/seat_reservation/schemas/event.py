"""
Pydantic schemas for event catalog responses.
"""

from typing import Optional, Union

from pydantic import BaseModel

from seat_reservation.domain import EventInfo


class EventResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    date: Optional[str] = None
    image_url: Optional[str] = None
    total_seats: Optional[int] = None
    seat_labels: Optional[list[Union[int, str]]] = None

    @classmethod
    def from_domain(cls, event: EventInfo) -> "EventResponse":
        return cls(
            id=event.id,
            name=event.name,
            category=event.category,
            date=event.date,
            image_url=event.image_url,
            total_seats=event.total_seats,
            seat_labels=list(event.seat_labels) if event.seat_labels is not None else None,
        )


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
