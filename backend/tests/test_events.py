"""
Tests for catalog reads and the availability endpoint.
"""

import pytest
from httpx import AsyncClient

from seat_reservation.domain import EventInfo


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient):
    """List events returns paginated results."""
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [e["id"] for e in data["events"]] == [1, 2]
    assert data["page"] == 1


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, catalog):
    for event_id in range(3, 8):
        catalog.add(EventInfo(id=event_id, name=f"Event {event_id}", total_seats=10))

    response = await client.get("/api/v1/events/?page=2&page_size=3")
    assert response.status_code == 200
    data = response.json()
    assert data["page_size"] == 3
    assert data["total"] == 7
    assert [e["id"] for e in data["events"]] == [4, 5, 6]


@pytest.mark.asyncio
async def test_list_events_rejects_bad_page(client: AsyncClient):
    response = await client.get("/api/v1/events/?page=0")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient):
    """Get single event by ID."""
    response = await client.get("/api/v1/events/1")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == 1
    assert data["seat_labels"] == ["A1", "A2", "A3"]
    assert data["total_seats"] is None


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    response = await client.get("/api/v1/events/404")
    assert response.status_code == 404
    assert response.json()["error"] == "event_not_found"


@pytest.mark.asyncio
async def test_availability_of_fresh_event(client: AsyncClient):
    response = await client.get("/api/v1/events/2/availability")
    assert response.status_code == 200
    assert response.json() == {"event_id": 2, "booked_seats": [], "version": 0}


@pytest.mark.asyncio
async def test_availability_unknown_event(client: AsyncClient):
    response = await client.get("/api/v1/events/999/availability")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_availability_reflects_bookings(client: AsyncClient, auth_headers):
    await client.post(
        "/api/v1/bookings/", json={"event_id": 1, "seats": ["A3", "A1"]}, headers=auth_headers
    )
    await client.post(
        "/api/v1/bookings/", json={"event_id": 1, "seats": ["A2"]}, headers=auth_headers
    )

    response = await client.get("/api/v1/events/1/availability")
    data = response.json()
    assert data["booked_seats"] == ["A1", "A2", "A3"]
    assert data["version"] == 2


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "reservation_attempts_total" in metrics.text
