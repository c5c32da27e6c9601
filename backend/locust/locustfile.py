"""
Locust Load Test Suite

Events are owned by the catalog, so seed one first and point the test at it:
  LOCUST_EVENT_ID=1 LOCUST_EVENT_SEATS=10 locust -f locustfile.py

Run scenarios:
  locust -f locustfile.py --tags contention   # Many users, few seats
  locust -f locustfile.py --tags throughput   # Availability cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

Tokens are signed locally with SECRET_KEY, which must match the server's.
"""

import os
import random
import uuid

from locust import HttpUser, task, between, tag

from seat_reservation.core.security import create_access_token

EVENT_ID = int(os.environ.get("LOCUST_EVENT_ID", "1"))
EVENT_SEATS = int(os.environ.get("LOCUST_EVENT_SEATS", "10"))


def auth_headers() -> dict:
    token = create_access_token({"sub": f"load-{uuid.uuid4().hex[:10]}"})
    return {"Authorization": f"Bearer {token}"}


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - many users fight for EVENT_SEATS seats

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify no seat is booked twice:
      SELECT seat_key, COUNT(*) FROM booked_seats WHERE event_id = X
      GROUP BY seat_key HAVING COUNT(*) > 1;
    Should return no rows, and seat_ledgers.version should equal the booking count.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = auth_headers()

    @tag("contention")
    @task
    def book_random_seat(self):
        seat = random.randint(1, EVENT_SEATS)
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": EVENT_ID, "seats": [seat]},
            headers=self.headers,
            name="/api/v1/bookings/ [contended]",
            catch_response=True,
        ) as resp:
            # 409 = seat taken, 503 = lost too many races; both are correct answers
            if resp.status_code in (201, 409, 503):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - availability cache effectiveness

    Run with REDIS_ENABLED=true and again with false, compare P95/P99.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def availability(self):
        self.client.get(
            f"/api/v1/events/{EVENT_ID}/availability",
            name="/api/v1/events/{id}/availability",
        )

    @tag("throughput", "read")
    @task(3)
    def list_events(self):
        self.client.get("/api/v1/events/?page=1&page_size=20")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input must map to clean 4xx responses
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = auth_headers()

    def _expect(self, payload, expected, name, headers=None):
        with self.client.post(
            "/api/v1/bookings/",
            json=payload,
            headers=self.headers if headers is None else headers,
            name=name,
            catch_response=True,
        ) as resp:
            if resp.status_code in expected:
                resp.success()
            else:
                resp.failure(f"Expected {expected}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        self._expect({"event_id": 999999, "seats": [1]}, (404,), "edge: unknown event")

    @tag("edge")
    @task
    def empty_seats(self):
        self._expect({"event_id": EVENT_ID, "seats": []}, (400,), "edge: empty seats")

    @tag("edge")
    @task
    def duplicate_seats(self):
        self._expect({"event_id": EVENT_ID, "seats": [1, 1]}, (400,), "edge: duplicate seats")

    @tag("edge")
    @task
    def seat_out_of_range(self):
        self._expect(
            {"event_id": EVENT_ID, "seats": [EVENT_SEATS + 1]}, (400,), "edge: out of range"
        )

    @tag("edge")
    @task
    def malformed_body(self):
        self._expect({"event_id": EVENT_ID, "seats": "A1"}, (422,), "edge: malformed")

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect({"event_id": EVENT_ID, "seats": [1]}, (401,), "edge: no auth", headers={})
