"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double-booking
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

The concurrency scenario needs an admin account to create its hall. Register
one, promote it with
  UPDATE users SET is_admin = true WHERE email = 'admin@example.com';
then run:
  ADMIN_EMAIL=... ADMIN_PASSWORD=... locust -f locustfile.py --tags concurrency
"""

import os
import random
import string
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

# Shared state
HALL_IDS = []
CONTESTED_HALL_ID = None
CONTESTED_DATE = (date.today() + timedelta(days=30)).isoformat()

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "adminpassword123")


def random_email():
    return f"load_{random.randint(10000, 99999)}@test.com"


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=8))


def register_and_login(client) -> dict:
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "username": random_username(),
        "password": "loadtest123",
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": "loadtest123"})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


def admin_headers(client) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


def booking_payload(hall_id: int, booking_date: str) -> dict:
    start = random.randint(8, 15)
    return {
        "hall_id": hall_id,
        "booking_date": booking_date,
        "start_time": f"{start:02d}:00",
        "end_time": f"{start + random.randint(1, 3):02d}:00",
        "attendees": random.randint(1, 10),
        "purpose": "Load test print session",
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: contested date is {CONTESTED_DATE}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users -> 1 hall date

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM hall_booked_dates WHERE hall_id = X AND booked_on = 'D';
    Should be exactly 1, and at most one request got a 201.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register_and_login(self.client)

        if not CONTESTED_HALL_ID:
            resp = self.client.post(
                "/api/v1/halls/",
                json={"name": "Concurrency Test Hall", "capacity": 50, "hourly_rate": 1000},
                headers=admin_headers(self.client),
            )
            if resp.status_code == 201:
                globals()["CONTESTED_HALL_ID"] = resp.json()["id"]
                print(f"\nCreated hall {CONTESTED_HALL_ID}, everyone wants {CONTESTED_DATE}\n")

    @tag("concurrency")
    @task
    def book_contested_date(self):
        """All users fight for the same hall and date."""
        if not CONTESTED_HALL_ID or not self.headers:
            return

        with self.client.post(
            "/api/v1/bookings/",
            json=booking_payload(CONTESTED_HALL_ID, CONTESTED_DATE),
            headers=self.headers,
            name="/api/v1/bookings/ [contested]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: date taken
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the API, run again

    Compare avg response time, requests/sec, P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_halls_cached(self):
        self.client.get("/api/v1/halls/?available_only=true", name="/api/v1/halls/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def view_calendar(self):
        """Calendars are never cached."""
        if HALL_IDS:
            self.client.get(
                f"/api/v1/halls/{random.choice(HALL_IDS)}/calendar",
                name="/api/v1/halls/{id}/calendar",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_and_login(self.client)

    def _expect(self, payload, allowed, headers=None, data=None):
        kwargs = {"data": data} if data is not None else {"json": payload}
        with self.client.post(
            "/api/v1/bookings/",
            headers=self.headers if headers is None else headers,
            catch_response=True,
            **kwargs,
        ) as resp:
            if resp.status_code in allowed:
                resp.success()
            else:
                resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_hall(self):
        self._expect(booking_payload(999999, CONTESTED_DATE), [404])

    @tag("edge")
    @task
    def end_before_start(self):
        payload = {**booking_payload(1, CONTESTED_DATE), "start_time": "15:00", "end_time": "09:00"}
        self._expect(payload, [400, 404])

    @tag("edge")
    @task
    def past_date(self):
        self._expect(booking_payload(1, "2000-01-01"), [400, 404, 409])

    @tag("edge")
    @task
    def huge_attendance(self):
        self._expect({**booking_payload(1, CONTESTED_DATE), "attendees": 999999}, [400, 404, 409])

    @tag("edge")
    @task
    def malformed_json(self):
        self._expect(None, [400, 422], data="not json at all")

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect(booking_payload(1, CONTESTED_DATE), [401], headers={})


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing halls and calendars
      - Some bookings on random future dates
      - Occasional review of one's own bookings
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_and_login(self.client)

    @task(50)
    def browse_halls(self):
        resp = self.client.get("/api/v1/halls/")
        if resp.status_code == 200:
            for hall in resp.json().get("halls", []):
                if hall["id"] not in HALL_IDS:
                    HALL_IDS.append(hall["id"])

    @task(20)
    def view_calendar(self):
        if HALL_IDS:
            self.client.get(
                f"/api/v1/halls/{random.choice(HALL_IDS)}/calendar",
                name="/api/v1/halls/{id}/calendar",
            )

    @task(10)
    def book_hall(self):
        if HALL_IDS and self.headers:
            booking_date = (date.today() + timedelta(days=random.randint(1, 180))).isoformat()
            self.client.post(
                "/api/v1/bookings/",
                json=booking_payload(random.choice(HALL_IDS), booking_date),
                headers=self.headers,
            )

    @task(3)
    def my_bookings(self):
        if self.headers:
            self.client.get("/api/v1/bookings/summary", headers=self.headers)
