"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags throughput   # Read paths
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
from datetime import date, timedelta
from locust import HttpUser, task, between, tag, events

# Shared state
EXHIBITION_IDS = []
ARTWORK_IDS = []
LOCATION_IDS = []
CONTENDED_LOCATION_ID = None


def random_range(max_days_ahead=365, max_length=30):
    start = date.today() + timedelta(days=random.randint(1, max_days_ahead))
    end = start + timedelta(days=random.randint(1, max_length))
    return start.isoformat(), end.isoformat()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: contention scenario books one location repeatedly")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many curators, one wall, one week

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    Every request asks for the same dates at the same location.
    After the test, verify at most one live exhibition holds those dates:
      SELECT COUNT(*) FROM exhibitions
      WHERE location_id = X AND status IN ('scheduled', 'active');
    Should be 1
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if CONTENDED_LOCATION_ID is None:
            loc = self.client.post("/api/v1/locations/", json={
                "width": 100, "height": 100, "description": "Load test wall",
            })
            art = self.client.post("/api/v1/artworks/", json={
                "title": "Load Test Piece", "artist": "Locust",
            })
            if loc.status_code == 201 and art.status_code == 201:
                globals()["CONTENDED_LOCATION_ID"] = loc.json()["id"]
                ARTWORK_IDS.append(art.json()["id"])
                print(f"\n✓ Created location {CONTENDED_LOCATION_ID} for contention\n")

    @tag("concurrency")
    @task
    def book_contended_location(self):
        """All users fight for the same week at the same wall."""
        if not CONTENDED_LOCATION_ID or not ARTWORK_IDS:
            return

        start = date.today() + timedelta(days=400)
        with self.client.post("/api/v1/exhibitions/",
            json={
                "artwork_id": ARTWORK_IDS[0],
                "location_id": CONTENDED_LOCATION_ID,
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=6)).isoformat(),
            },
            catch_response=True,
            name="/api/v1/exhibitions/ [contended]",
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: already booked
            elif resp.status_code == 503:
                resp.success()  # Lock contention outlasted retries; nothing written
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - read paths under load

    Run: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_exhibitions(self):
        resp = self.client.get("/api/v1/exhibitions/")
        if resp.status_code == 200:
            for exhibition in resp.json():
                if exhibition["id"] not in EXHIBITION_IDS:
                    EXHIBITION_IDS.append(exhibition["id"])

    @tag("throughput", "read")
    @task(5)
    def current_exhibitions(self):
        self.client.get("/api/v1/exhibitions/current")

    @tag("throughput", "read")
    @task(5)
    def availability(self):
        location_id = random.choice(LOCATION_IDS) if LOCATION_IDS else random.randint(1, 10)
        start, end = random_range()
        self.client.get(
            f"/api/v1/locations/{location_id}/availability",
            params={"start_date": start, "end_date": end},
            name="/api/v1/locations/{id}/availability",
        )

    @tag("throughput", "read")
    @task(3)
    def get_exhibition_detail(self):
        if EXHIBITION_IDS:
            self.client.get(f"/api/v1/exhibitions/{random.choice(EXHIBITION_IDS)}",
                name="/api/v1/exhibitions/{id}")

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

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_location(self):
        start, end = random_range()
        with self.client.post("/api/v1/exhibitions/",
            json={"artwork_id": 1, "location_id": 999999, "start_date": start, "end_date": end},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def reversed_dates(self):
        start, end = random_range()
        with self.client.post("/api/v1/exhibitions/",
            json={"artwork_id": 1, "location_id": 1, "start_date": end, "end_date": start},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def single_day(self):
        day = (date.today() + timedelta(days=30)).isoformat()
        with self.client.post("/api/v1/exhibitions/",
            json={"artwork_id": 1, "location_id": 1, "start_date": day, "end_date": day},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def bad_status(self):
        start, end = random_range()
        with self.client.post("/api/v1/exhibitions/",
            json={"artwork_id": 1, "location_id": 1, "start_date": start,
                  "end_date": end, "status": "archived"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/exhibitions/",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def stale_update(self):
        if not EXHIBITION_IDS:
            return
        with self.client.put(f"/api/v1/exhibitions/{random.choice(EXHIBITION_IDS)}",
            json={"notes": "stale", "updated_at": "2000-01-01T00:00:00Z"},
            catch_response=True,
            name="/api/v1/exhibitions/{id} [stale]",
        ) as resp:
            self._expect(resp, [404, 409])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates curators:
      - Mostly browsing
      - Some availability checks and bookings
      - Rare artwork/location creation
    """
    wait_time = between(1, 3)

    @task(40)
    def browse_exhibitions(self):
        resp = self.client.get("/api/v1/exhibitions/")
        if resp.status_code == 200:
            for exhibition in resp.json():
                if exhibition["id"] not in EXHIBITION_IDS:
                    EXHIBITION_IDS.append(exhibition["id"])

    @task(10)
    def browse_locations(self):
        resp = self.client.get("/api/v1/locations/")
        if resp.status_code == 200:
            for location in resp.json():
                if location["id"] not in LOCATION_IDS:
                    LOCATION_IDS.append(location["id"])

    @task(10)
    def browse_artworks(self):
        resp = self.client.get("/api/v1/artworks/")
        if resp.status_code == 200:
            for artwork in resp.json():
                if artwork["id"] not in ARTWORK_IDS:
                    ARTWORK_IDS.append(artwork["id"])

    @task(10)
    def book_exhibition(self):
        """Check availability, then book if free. 409 is still possible under contention."""
        if not (LOCATION_IDS and ARTWORK_IDS):
            return
        location_id = random.choice(LOCATION_IDS)
        start, end = random_range()
        resp = self.client.get(
            f"/api/v1/locations/{location_id}/availability",
            params={"start_date": start, "end_date": end},
            name="/api/v1/locations/{id}/availability",
        )
        if resp.status_code == 200 and resp.json()["available"]:
            with self.client.post("/api/v1/exhibitions/",
                json={"artwork_id": random.choice(ARTWORK_IDS), "location_id": location_id,
                      "start_date": start, "end_date": end},
                catch_response=True,
            ) as booked:
                if booked.status_code in (201, 409):
                    booked.success()
                    if booked.status_code == 201:
                        EXHIBITION_IDS.append(booked.json()["id"])
                else:
                    booked.failure(f"Unexpected: {booked.status_code}")

    @task(2)
    def create_artwork(self):
        resp = self.client.post("/api/v1/artworks/", json={
            "title": f"Piece {random.randint(1, 10000)}",
            "artist": "Load Test",
        })
        if resp.status_code == 201:
            ARTWORK_IDS.append(resp.json()["id"])
