"""HTTP adapter smoke tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from homestay.main import create_app

CUSTOMER_HEADERS = {"X-User-Id": "customer-1", "X-User-Role": "customer"}
STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def client(settings, database, clock, seed):
    app = create_app(settings=settings, database=database, clock=clock)
    return TestClient(app)


def _booking_payload(seed, check_in="2025-07-01", check_out="2025-07-05", **extra):
    return {"room_id": seed.room_101.id, "check_in_date": check_in, "check_out_date": check_out, **extra}


def _money(value):
    return Decimal(str(value))


class TestEnvelope:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "X-Request-ID" in response.headers

    def test_request_id_echoed(self, client):
        response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_missing_principal(self, client, seed):
        response = client.post("/api/v1/bookings", json=_booking_payload(seed))
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "AUTHENTICATION_REQUIRED"

    def test_unknown_role(self, client, seed):
        response = client.get("/api/v1/bookings/me", headers={"X-User-Id": "u-1", "X-User-Role": "owner"})
        assert response.status_code == 403

    def test_request_validation(self, client, seed):
        response = client.post(
            "/api/v1/bookings",
            json=_booking_payload(seed, check_in="2025-07-05", check_out="2025-07-01"),
            headers=CUSTOMER_HEADERS,
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"]["field_errors"]


class TestBookingRoutes:
    def test_booking_flow(self, client, seed):
        created = client.post(
            "/api/v1/bookings",
            json=_booking_payload(seed, number_of_guests=2, services=[{"service_id": seed.breakfast.id, "quantity": 2}]),
            headers=CUSTOMER_HEADERS,
        )
        assert created.status_code == 201
        booking = created.json()["data"]
        assert booking["booking_status"] == "pending"
        assert _money(booking["total_amount"]) == Decimal("2200000")

        confirmed = client.patch(
            f"/api/v1/bookings/{booking['id']}/status",
            json={"status": "confirmed"},
            headers=STAFF_HEADERS,
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["booking_status"] == "confirmed"

        clash = client.post(
            "/api/v1/bookings",
            json=_booking_payload(seed, check_in="2025-07-04", check_out="2025-07-06"),
            headers=CUSTOMER_HEADERS,
        )
        assert clash.status_code == 409
        assert clash.json()["error"]["code"] == "ROOM_UNAVAILABLE"

        availability = client.post(
            "/api/v1/bookings/check-availability",
            json=_booking_payload(seed, check_in="2025-07-05", check_out="2025-07-06"),
            headers=CUSTOMER_HEADERS,
        )
        assert availability.json()["data"]["available"] is True

        mine = client.get("/api/v1/bookings/me", headers=CUSTOMER_HEADERS)
        assert [b["id"] for b in mine.json()["data"]] == [booking["id"]]

        activities = client.get(f"/api/v1/bookings/{booking['id']}/activities", headers=CUSTOMER_HEADERS)
        assert [a["activity_type"] for a in activities.json()["data"]] == ["created", "confirmed"]

        cancelled = client.post(
            f"/api/v1/bookings/{booking['id']}/cancel",
            json={"reason": "plans changed"},
            headers=CUSTOMER_HEADERS,
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["data"]["booking_status"] == "cancelled"

    def test_calculate_cost(self, client, seed):
        response = client.post(
            "/api/v1/bookings/calculate-cost",
            json=_booking_payload(seed, check_in="2025-06-01", check_out="2025-06-03", number_of_guests=2),
            headers=CUSTOMER_HEADERS,
        )
        data = response.json()["data"]
        assert data["nights"] == 2
        assert _money(data["total_amount"]) == Decimal("1000000")
        assert [day["date"] for day in data["daily_prices"]] == ["2025-06-01", "2025-06-02"]

    def test_customer_cannot_check_in(self, client, seed):
        booking = client.post(
            "/api/v1/bookings", json=_booking_payload(seed), headers=CUSTOMER_HEADERS
        ).json()["data"]
        response = client.post(f"/api/v1/bookings/{booking['id']}/check-in", headers=CUSTOMER_HEADERS)
        assert response.status_code == 403

    def test_booking_not_found(self, client, seed):
        response = client.get("/api/v1/bookings/missing", headers=STAFF_HEADERS)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "BOOKING_NOT_FOUND"

    def test_modify_and_manage_services(self, client, seed):
        booking = client.post(
            "/api/v1/bookings",
            json=_booking_payload(seed, services=[{"service_id": seed.pickup.id, "quantity": 1}]),
            headers=CUSTOMER_HEADERS,
        ).json()["data"]

        modified = client.put(
            f"/api/v1/bookings/{booking['id']}",
            json={"check_out_date": "2025-07-03", "special_requests": "Quiet room"},
            headers=CUSTOMER_HEADERS,
        )
        assert modified.status_code == 200
        data = modified.json()["data"]
        assert data["check_out_date"] == "2025-07-03"
        assert data["special_requests"] == "Quiet room"
        assert _money(data["total_amount"]) == Decimal("1250000")

        lines = client.get(f"/api/v1/bookings/{booking['id']}/services", headers=CUSTOMER_HEADERS).json()["data"]
        assert [(line["service_name"], line["quantity"]) for line in lines] == [("Airport Pickup", 1)]

        removed = client.delete(
            f"/api/v1/bookings/{booking['id']}/services/{lines[0]['id']}", headers=CUSTOMER_HEADERS
        )
        assert removed.status_code == 200
        assert removed.json()["data"]["services"] == []
        assert _money(removed.json()["data"]["total_amount"]) == Decimal("1000000")

        missing = client.delete(f"/api/v1/bookings/{booking['id']}/services/missing", headers=CUSTOMER_HEADERS)
        assert missing.status_code == 404

    def test_modify_rejects_inverted_dates(self, client, seed):
        booking = client.post("/api/v1/bookings", json=_booking_payload(seed), headers=CUSTOMER_HEADERS).json()["data"]
        response = client.put(
            f"/api/v1/bookings/{booking['id']}",
            json={"check_in_date": "2025-07-05", "check_out_date": "2025-07-01"},
            headers=CUSTOMER_HEADERS,
        )
        assert response.status_code == 422


class TestPricingRoutes:
    def _rule(self, seed, **overrides):
        return {
            "room_type_id": seed.standard.id,
            "season_name": "Peak",
            "start_date": "2025-12-15",
            "end_date": "2026-01-31",
            "base_price": "1500000",
            "weekend_multiplier": "1.3",
            **overrides,
        }

    def test_rule_management(self, client, seed):
        created = client.post("/api/v1/pricing/rules", json=self._rule(seed), headers=ADMIN_HEADERS)
        assert created.status_code == 201
        rule_id = created.json()["data"]["id"]

        overlap = client.post(
            "/api/v1/pricing/rules",
            json=self._rule(seed, start_date="2025-12-25", end_date="2025-12-28"),
            headers=ADMIN_HEADERS,
        )
        assert overlap.status_code == 409
        assert overlap.json()["error"]["code"] == "PRICING_RULE_OVERLAP"

        listed = client.get("/api/v1/pricing/rules", params={"year": 2025}, headers=STAFF_HEADERS)
        assert listed.json()["data"]["total"] == 1

        updated = client.put(
            f"/api/v1/pricing/rules/{rule_id}", json={"base_price": "1600000"}, headers=ADMIN_HEADERS
        )
        assert _money(updated.json()["data"]["base_price"]) == Decimal("1600000")

        deleted = client.delete(f"/api/v1/pricing/rules/{rule_id}", headers=ADMIN_HEADERS)
        assert deleted.json()["data"] is True

    def test_customer_cannot_create_rule(self, client, seed):
        response = client.post("/api/v1/pricing/rules", json=self._rule(seed), headers=CUSTOMER_HEADERS)
        assert response.status_code == 403

    def test_range_and_calendar(self, client, seed):
        client.post("/api/v1/pricing/rules", json=self._rule(seed), headers=ADMIN_HEADERS)

        range_pricing = client.get(
            f"/api/v1/pricing/room-types/{seed.standard.id}/range",
            params={"check_in_date": "2025-12-19", "check_out_date": "2025-12-21"},
        )
        data = range_pricing.json()["data"]
        assert [_money(day["price"]) for day in data["daily_prices"]] == [Decimal("1500000"), Decimal("1950000")]
        assert data["applied_rules"][0]["season_name"] == "Peak"

        calendar = client.get(
            f"/api/v1/pricing/room-types/{seed.standard.id}/calendar",
            params={"start_date": "2025-12-14", "end_date": "2025-12-15"},
        )
        assert [day["season_name"] for day in calendar.json()["data"]] == ["Base Rate", "Peak"]

    def test_templates(self, client, seed):
        templates = client.get("/api/v1/pricing/templates").json()["data"]
        assert {t["name"] for t in templates} == {"vietnam_standard", "beach_resort"}

        bulk = client.post(
            "/api/v1/pricing/templates/bulk",
            json={"template_name": "beach_resort", "year": 2025, "room_type_ids": [seed.family.id]},
            headers=ADMIN_HEADERS,
        )
        assert bulk.status_code == 201
        assert bulk.json()["data"]["created_count"] == 2
