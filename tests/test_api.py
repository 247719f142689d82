import pytest
from fastapi.testclient import TestClient

from rate_engine.main import app

RATE = {
    "id": "r1",
    "valid_from": "2024-01-01",
    "valid_to": "2025-01-01",
    "rate_basis": "per_night",
    "base_price": 100,
    "currency": "gbp",
    "target_cost": 80,
    "markup_type": "percentage",
    "markup_amount": 25,
    "pricing_details": {
        "daily_rates": {"2024-07-04": {"price": 250}},
        "occupancy_pricing": [
            {"adults": 1, "children": 0, "multiplier": 1.0},
            {"adults": 2, "children": 1, "multiplier": 1.3},
        ],
    },
}

VERSIONS = [
    {"id": "v1", "contract_id": "c1", "valid_from": "2024-01-01", "valid_to": "2024-06-01"},
    {
        "id": "v2",
        "contract_id": "c1",
        "valid_from": "2024-05-01",
        "valid_to": "2024-12-01",
        "supersedes_id": "v1",
        "cancellation_policy": {
            "rules": [
                {"days_before": 30, "penalty_percent": 0},
                {"days_before": 7, "penalty_percent": 50},
                {"days_before": 0, "penalty_percent": 100},
            ]
        },
        "payment_terms": {
            "customer": {"deposit_percent": 20, "balance_due": "30_days_before"},
            "commission": {"rate": 10},
        },
        "rate_modifiers": {"seasonal": [{"name": "Summer", "dates": ["2024-07-04"], "adjustment_percent": 10}]},
    },
]


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


class TestHealth:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestPricingEndpoints:

    def test_resolve(self, client):
        resp = client.post(
            "/api/pricing/resolve",
            json={"rate": RATE, "date_range": {"from": "2024-07-03", "to": "2024-07-05"}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["currency"] == "GBP"
        assert body["subtotal"] == 350.0

    def test_resolve_unmatched_occupancy(self, client):
        resp = client.post(
            "/api/pricing/resolve",
            json={
                "rate": RATE,
                "date_range": {"from": "2024-07-03", "to": "2024-07-05"},
                "occupancy": {"adults": 3},
            },
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "no_matching_occupancy_config"

    def test_quote(self, client):
        resp = client.post(
            "/api/pricing/quote",
            json={
                "rate": RATE,
                "date_range": {"from": "2024-07-03", "to": "2024-07-05"},
                "versions": VERSIONS,
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["version_id"] == "v2"
        assert body["total"] == 385.0

    def test_margin_without_cost(self, client):
        resp = client.post("/api/pricing/margin", json={"price": 100, "cost": 0})
        assert resp.json()["margin_percentage"] is None

    def test_markup_from_percent(self, client):
        resp = client.post("/api/pricing/markup", json={"cost": 80, "markup_percent": 25})
        assert resp.json()["price"] == 100.0

    def test_markup_from_price(self, client):
        resp = client.post("/api/pricing/markup", json={"cost": 80, "price": 100})
        assert resp.json()["markup_percent"] == 25.0

    def test_markup_needs_one_field(self, client):
        resp = client.post("/api/pricing/markup", json={"cost": 80, "price": 100, "markup_percent": 25})
        assert resp.status_code == 422


class TestContractEndpoints:

    def test_resolve_version(self, client):
        resp = client.post("/api/contracts/versions/resolve", json={"versions": VERSIONS, "on_date": "2024-05-15"})
        assert resp.status_code == 200
        assert resp.json()["version"]["id"] == "v2"

    def test_no_active_version(self, client):
        resp = client.post("/api/contracts/versions/resolve", json={"versions": VERSIONS, "on_date": "2025-02-01"})
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "no_active_version"

    def test_cancellation(self, client):
        resp = client.post(
            "/api/contracts/cancellation",
            json={
                "versions": VERSIONS,
                "cancel_at": "2024-06-21",
                "service_date": "2024-07-01",
                "booking_value": 1000,
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["version_id"] == "v2"
        assert body["penalty_total"] == 500.0

    def test_attrition_disabled(self, client):
        resp = client.post(
            "/api/contracts/attrition",
            json={
                "versions": VERSIONS,
                "change_at": "2024-06-01",
                "service_date": "2024-07-01",
                "current_qty": 20,
                "original_qty": 20,
            },
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "not_applicable"

    def test_payment_schedule_with_commission(self, client):
        resp = client.post(
            "/api/contracts/payment-schedule",
            json={
                "versions": VERSIONS,
                "booking_date": "2024-03-01",
                "service_date": "2024-07-01",
                "total": 1000,
                "net": 800,
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["deposit_amount"] == 200.0
        assert body["balance_due"] == "2024-06-01"
        assert body["commission"] == 80.0

    def test_operational_check(self, client):
        versions = [{**VERSIONS[1], "operational_terms": {"minimum_lead_time": "48h"}}]
        resp = client.post(
            "/api/contracts/operational-check",
            json={"versions": versions, "booked_at": "2024-06-30T12:00:00", "service_start": "2024-07-01"},
        )
        assert resp.status_code == 200
        assert resp.json()["overall_status"] == "violation"

    @pytest.mark.parametrize("booked_at", ["2024-07-01T10:00:00Z", "2024-07-01T10:00:00+02:00"])
    def test_operational_check_timezone_aware_booking(self, client, booked_at):
        versions = [{**VERSIONS[1], "operational_terms": {"minimum_lead_time": "24h"}}]
        resp = client.post(
            "/api/contracts/operational-check",
            json={"versions": versions, "booked_at": booked_at, "service_start": "2024-07-10"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["overall_status"] == "compliant"
        assert body["checks"][0]["rule_type"] == "minimum_lead_time"

    def test_price_quantity_below_one_rejected(self, client):
        resp = client.post(
            "/api/pricing/resolve",
            json={"rate": RATE, "date_range": {"from": "2024-07-03", "to": "2024-07-05"}, "quantity": 0},
        )
        assert resp.status_code == 422
