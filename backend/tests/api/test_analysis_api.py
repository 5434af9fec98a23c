"""Tests for ROI, rate validation, degradation and health endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestROI:
    async def test_explicit_savings(self, client: AsyncClient):
        savings = [100.0] * 10
        investment = sum(100.0 * 1.1 ** i for i in range(10)) / 1.1 ** 10
        resp = await client.post(
            "/api/v1/roi", json={"initial_investment": investment, "annual_savings": savings}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["roi"] == pytest.approx(0.1, abs=1e-4)
        assert data["converged"] is True
        assert data["annual_savings"] == savings

    async def test_savings_from_parameters(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/roi",
            json={
                "initial_investment": 2205.0,
                "savings": {
                    "grid_price": 0.688,
                    "usage_kwh": 900.0,
                    "grid_energy_kwh": 0.0,
                    "years": 25,
                    "price_increase": 0.01,
                },
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["annual_savings"]) == 25
        assert data["roi"] == pytest.approx(0.3465, abs=2e-3)
        assert data["payback_years"] == pytest.approx(3.5153, abs=1e-3)

    async def test_zero_investment(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/roi", json={"initial_investment": 0.0, "annual_savings": [50.0, 50.0]}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["roi"] == 0.0
        assert data["method"] == "degenerate"
        assert data["payback_years"] is None

    async def test_both_sources_rejected(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/roi",
            json={
                "initial_investment": 100.0,
                "annual_savings": [10.0],
                "savings": {"grid_price": 0.3, "usage_kwh": 1.0, "grid_energy_kwh": 0.0},
            },
        )
        assert resp.status_code == 422

    async def test_neither_source_rejected(self, client: AsyncClient):
        resp = await client.post("/api/v1/roi", json={"initial_investment": 100.0})
        assert resp.status_code == 422


class TestRates:
    async def test_valid_table(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/rates/validate",
            json={
                "type": "tiered",
                "tiers": [
                    {
                        "name": "all",
                        "rate": 0.2,
                        "hour_ranges": [
                            {"start": 0, "end": 24, "day_type": "weekday"},
                            {"start": 0, "end": 24, "day_type": "weekend"},
                        ],
                    }
                ],
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["valid"] is True
        assert len(data["hourly_preview"]) == 168

    async def test_gap_reported(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/rates/validate",
            json={
                "type": "tiered",
                "tiers": [{"name": "day", "rate": 0.3, "hour_ranges": [{"start": 8, "end": 20}]}],
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["valid"] is False
        assert data["hourly_preview"][0] == 0.0
        assert data["hourly_preview"][8] == 0.3

    async def test_flat_default_price(self, client: AsyncClient):
        resp = await client.post("/api/v1/rates/validate", json={"type": "flat"})
        assert resp.status_code == 200
        assert set(resp.json()["hourly_preview"]) == {0.3}

    async def test_hour_out_of_range(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/rates/validate",
            json={"type": "tiered", "tiers": [{"name": "x", "rate": 0.1, "hour_ranges": [{"start": 24, "end": 2}]}]},
        )
        assert resp.status_code == 422


class TestDegradation:
    async def test_scenarios(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/degradation",
            json={
                "scenarios": [
                    {"label": "pv-only", "pv_capacity_kw": 4.0, "battery_capacity_kwh": 0.0},
                    {"label": "pv+battery", "pv_capacity_kw": 4.0, "battery_capacity_kwh": 8.0},
                ],
                "params": {"years": 3},
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"pv-only", "pv+battery"}
        assert len(data["pv+battery"]["yearly"]) == 3
        assert data["pv+battery"]["autarky"] > data["pv-only"]["autarky"]

    async def test_usage_rescaled(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/degradation",
            json={
                "scenarios": [{"label": "a", "pv_capacity_kw": 1.0, "battery_capacity_kwh": 1.0}],
                "params": {"years": 2},
                "electricity_usage_kwh": 2000.0,
            },
        )
        assert resp.status_code == 200
        assert resp.json()["a"]["total_demand_kwh"] == pytest.approx(4000.0)

    async def test_requires_scenarios(self, client: AsyncClient):
        resp = await client.post("/api/v1/degradation", json={"scenarios": []})
        assert resp.status_code == 422


class TestHealth:
    async def test_ok(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["services"]["data"] == "ok"
        assert set(data["services"]["cache"]) == {"entries", "hits", "misses"}

    async def test_degraded_without_data(self, empty_client: AsyncClient):
        resp = await empty_client.get("/health")
        data = resp.json()
        assert data["status"] == "degraded"
        assert data["services"]["data"].startswith("missing:")

    async def test_request_id_echoed(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers.get("X-Request-ID") == "abc123"
