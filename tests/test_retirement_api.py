"""
Tests for the retirement API endpoints.
"""

import json
from unittest.mock import patch

from wealthplan.services.projection_service import ProjectionService

PAYLOAD = {
    "assets": [
        {"id": "ira", "current_value": 1_000_000, "tax_treatment": "tax_deferred"},
        {"id": "debt", "current_value": -100_000},
    ],
    "assumptions": {
        "current_age": 52,
        "retirement_age": 65,
        "life_expectancy": 90,
        "annual_spending_needs": 40_000,
        "social_security_monthly": 0,
        "inflation_rate": 0,
        "growth_rate": 0,
        "federal_tax_rate": 0.30,
        "state_tax_rate": 0,
    },
}


class TestProjectionEndpoints:
    """Test calculation endpoints."""

    def test_defaults(self, client):
        response = client.get("/api/retirement/defaults")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["assumptions"]["current_age"] == 50
        assert len(data["growth_presets"]) == 3

    def test_projection(self, client):
        response = client.post("/api/retirement/projection", json=PAYLOAD)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert abs(data["summary"]["total_after_tax_today"] - 600_000) < 1e-6
        assert abs(data["summary"]["surplus_or_shortfall"] + 400_000) < 1e-6
        assert data["summary"]["is_on_track"] is False
        assert data["portfolio_by_year"][0]["age"] == 52
        assert data["portfolio_by_year"][-1]["age"] == 90

    def test_projection_empty_body_uses_defaults(self, client):
        response = client.post("/api/retirement/projection")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["assets"] == []
        assert data["summary"]["total_after_tax_today"] == 0

    def test_projection_validation_error(self, client):
        payload = {"assumptions": {"growth_rate": 3}, "assets": [{"id": "", "current_value": 1}]}
        response = client.post("/api/retirement/projection", json=payload)

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["error"] == "Invalid request"
        locations = [tuple(detail["loc"]) for detail in data["details"]]
        assert ("assumptions", "growth_rate") in locations
        assert ("assets", 0, "id") in locations

    def test_projection_internal_error(self, client):
        with patch.object(ProjectionService, "run_projection", side_effect=RuntimeError("boom")):
            response = client.post("/api/retirement/projection", json=PAYLOAD)

        assert response.status_code == 500
        assert json.loads(response.data) == {"error": "Internal server error"}

    def test_sensitivity(self, client):
        response = client.post("/api/retirement/sensitivity", json=PAYLOAD)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert len(data["cells"]) == 17
        assert data["base"]["is_on_track"] is False

    def test_sensitivity_table(self, client):
        payload = dict(PAYLOAD, growth_rates=[0.05], spending_levels=[30_000, 40_000])
        response = client.post("/api/retirement/sensitivity/table", json=payload)

        assert response.status_code == 200
        rows = json.loads(response.data)["rows"]
        assert [row["spending"] for row in rows] == [30_000, 40_000]

    def test_sensitivity_table_clamps_growth_rates(self, client):
        payload = dict(PAYLOAD, growth_rates=[-1.0], spending_levels=[40_000])
        response = client.post("/api/retirement/sensitivity/table", json=payload)

        assert response.status_code == 200
        rows = json.loads(response.data)["rows"]
        assert rows[0]["growth"] == 0.0

    def test_projection_at_oldest_age(self, client):
        payload = {"assets": PAYLOAD["assets"], "assumptions": {"current_age": 120}}
        response = client.post("/api/retirement/projection", json=payload)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["assumptions"]["life_expectancy"] == 120
        assert len(data["portfolio_by_year"]) == 1

    def test_monte_carlo(self, client):
        payload = dict(PAYLOAD, monte_carlo={"iterations": 200, "seed": 5})
        response = client.post("/api/retirement/monte-carlo", json=payload)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["iterations"] == 200
        assert 0 <= data["success_rate"] <= 100
        assert "histogram" in data

    def test_monte_carlo_invalid_config(self, client):
        payload = dict(PAYLOAD, monte_carlo={"iterations": 0})
        response = client.post("/api/retirement/monte-carlo", json=payload)
        assert response.status_code == 400


class TestPlanEndpoints:
    """Test plan persistence endpoints."""

    def test_plan_lifecycle(self, client):
        plan = {"assumptions": {"current_age": 40}, "excluded_ids": ["cash"], "mode": "pro"}

        response = client.put("/api/retirement/plans/home", json=plan)
        assert response.status_code == 200

        response = client.get("/api/retirement/plans/home")
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["plan_id"] == "home"
        assert data["plan"]["excluded_ids"] == ["cash"]
        assert data["plan"]["mode"] == "pro"

        response = client.delete("/api/retirement/plans/home")
        assert response.status_code == 200

        response = client.get("/api/retirement/plans/home")
        assert response.status_code == 404

    def test_delete_missing_plan(self, client):
        response = client.delete("/api/retirement/plans/nobody")
        assert response.status_code == 404

    def test_save_invalid_plan(self, client):
        response = client.put("/api/retirement/plans/home", json={"mode": "expert"})
        assert response.status_code == 400
