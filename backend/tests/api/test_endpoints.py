"""
Tests for the HTTP API: locations, estimates, pathways, advisor and health.
"""

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi import status

from healthflow.api.deps import get_advisory, get_procedure_store
from healthflow.core.exceptions import StoreFailure
from healthflow.main import app
from healthflow.schemas.pathway import MAX_PROCEDURE_QUERY_CHARS
from healthflow.services.advisory_service import FALLBACK_ANSWER, AdvisoryGrounder
from healthflow.services.pathway_service import NATIONAL_AVERAGE_NOTE
from healthflow.services.procedure_store import ProcedureStore


class TestLocations:
    """Tests for GET /api/countries and GET /api/states/{country}."""

    def test_list_countries(self, client):
        """Should list catalog countries in document order."""
        response = client.get("/api/countries")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == ["India", "Nepal"]

    def test_list_states(self, client):
        """Should list states case-insensitively."""
        response = client.get("/api/states/india")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == ["Maharashtra", "Delhi"]

    def test_unknown_country(self, client):
        """Should return 404 for an unknown country."""
        response = client.get("/api/states/Atlantis")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"detail": "Country not found"}


class TestEstimate:
    """Tests for GET /api/estimate."""

    def test_store_estimate(self, client, store_records):
        """Should return store figures with all in-state hospitals."""
        response = client.get(
            "/api/estimate",
            params={"country": "India", "state": "Maharashtra", "procedure": "knee"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["resolution_tier"] == "store-exact"
        assert body["currency"] == "₹"
        assert body["data"] == {
            "name": "Knee Replacement",
            "avg_cost_private": 340000,
            "avg_cost_govt": 80000,
            "recovery_days": 21,
        }
        assert [c["item_name"] for c in body["hidden_costs"]] == ["Implant upgrade", "Post-op physiotherapy"]
        assert [h["name"] for h in body["hospitals"]] == [
            "Lilavati Hospital",
            "City Government Hospital",
            "Sassoon General Hospital",
        ]

    def test_catalog_estimate(self, client, store_records):
        """Should fall back to the catalog entry for the state."""
        response = client.get(
            "/api/estimate",
            params={"country": "India", "state": "Maharashtra", "procedure": "Cataract"},
        )

        body = response.json()
        assert body["resolution_tier"] == "catalog"
        assert body["data"]["avg_cost_private"] == 45000
        assert body["data"]["recovery_days"] is None

    def test_national_average_estimate(self, client, store_records):
        """Should return the degraded shape with a note."""
        response = client.get(
            "/api/estimate",
            params={"country": "India", "state": "Delhi", "procedure": "heart transplant"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "note": NATIONAL_AVERAGE_NOTE,
            "avg_cost": 200000,
            "currency": "₹",
            "hidden_costs": [],
            "resolution_tier": "national-average",
        }

    def test_unknown_state(self, client, store_records):
        """Should return 404 with the state name."""
        response = client.get(
            "/api/estimate",
            params={"country": "India", "state": "Goa", "procedure": "knee"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"detail": "State not found: Goa"}

    def test_missing_parameters(self, client):
        """Should reject requests without a procedure."""
        response = client.get("/api/estimate", params={"country": "India", "state": "Delhi"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestCheckPathway:
    """Tests for POST /check-pathway."""

    def test_low_income_pathway(self, client, store_records):
        """Should restrict low income patients to PMJAY hospitals."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "knee replacement", "income_level": "low", "state": "Maharashtra", "country": "India"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["resolution_tier"] == "store-exact"
        assert body["income_level"] == "low"
        assert body["procedure"]["name"] == "Knee Replacement"
        assert [h["name"] for h in body["hospitals"]] == [
            "City Government Hospital",
            "Sassoon General Hospital",
        ]
        assert all(h["is_pmjay_empaneled"] for h in body["hospitals"])
        assert body["note"] is None

    def test_country_defaults_to_india(self, client, store_records):
        """Should use the default country when none is given."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "appendectomy", "income_level": "HIGH", "state": "Delhi"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["resolution_tier"] == "catalog"
        assert [h["name"] for h in body["hospitals"]] == ["AIIMS New Delhi"]

    def test_blank_income_is_unspecified(self, client, store_records):
        """Should treat an empty income level as unspecified."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "", "state": "Maharashtra"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["income_level"] == "unspecified"
        assert "Lilavati Hospital" in [h["name"] for h in body["hospitals"]]

    def test_oversized_procedure_is_rejected(self, client):
        """Should reject procedure names longer than the query limit."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "x" * (MAX_PROCEDURE_QUERY_CHARS + 1), "state": "Maharashtra"},
        )
        estimate = client.get(
            "/api/estimate",
            params={"country": "India", "state": "Maharashtra", "procedure": "x" * (MAX_PROCEDURE_QUERY_CHARS + 1)},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert estimate.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_invalid_income_level(self, client):
        """Should reject unknown income levels."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "rich", "state": "Maharashtra"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_country(self, client, store_records):
        """Should return 404 for a country outside the catalog."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "state": "Maharashtra", "country": "Atlantis"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"detail": "Country not found: Atlantis"}

    def test_national_average_pathway(self, client, store_records):
        """Should flag degraded estimates with a note."""
        response = client.post(
            "/check-pathway",
            json={"procedure": "heart transplant", "income_level": "low", "state": "Maharashtra"},
        )

        body = response.json()
        assert body["resolution_tier"] == "national-average"
        assert body["note"] == NATIONAL_AVERAGE_NOTE
        assert body["procedure"]["avg_private_cost"] == 200000
        assert body["hospitals"] == []

    def test_store_failure_is_server_error(self, client):
        """Should map store failures to a generic 500."""
        store = MagicMock(spec=ProcedureStore)
        store.find_procedure.side_effect = StoreFailure("Procedure lookup failed")
        app.dependency_overrides[get_procedure_store] = lambda: store

        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "low", "state": "Maharashtra"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"detail": "Server error"}

    def test_degraded_mode_without_catalog(self, client, store_records):
        """Should resolve from the store alone when no catalog is loaded."""
        app.state.catalog = None

        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "high", "state": "Maharashtra"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["resolution_tier"] == "store-exact"

        response = client.post(
            "/check-pathway",
            json={"procedure": "cataract", "income_level": "high", "state": "Maharashtra"},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"detail": "Procedure not found in our database yet."}


class TestAskAI:
    """Tests for POST /api/ask-ai."""

    @pytest.fixture
    def context_data(self, client, store_records) -> dict:
        response = client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "low", "state": "Maharashtra"},
        )
        return response.json()

    def test_answer(self, client, context_data):
        """Should return the model's answer for a resolved pathway."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"choices": [{"message": {"content": "Budget ₹75,000 beyond the package."}}]},
            )

        grounder = AdvisoryGrounder(api_key="test-key", transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_advisory] = lambda: grounder

        response = client.post(
            "/api/ask-ai",
            json={"question": "What extra costs should I plan for?", "contextData": context_data},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"answer": "Budget ₹75,000 beyond the package."}

    def test_backend_failure_returns_fallback(self, client, context_data):
        """Should answer with the fallback text when the model fails."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        grounder = AdvisoryGrounder(api_key="test-key", transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_advisory] = lambda: grounder

        response = client.post(
            "/api/ask-ai",
            json={"question": "Is this covered?", "contextData": context_data},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"answer": FALLBACK_ANSWER}

    def test_not_configured(self, client, context_data):
        """Should return 503 when no API key is configured."""
        app.dependency_overrides[get_advisory] = lambda: AdvisoryGrounder(api_key="")

        response = client.post(
            "/api/ask-ai",
            json={"question": "Is this covered?", "contextData": context_data},
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_missing_context(self, client):
        """Should reject questions without a pathway."""
        response = client.post("/api/ask-ai", json={"question": "Is this covered?"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_rate_limited(self, client, context_data):
        """Should return 429 after ten questions in a minute."""
        app.dependency_overrides[get_advisory] = lambda: AdvisoryGrounder(api_key="")
        payload = {"question": "Is this covered?", "contextData": context_data}

        for _ in range(10):
            assert client.post("/api/ask-ai", json=payload).status_code == status.HTTP_503_SERVICE_UNAVAILABLE

        response = client.post("/api/ask-ai", json=payload)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json()["error"] == "rate_limit_exceeded"


class TestMonitoring:
    """Tests for /health and /metrics."""

    def test_health(self, client):
        """Should report catalog size and advisory status."""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "healthy"
        assert body["catalog_countries"] == 2
        assert "configured" in body["advisory"]

    def test_health_degraded(self, client):
        """Should report degraded status without a catalog."""
        app.state.catalog = None

        assert client.get("/health").json()["status"] == "degraded"

    def test_metrics(self, client, store_records):
        """Should expose pathway counters in Prometheus format."""
        client.post(
            "/check-pathway",
            json={"procedure": "knee", "income_level": "low", "state": "Maharashtra"},
        )

        response = client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert 'pathway_resolutions_total{tier="store-exact"}' in response.text
