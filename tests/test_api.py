"""
Tests for the HTTP API.

The engine singletons are replaced through FastAPI dependency overrides so
no embedding model or saved index is needed.

Run with: pytest tests/test_api.py -v
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from jansahayak.models import IssueDetails, IssueType, Location
from jansahayak.server import create_app
from jansahayak.server.dependencies import get_issue_tracker, get_orchestrator, get_retriever

from conftest import START


@pytest.fixture
def client(orchestrator, retriever, tracker):
    app = create_app(preload=False)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_retriever] = lambda: retriever
    app.dependency_overrides[get_issue_tracker] = lambda: tracker
    return TestClient(app)


@pytest.fixture
def report(tracker):
    return tracker.create_report(IssueDetails(
        issue_type=IssueType.POTHOLE,
        description="Deep pothole near the bus stop",
        location=Location(city="Pune", state="Maharashtra"),
    ))


class TestConversationEndpoint:
    """POST /assistant/turn"""

    def test_scheme_question(self, client):
        response = client.post("/assistant/turn", json={
            "session_id": "web-1",
            "utterance": "What schemes are there for farmers?",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["language"] == "en"
        assert body["data"]["kind"] == "scheme_results"
        assert {item["scheme_id"] for item in body["data"]["items"]} == {"pm-kisan", "pmksy"}
        assert body["degraded"] is False

    def test_session_id_is_required(self, client):
        response = client.post("/assistant/turn", json={"session_id": "", "utterance": "hello"})
        assert response.status_code == 422


class TestSchemeEndpoints:
    """Scheme lookup and eligibility."""

    def test_get_scheme(self, client):
        response = client.get("/schemes/pm-kisan")

        assert response.status_code == 200
        assert response.json()["scheme_id"] == "pm-kisan"

    def test_unknown_scheme_is_404(self, client):
        response = client.get("/schemes/no-such-scheme")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "scheme_not_found"

    def test_eligibility(self, client):
        response = client.post("/schemes/pmay-g/eligibility", json={"profile": {"annual_income": 120000}})

        assert response.status_code == 200
        assert response.json()["eligible"] is True

    def test_eligibility_for_unknown_scheme(self, client):
        response = client.post("/schemes/no-such-scheme/eligibility", json={})
        assert response.status_code == 404


class TestIssueEndpoints:
    """Issue lookup, status webhook and comments."""

    def test_get_issue(self, client, report):
        response = client.get(f"/issues/{report.tracking_id.lower()}")

        assert response.status_code == 200
        body = response.json()
        assert body["tracking_id"] == report.tracking_id
        assert body["status"] == "submitted"

    def test_unknown_issue_is_404(self, client):
        response = client.get("/issues/JS-20250101-00042")
        assert response.status_code == 404

    def test_status_webhook(self, client, report):
        response = client.post(f"/issues/{report.tracking_id}/status", json={"status": "under_review", "notes": "Assigned"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "under_review"
        assert [entry["status"] for entry in body["status_history"]] == ["submitted", "under_review"]

    def test_illegal_transition_is_409(self, client, report, tracker):
        response = client.post(f"/issues/{report.tracking_id}/status", json={"status": "resolved"})

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "illegal_transition"
        assert tracker.get_issue_status(report.tracking_id).value == "submitted"

    def test_out_of_order_update_is_422(self, client, report):
        stale = (START - timedelta(days=1)).isoformat()

        response = client.post(f"/issues/{report.tracking_id}/status", json={"status": "under_review", "timestamp": stale})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_update"

    def test_status_update_for_unknown_issue(self, client):
        response = client.post("/issues/JS-20250101-00042/status", json={"status": "under_review"})
        assert response.status_code == 404

    def test_comment(self, client, report):
        response = client.post(f"/issues/{report.tracking_id}/comments", json={"text": "Still not fixed"})

        assert response.status_code == 200
        body = response.json()
        assert body["follow_ups"][0]["text"] == "Still not fixed"
        assert body["status"] == "submitted"

    def test_blank_comment_is_rejected(self, client, report):
        response = client.post(f"/issues/{report.tracking_id}/comments", json={"text": "   "})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_comment"


class TestHealthEndpoint:
    """GET /health"""

    def test_initializing_before_engine_load(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "initializing"
        assert response.json()["knowledge_base_loaded"] is False

    def test_root(self, client):
        response = client.get("/")
        assert response.json()["turn"] == "/assistant/turn"
