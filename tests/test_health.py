"""Tests for the /health endpoint."""

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient) -> None:
    """GET /health should return 200 with status 'ok'."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_health_reports_backends(client: TestClient) -> None:
    """Persistence backend and AI provider are part of the health payload."""
    data = client.get("/health").json()
    assert data["persistence"] == "sql"
    assert data["ai_provider"] == "mock"
