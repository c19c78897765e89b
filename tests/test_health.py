"""Tests for health endpoints."""

from httpx import AsyncClient

from subcompliance.main import app


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ready_reports_catalog(client: AsyncClient) -> None:
    """GET /api/v1/health/ready reports the loaded catalog size."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "document_types": 14}


async def test_ready_without_context(client: AsyncClient) -> None:
    """Readiness fails with CONFIGURATION_ERROR until the context is loaded."""
    app.state.compliance_context = None
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 500
    assert response.json()["error"] == "CONFIGURATION_ERROR"
