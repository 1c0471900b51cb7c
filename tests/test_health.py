"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"


async def test_ready_reports_memory_backend(client: AsyncClient) -> None:
    """GET /api/v1/health/ready returns 200 once the store is wired."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["store_backend"] == "memory"


async def test_root_returns_service_info(client: AsyncClient) -> None:
    """GET / names the service and points at the docs."""
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "trackdesk"
