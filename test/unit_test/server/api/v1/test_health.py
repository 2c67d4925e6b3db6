import pytest
from httpx import AsyncClient

from edustack.server.core.constant import API_VERSION, SCHEMA_VERSION

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("http://localhost/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == API_VERSION
    assert "timestamp" in data


async def test_version(client: AsyncClient):
    response = await client.get("http://localhost/version")
    assert response.status_code == 200
    assert response.json() == {"version": API_VERSION, "schemaVersion": SCHEMA_VERSION}


async def test_process_time_header(client: AsyncClient):
    response = await client.get("/health")
    assert float(response.headers["X-Process-Time"]) >= 0


async def test_unknown_route(client: AsyncClient):
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Route /api/v1/nope not found",
        "error": "ROUTE_NOT_FOUND",
    }
