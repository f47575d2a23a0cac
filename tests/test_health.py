"""
HRMS - Health Check Tests
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["cache"] == "healthy"


@pytest.mark.asyncio
async def test_health_reports_cache_outage(client: AsyncClient, mock_cache):
    mock_cache.health_check.return_value = {"status": "unhealthy", "connected": False, "error": "refused"}

    response = await client.get("/health")
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == "unhealthy"
