"""
Integration tests for health check endpoints.
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock


@pytest.mark.integration
@pytest.mark.asyncio
class TestHealthCheck:
    """Test health check endpoints."""

    async def test_health_endpoint_returns_200(self, http_client):
        """Test that health endpoint returns success status."""
        response = await http_client.get("/health")

        assert response.status_code == 200

    async def test_health_endpoint_returns_valid_json(self, http_client):
        """Test that health endpoint returns valid JSON structure."""
        response = await http_client.get("/health")

        data = response.json()
        assert data["service"] == "monitoring"
        assert data["status"] == "healthy"
        assert data["prometheus"] == "healthy"
        assert data["kubernetes"] == "healthy"
        assert data["prometheus_url"] == "http://prometheus:9090"
        # Should be parseable as datetime
        datetime.fromisoformat(data["timestamp"])

    async def test_health_degraded_when_store_unhealthy(self, http_client, state_store):
        """Test that an unreachable state store degrades the service."""
        state_store.health_check = AsyncMock(return_value=False)

        response = await http_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["kubernetes"] == "unhealthy"
        assert data["prometheus"] == "healthy"

    async def test_health_check_exception_returns_503(self, http_client, state_store):
        """Test that a failing health check returns 503."""
        state_store.health_check = AsyncMock(side_effect=RuntimeError("health check crashed"))

        response = await http_client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["error"] == "health check crashed"

    async def test_root_lists_endpoints(self, http_client):
        """Test that the root endpoint describes the service."""
        response = await http_client.get("/")

        assert response.status_code == 200
        endpoints = response.json()["endpoints"]
        assert endpoints["monitoring"] == "/api/v1/monitoring"
        assert endpoints["graphql"] == "/api/v1/graphql"
        assert endpoints["health"] == "/health"
