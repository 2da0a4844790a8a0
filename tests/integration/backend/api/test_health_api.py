"""
Integration Tests for Health Endpoints.
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient


class TestLiveness:

    @pytest.mark.asyncio
    async def test_liveness_always_healthy(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadiness:

    @pytest.mark.asyncio
    async def test_ready_when_database_reachable(self, client: AsyncClient, db_session_factory):
        """Should report the database healthy and the bot unconfigured."""
        with patch("itdesk.backend.api.health.get_session_factory", return_value=db_session_factory):
            response = await client.get("/api/v1/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["telegram"] == {"status": "not_configured"}

    @pytest.mark.asyncio
    async def test_unhealthy_database_returns_503(self, client: AsyncClient):
        unhealthy = {"status": "unhealthy", "error": "connection refused"}
        with patch("itdesk.backend.api.health.check_database", return_value=unhealthy):
            response = await client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["detail"]["checks"]["database"] == unhealthy
