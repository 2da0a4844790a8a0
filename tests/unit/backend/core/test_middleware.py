"""
Unit Tests for Request Context Middleware.

Tests the RequestContextMiddleware functionality including:
- Request ID generation and propagation
- Frontend extraction from X-Frontend-ID header
- Response timing headers
- Structlog context binding
"""

import pytest
from unittest.mock import MagicMock, patch

from starlette.requests import Request
from starlette.responses import Response


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware."""

    @pytest.fixture
    def middleware(self):
        from itdesk.backend.core.middleware import RequestContextMiddleware

        return RequestContextMiddleware(MagicMock())

    @pytest.fixture
    def mock_request(self):
        request = MagicMock(spec=Request)
        request.headers = {}
        request.method = "GET"
        request.url = MagicMock()
        request.url.path = "/api/v1/equipment"
        request.client = MagicMock()
        request.client.host = "127.0.0.1"
        request.state = MagicMock()
        return request

    @pytest.mark.asyncio
    async def test_frontend_defaults_to_web(self, middleware, mock_request):
        """Should treat requests without X-Frontend-ID as the web panel."""
        async def call_next(request):
            assert request.state.frontend == "web"
            return Response(content="OK", status_code=200)

        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            await middleware.dispatch(mock_request, call_next)

    @pytest.mark.asyncio
    async def test_unrecognized_frontend_becomes_unknown(self, middleware, mock_request):
        mock_request.headers = {"X-Frontend-ID": "smart-fridge"}

        async def call_next(request):
            assert request.state.frontend == "unknown"
            return Response(content="OK", status_code=200)

        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            await middleware.dispatch(mock_request, call_next)

    @pytest.mark.asyncio
    async def test_frontend_case_insensitive(self, middleware, mock_request):
        mock_request.headers = {"X-Frontend-ID": "CLI"}

        async def call_next(request):
            assert request.state.frontend == "cli"
            return Response(content="OK", status_code=200)

        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            await middleware.dispatch(mock_request, call_next)

    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self, middleware, mock_request):
        """Should generate a UUID request ID and echo it in the response."""
        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            response = await middleware.dispatch(
                mock_request, lambda request: _async_response()
            )

        assert len(response.headers["X-Request-ID"]) == 36

    @pytest.mark.asyncio
    async def test_uses_provided_request_id(self, middleware, mock_request):
        mock_request.headers = {"X-Request-ID": "custom-request-id-123"}

        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            response = await middleware.dispatch(
                mock_request, lambda request: _async_response()
            )

        assert response.headers["X-Request-ID"] == "custom-request-id-123"
        assert mock_request.state.request_id == "custom-request-id-123"

    @pytest.mark.asyncio
    async def test_adds_response_time_header(self, middleware, mock_request):
        with patch("itdesk.backend.core.middleware.structlog.contextvars"):
            response = await middleware.dispatch(
                mock_request, lambda request: _async_response()
            )

        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_binds_context_to_structlog(self, middleware, mock_request):
        """Should bind request_id, frontend, method and path."""
        mock_request.headers = {"X-Request-ID": "req-1"}

        with patch("itdesk.backend.core.middleware.structlog.contextvars") as mock_ctx:
            await middleware.dispatch(mock_request, lambda request: _async_response())

        mock_ctx.bind_contextvars.assert_called_once_with(
            request_id="req-1",
            frontend="web",
            method="GET",
            path="/api/v1/equipment",
        )

    @pytest.mark.asyncio
    async def test_clears_context_on_exception(self, middleware, mock_request):
        """Should re-raise and still clear the structlog context."""
        async def call_next(request):
            raise ValueError("Test error")

        with patch("itdesk.backend.core.middleware.structlog.contextvars") as mock_ctx:
            with pytest.raises(ValueError):
                await middleware.dispatch(mock_request, call_next)

        assert mock_ctx.clear_contextvars.call_count == 2


async def _async_response() -> Response:
    return Response(content="OK", status_code=200)
