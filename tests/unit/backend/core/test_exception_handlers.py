"""
Unit tests for exception handlers.

Status mapping and the JSON error envelope.
"""

import json
from unittest.mock import MagicMock

import pytest

from itdesk.backend.core.exception_handlers import (
    application_error_handler,
    status_for,
    unhandled_exception_handler,
)
from itdesk.backend.core.exceptions import (
    AlreadyRegisteredError,
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    CategoryAccessError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)


def _request(path: str = "/api/v1/equipment") -> MagicMock:
    request = MagicMock()
    request.url.path = path
    request.method = "GET"
    request.state.request_id = "req-1"
    return request


class TestStatusMapping:
    """Tests for status_for."""

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (NotFoundError(), 404),
            (ValidationError(), 400),
            (AuthenticationError(), 401),
            (AuthorizationError(), 403),
            (CategoryAccessError("equipment"), 403),
            (ConflictError(), 409),
            (AlreadyRegisteredError(), 409),
            (DatabaseError(), 503),
            (ApplicationError("boom"), 500),
        ],
    )
    def test_status_for(self, exc, status):
        assert status_for(exc) == status

    def test_subclass_codes_are_specific(self):
        assert CategoryAccessError("tasks").code == "AUTHZ_CATEGORY_DENIED"
        assert AlreadyRegisteredError().code == "USER_ALREADY_REGISTERED"


class TestApplicationErrorHandler:
    """Tests for application_error_handler."""

    @pytest.mark.asyncio
    async def test_envelope_for_not_found(self):
        response = await application_error_handler(_request(), NotFoundError("Equipment not found"))

        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "RES_NOT_FOUND"
        assert body["error"]["message"] == "Equipment not found"
        assert body["metadata"]["request_id"] == "req-1"

    @pytest.mark.asyncio
    async def test_validation_details_included(self):
        exc = ValidationError("Required fields missing", details={"missing_fields": ["title"]})
        response = await application_error_handler(_request(), exc)

        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["error"]["details"] == {"missing_fields": ["title"]}


class TestUnhandledExceptionHandler:
    """Tests for unhandled_exception_handler."""

    @pytest.mark.asyncio
    async def test_hides_internal_details_by_default(self):
        response = await unhandled_exception_handler(_request(), RuntimeError("secret internals"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["error"]["code"] == "SYS_INTERNAL_ERROR"
        assert "secret internals" not in response.body.decode()
