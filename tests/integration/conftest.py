"""
Integration Test Fixtures.

Fixtures for integration tests - uses a real database and services.
These fixtures build on the root conftest.py database fixtures.

API tests seed data through their own committed sessions (seed_user,
seed_admin) rather than db_session, because the app under test opens
a separate session per request.
"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from itdesk.backend.core.database import get_db_session
from itdesk.backend.core.security import hash_password
from itdesk.backend.models import Role, User
from itdesk.backend.services.access import AccessControl, ROLE_DEFAULT_PERMISSIONS
from itdesk.backend.services.user import UserService

API = "/api/v1"


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def app(
    db_session_factory: async_sessionmaker[AsyncSession],
    notifier,
) -> Generator[FastAPI, None, None]:
    """
    Create the application bound to the test database.

    Each request gets its own session that commits on success and rolls
    back on error, like the real get_db_session. Notifications are
    captured by the notifier fixture. The lifespan does not run, so
    app.state.bot is unset unless a test provides one.
    """
    from itdesk.backend.main import create_app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.state.notifier = notifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client for the application.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


# =============================================================================
# Seeding Fixtures
# =============================================================================


@pytest.fixture
def seed_user(db_session_factory: async_sessionmaker[AsyncSession]):
    """
    Create a committed user with its role's default permissions.

    Pass password to make the user able to log into the web panel.

    Usage:
        user = await seed_user("1001", Role.MANAGER, username="maria", password="pw")
    """

    async def _seed_user(
        telegram_id: str,
        role: Role = Role.EMPLOYEE,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        password: str | None = None,
    ) -> User:
        async with db_session_factory() as session:
            async with session.begin():
                user = User(
                    telegram_id=telegram_id,
                    username=username,
                    first_name=first_name,
                    last_name=last_name,
                    role=role,
                    is_registered=True,
                    password_hash=hash_password(password) if password else None,
                )
                session.add(user)
                await session.flush()
                await AccessControl(session).set_permissions(user.id, ROLE_DEFAULT_PERMISSIONS[role])
        return user

    return _seed_user


@pytest.fixture
def seed_admin(db_session_factory: async_sessionmaker[AsyncSession]):
    """Create a committed web panel admin."""

    async def _seed_admin(username: str = "admin", password: str = "admin-pass") -> User:
        async with db_session_factory() as session:
            async with session.begin():
                return await UserService(session).create_admin(username, password)

    return _seed_admin


@pytest.fixture
def login(client: AsyncClient):
    """
    Log the client in; the session cookie is kept by the client.

    Usage:
        await login("admin", "admin-pass")
    """

    async def _login(username: str, password: str) -> dict[str, Any]:
        response = await client.post(f"{API}/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _login


@pytest.fixture
async def admin_client(client: AsyncClient, seed_admin, login) -> AsyncClient:
    """Client logged in as a panel admin."""
    await seed_admin()
    await login("admin", "admin-pass")
    return client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code
            expected_code: Expected error code (optional)

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
