"""
Integration Tests for web panel authentication and access rules.
"""

import pytest
from httpx import AsyncClient

from itdesk.backend.models import Role

API = "/api/v1"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_sets_http_only_cookie(self, client: AsyncClient, seed_admin, api):
        await seed_admin()

        response = await client.post(f"{API}/auth/login", json={"username": "admin", "password": "admin-pass"})

        data = api.assert_success(response)["data"]
        assert data["username"] == "admin"
        assert data["permissions"] == {"equipment": True, "passwords": True, "tasks": True}
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("itdesk_session=")
        assert "HttpOnly" in set_cookie

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, seed_admin, api):
        await seed_admin()

        response = await client.post(f"{API}/auth/login", json={"username": "admin", "password": "nope"})

        api.assert_error(response, 401, "AUTH_UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_me_requires_cookie(self, client: AsyncClient, api):
        api.assert_error(await client.get(f"{API}/auth/me"), 401, "AUTH_UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_garbage_cookie_rejected(self, client: AsyncClient, api):
        client.cookies.set("itdesk_session", "not-a-token")

        api.assert_error(await client.get(f"{API}/auth/me"), 401)

    @pytest.mark.asyncio
    async def test_me_and_logout(self, admin_client: AsyncClient, api):
        me = api.assert_success(await admin_client.get(f"{API}/auth/me"))["data"]
        assert me["is_admin"] is True

        api.assert_success(await admin_client.post(f"{API}/auth/logout"))

        api.assert_error(await admin_client.get(f"{API}/auth/me"), 401)


class TestCategoryAccess:
    """Non-admin panel users are limited to their granted categories."""

    @pytest.mark.asyncio
    async def test_missing_category_is_forbidden(self, client: AsyncClient, seed_user, login, api):
        await seed_user("10", Role.EMPLOYEE, username="emp", password="emp-pass")
        await login("emp", "emp-pass")

        api.assert_error(await client.get(f"{API}/equipment"), 403, "AUTHZ_CATEGORY_DENIED")
        api.assert_error(await client.get(f"{API}/secure-notes"), 403, "AUTHZ_CATEGORY_DENIED")
        api.assert_success(await client.get(f"{API}/tasks"))

    @pytest.mark.asyncio
    async def test_user_admin_is_admin_only(self, client: AsyncClient, seed_user, login, api):
        await seed_user("10", Role.SYSADMIN, username="sys", password="sys-pass")
        await login("sys", "sys-pass")

        api.assert_error(await client.get(f"{API}/users"), 403, "AUTHZ_FORBIDDEN")
        api.assert_error(await client.get(f"{API}/bot-settings"), 403, "AUTHZ_FORBIDDEN")

    @pytest.mark.asyncio
    async def test_admin_bypasses_category_checks(self, admin_client: AsyncClient, api):
        for path in ("equipment", "tasks", "secure-notes", "users"):
            api.assert_success(await admin_client.get(f"{API}/{path}"))
