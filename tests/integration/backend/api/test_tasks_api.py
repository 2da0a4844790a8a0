"""
Integration Tests for Task API endpoints.
"""

import pytest
from httpx import AsyncClient

from itdesk.backend.models import Role

API = "/api/v1/tasks"


class TestTaskLifecycle:

    @pytest.mark.asyncio
    async def test_create_defaults_to_new(self, admin_client: AsyncClient, api):
        response = await admin_client.post(API, json={"title": "Replace toner"})

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["status"] == "new"
        assert data["assigned_to"] is None
        assert data["created_by"]["username"] == "admin"

    @pytest.mark.asyncio
    async def test_create_with_assignee_notifies(self, admin_client: AsyncClient, seed_user, notifier, api):
        worker = await seed_user("777", Role.SYSADMIN)

        response = await admin_client.post(
            API,
            json={"title": "Replace toner", "description": "Second floor", "assigned_to_user_id": worker.id},
        )

        task_id = api.assert_success(response, expected_status=201)["data"]["id"]
        assert notifier.texts_for("777") == [f"You have been assigned task #{task_id}: Replace toner\n\nSecond floor"]

    @pytest.mark.asyncio
    async def test_unknown_assignee(self, admin_client: AsyncClient, notifier, api):
        response = await admin_client.post(API, json={"title": "Orphan", "assigned_to_user_id": 404})

        api.assert_error(response, 404, "RES_NOT_FOUND")
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_status_change_and_filter(self, admin_client: AsyncClient, api):
        first = (await admin_client.post(API, json={"title": "Fix VPN"})).json()["data"]
        await admin_client.post(API, json={"title": "Order cables"})

        updated = api.assert_success(await admin_client.patch(f"{API}/{first['id']}", json={"status": "completed"}))
        completed = api.assert_success(await admin_client.get(API, params={"status": "completed"}))["data"]
        all_tasks = api.assert_success(await admin_client.get(API))["data"]

        assert updated["data"]["status"] == "completed"
        assert [task["id"] for task in completed] == [first["id"]]
        assert len(all_tasks) == 2

    @pytest.mark.asyncio
    async def test_assign(self, admin_client: AsyncClient, seed_user, notifier, api):
        worker = await seed_user("777", Role.SYSADMIN, first_name="Oleg", last_name="Smirnov")
        task = (await admin_client.post(API, json={"title": "Fix VPN"})).json()["data"]

        data = api.assert_success(await admin_client.patch(f"{API}/{task['id']}/assign", json={"user_id": worker.id}))

        assert data["data"]["assigned_to"]["display_name"] == "Smirnov Oleg"
        assert len(notifier.texts_for("777")) == 1

    @pytest.mark.asyncio
    async def test_invalid_status(self, admin_client: AsyncClient, api):
        task = (await admin_client.post(API, json={"title": "Fix VPN"})).json()["data"]

        api.assert_validation_error(await admin_client.patch(f"{API}/{task['id']}", json={"status": "done"}))

    @pytest.mark.asyncio
    async def test_missing_task(self, admin_client: AsyncClient, api):
        api.assert_error(await admin_client.get(f"{API}/404"), 404, "RES_NOT_FOUND")


class TestTaskComments:

    @pytest.mark.asyncio
    async def test_comment_round(self, admin_client: AsyncClient, seed_user, notifier, api):
        worker = await seed_user("777", Role.SYSADMIN)
        task = (
            await admin_client.post(API, json={"title": "Fix VPN", "assigned_to_user_id": worker.id})
        ).json()["data"]
        notifier.sent.clear()

        created = await admin_client.post(f"{API}/{task['id']}/comments", json={"comment": "Any update?"})
        comments = api.assert_success(await admin_client.get(f"{API}/{task['id']}/comments"))["data"]

        assert api.assert_success(created, expected_status=201)["data"]["comment"] == "Any update?"
        assert [c["comment"] for c in comments] == ["Any update?"]
        assert len(notifier.texts_for("777")) == 1

    @pytest.mark.asyncio
    async def test_empty_comment_rejected(self, admin_client: AsyncClient, api):
        task = (await admin_client.post(API, json={"title": "Fix VPN"})).json()["data"]

        api.assert_validation_error(
            await admin_client.post(f"{API}/{task['id']}/comments", json={"comment": ""}),
            field="comment",
        )
