"""
Integration Tests for Equipment API endpoints.
"""

from io import BytesIO

import pytest
from httpx import AsyncClient
from openpyxl import Workbook, load_workbook

from itdesk.backend.services.equipment import TEMPLATE_HEADERS

API = "/api/v1/equipment"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _laptop(number: str = "INV-1", **overrides) -> dict:
    body = {"inventory_number": number, "name": "ThinkPad T14", "type": "Laptop"}
    body.update(overrides)
    return body


class TestCreateEquipment:

    @pytest.mark.asyncio
    async def test_create(self, admin_client: AsyncClient, api):
        response = await admin_client.post(API, json=_laptop(status="active"))

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["inventory_number"] == "INV-1"
        assert data["status"] == "active"
        assert data["assigned_to"] is None

    @pytest.mark.asyncio
    async def test_duplicate_number(self, admin_client: AsyncClient, api):
        await admin_client.post(API, json=_laptop())

        api.assert_error(await admin_client.post(API, json=_laptop()), 409, "RES_CONFLICT")

    @pytest.mark.asyncio
    async def test_invalid_status(self, admin_client: AsyncClient, api):
        api.assert_validation_error(await admin_client.post(API, json=_laptop(status="lost")), field="status")

    @pytest.mark.asyncio
    async def test_assignee_notified(self, admin_client: AsyncClient, seed_user, notifier, api):
        owner = await seed_user("555", first_name="Ivan", last_name="Petrov")

        response = await admin_client.post(API, json=_laptop(assigned_to_user_id=owner.id))

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["assigned_to"]["display_name"] == "Petrov Ivan"
        assert len(notifier.texts_for("555")) == 1


class TestReadAndUpdate:

    @pytest.mark.asyncio
    async def test_search_filters(self, admin_client: AsyncClient, seed_user, api):
        owner = await seed_user("555", first_name="Ivan", last_name="Petrov")
        await admin_client.post(API, json=_laptop("INV-100", assigned_to_user_id=owner.id))
        await admin_client.post(API, json=_laptop("INV-200"))

        by_number = api.assert_success(await admin_client.get(API, params={"inventory_number": "200"}))["data"]
        by_employee = api.assert_success(await admin_client.get(API, params={"employee_name": "petrov"}))["data"]

        assert [item["inventory_number"] for item in by_number] == ["INV-200"]
        assert [item["inventory_number"] for item in by_employee] == ["INV-100"]

    @pytest.mark.asyncio
    async def test_patch_and_history(self, admin_client: AsyncClient, seed_user, api):
        owner = await seed_user("555", first_name="Ivan", last_name="Petrov")
        created = (await admin_client.post(API, json=_laptop())).json()["data"]

        response = await admin_client.patch(
            f"{API}/{created['id']}",
            json={"status": "active", "assigned_to_user_id": owner.id},
        )
        api.assert_success(response)
        history = api.assert_success(await admin_client.get(f"{API}/{created['id']}/history"))["data"]

        assert [row["action"] for row in history] == ["Assigned", "Status changed", "Created"]
        assert history[0]["user"]["id"] == owner.id

    @pytest.mark.asyncio
    async def test_get_missing(self, admin_client: AsyncClient, api):
        api.assert_error(await admin_client.get(f"{API}/404"), 404, "RES_NOT_FOUND")


class TestImport:

    @pytest.mark.asyncio
    async def test_template_download(self, admin_client: AsyncClient):
        response = await admin_client.get(f"{API}/template")

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX
        assert "equipment_template.xlsx" in response.headers["content-disposition"]
        header = next(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert list(header) == TEMPLATE_HEADERS

    @pytest.mark.asyncio
    async def test_upload(self, admin_client: AsyncClient, api):
        workbook = Workbook()
        workbook.active.append(TEMPLATE_HEADERS)
        workbook.active.append(["INV-9", "Switch", "Network", "storage"])
        workbook.active.append(["only", "two"])
        buffer = BytesIO()
        workbook.save(buffer)

        response = await admin_client.post(
            f"{API}/import",
            files={"file": ("equipment.xlsx", buffer.getvalue(), XLSX)},
        )

        data = api.assert_success(response)["data"]
        assert data == {"created": 1, "skipped": 1, "errors": [], "warnings": []}

    @pytest.mark.asyncio
    async def test_wrong_extension(self, admin_client: AsyncClient, api):
        response = await admin_client.post(
            f"{API}/import",
            files={"file": ("equipment.csv", b"a,b,c", "text/csv")},
        )

        api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
