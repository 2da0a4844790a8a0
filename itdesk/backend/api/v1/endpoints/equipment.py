"""
Equipment API Endpoints.

Inventory records, their history, and spreadsheet import.
"""

from fastapi import APIRouter, File, Query, Response, UploadFile

from itdesk.backend.core.config import get_app_config
from itdesk.backend.core.dependencies import DbSession, EquipmentUser, NotifierDep, RequestId
from itdesk.backend.core.exceptions import ValidationError
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.equipment import (
    EquipmentCreate,
    EquipmentHistoryResponse,
    EquipmentResponse,
    EquipmentUpdate,
    ImportResult,
)
from itdesk.backend.services.equipment import EquipmentService

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_IMPORT_BYTES = 5 * 1024 * 1024


@router.get(
    "",
    response_model=ApiResponse[list[EquipmentResponse]],
    summary="Search equipment",
    description="Filters are case-insensitive substrings combined with AND.",
)
async def list_equipment(
    db: DbSession,
    user: EquipmentUser,
    request_id: RequestId,
    inventory_number: str | None = Query(default=None, max_length=64),
    employee_name: str | None = Query(default=None, max_length=128, description="Assignee first or last name"),
) -> ApiResponse[list[EquipmentResponse]]:
    items = await EquipmentService(db).search(inventory_number=inventory_number, employee_name=employee_name)
    return ApiResponse(data=[EquipmentResponse.model_validate(item) for item in items])


@router.post(
    "",
    response_model=ApiResponse[EquipmentResponse],
    status_code=201,
    summary="Create equipment",
)
async def create_equipment(
    data: EquipmentCreate,
    db: DbSession,
    user: EquipmentUser,
    notifier: NotifierDep,
) -> ApiResponse[EquipmentResponse]:
    equipment = await EquipmentService(db, notifier).create(data, actor_id=user.id)
    return ApiResponse(data=EquipmentResponse.model_validate(equipment))


@router.get(
    "/template",
    summary="Download import template",
    response_class=Response,
)
async def download_template(db: DbSession, user: EquipmentUser) -> Response:
    content = EquipmentService(db).build_import_template()
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="equipment_template.xlsx"'},
    )


@router.post(
    "/import",
    response_model=ApiResponse[ImportResult],
    summary="Import equipment from xlsx",
    description="Creates one record per valid row and reports skipped rows, errors and warnings.",
)
async def import_equipment(
    db: DbSession,
    user: EquipmentUser,
    notifier: NotifierDep,
    file: UploadFile = File(...),
) -> ApiResponse[ImportResult]:
    if not get_app_config().features.equipment_import_enabled:
        raise ValidationError("Equipment import is disabled")
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise ValidationError("Only .xlsx files are accepted", details={"filename": file.filename})

    content = await file.read()
    if len(content) > MAX_IMPORT_BYTES:
        raise ValidationError("File is too large", details={"max_bytes": MAX_IMPORT_BYTES})

    result = await EquipmentService(db, notifier).import_workbook(content, actor_id=user.id)
    return ApiResponse(data=result)


@router.get(
    "/{equipment_id}",
    response_model=ApiResponse[EquipmentResponse],
    summary="Get equipment",
)
async def get_equipment(equipment_id: int, db: DbSession, user: EquipmentUser) -> ApiResponse[EquipmentResponse]:
    equipment = await EquipmentService(db).get(equipment_id)
    return ApiResponse(data=EquipmentResponse.model_validate(equipment))


@router.patch(
    "/{equipment_id}",
    response_model=ApiResponse[EquipmentResponse],
    summary="Update equipment",
    description="Only provided fields are updated. Status and assignee changes are recorded in the history.",
)
async def update_equipment(
    equipment_id: int,
    data: EquipmentUpdate,
    db: DbSession,
    user: EquipmentUser,
    notifier: NotifierDep,
) -> ApiResponse[EquipmentResponse]:
    equipment = await EquipmentService(db, notifier).update(equipment_id, data, actor_id=user.id)
    return ApiResponse(data=EquipmentResponse.model_validate(equipment))


@router.get(
    "/{equipment_id}/history",
    response_model=ApiResponse[list[EquipmentHistoryResponse]],
    summary="Equipment history",
    description="History rows for one item, newest first.",
)
async def equipment_history(
    equipment_id: int,
    db: DbSession,
    user: EquipmentUser,
) -> ApiResponse[list[EquipmentHistoryResponse]]:
    rows = await EquipmentService(db).history(equipment_id)
    return ApiResponse(data=[EquipmentHistoryResponse.model_validate(row) for row in rows])
