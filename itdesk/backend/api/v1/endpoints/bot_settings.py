"""
Bot Settings API Endpoints.

Changing the token restarts the bot connection once the change is
committed.
"""

from fastapi import APIRouter, BackgroundTasks, Request

from itdesk.backend.core.dependencies import AdminUser, DbSession
from itdesk.backend.core.logging import get_logger
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.bot_settings import BotSettingsResponse, BotSettingsUpdate
from itdesk.backend.services.bot_settings import BotSettingsService

router = APIRouter()
logger = get_logger(__name__)


def _bot_running(request: Request) -> bool:
    connection = getattr(request.app.state, "bot", None)
    return bool(connection is not None and connection.is_running)


@router.get(
    "",
    response_model=ApiResponse[BotSettingsResponse],
    summary="Get bot settings",
)
async def get_bot_settings(
    request: Request,
    db: DbSession,
    admin: AdminUser,
) -> ApiResponse[BotSettingsResponse]:
    settings = await BotSettingsService(db).get()
    return ApiResponse(data=BotSettingsResponse.from_data(settings, _bot_running(request)))


@router.patch(
    "",
    response_model=ApiResponse[BotSettingsResponse],
    summary="Update bot settings",
    description="Only provided fields change. A new token restarts the bot.",
)
async def update_bot_settings(
    data: BotSettingsUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: DbSession,
    admin: AdminUser,
) -> ApiResponse[BotSettingsResponse]:
    settings, token_changed = await BotSettingsService(db).update(data)

    connection = getattr(request.app.state, "bot", None)
    if token_changed and connection is not None:
        # Runs after the response is sent, once the settings row is committed.
        background_tasks.add_task(connection.restart, settings.bot_token)
        logger.info("Bot restart scheduled", extra={"admin_id": admin.id})

    return ApiResponse(data=BotSettingsResponse.from_data(settings, _bot_running(request)))
