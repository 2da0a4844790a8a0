"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from itdesk.backend.api.v1.endpoints import (
    auth,
    bot_settings,
    equipment,
    secure_notes,
    tasks,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(equipment.router, prefix="/equipment", tags=["equipment"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(secure_notes.router, prefix="/secure-notes", tags=["secure-notes"])
router.include_router(bot_settings.router, prefix="/bot-settings", tags=["bot-settings"])
