"""
Telegram Bot Handlers.

Command and message handlers organized by section:
- registration.py: /start, role selection, /logout, /exit, /help
- inventory.py: equipment lookup
- tasks.py: task listing and creation
- passwords.py: secure notes
- common.py: unknown-command fallback (must stay last)
"""

from aiogram import Router

from itdesk.telegram.handlers.common import router as common_router
from itdesk.telegram.handlers.inventory import router as inventory_router
from itdesk.telegram.handlers.passwords import router as passwords_router
from itdesk.telegram.handlers.registration import router as registration_router
from itdesk.telegram.handlers.tasks import router as tasks_router

__all__ = [
    "get_all_routers",
]


def get_all_routers() -> list[Router]:
    """
    Get all routers to include in the dispatcher, fallback last.

    Routers are module-level singletons and can be attached to only one
    Dispatcher, so BotConnection builds its Dispatcher once and reuses it
    across token changes.
    """
    return [
        registration_router,
        inventory_router,
        tasks_router,
        passwords_router,
        common_router,
    ]
