"""
Keyboard Builders.

Reply keyboards for the Telegram bot.
"""

from itdesk.telegram.keyboards.common import (
    CATEGORY_BUTTONS,
    ROLE_BUTTONS,
    ROLE_LABELS,
    get_main_menu_keyboard,
    get_role_keyboard,
)

__all__ = [
    "CATEGORY_BUTTONS",
    "ROLE_BUTTONS",
    "ROLE_LABELS",
    "get_main_menu_keyboard",
    "get_role_keyboard",
]
