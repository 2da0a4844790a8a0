"""
Keyboard Builders.

Role selection keyboard for registration and the permission-aware main menu.
"""

from aiogram.types import ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

from itdesk.backend.models.enums import Category, Role

ROLE_BUTTONS: dict[str, Role] = {
    "SysAdmin": Role.SYSADMIN,
    "Accountant": Role.ACCOUNTANT,
    "Manager": Role.MANAGER,
    "Employee": Role.EMPLOYEE,
}
ROLE_LABELS: dict[Role, str] = {role: label for label, role in ROLE_BUTTONS.items()}
ROLE_LABELS[Role.ADMIN] = "Administrator"

EQUIPMENT_BUTTON = "Equipment"
TASKS_BUTTON = "Tasks"
PASSWORDS_BUTTON = "Passwords"
HELP_BUTTON = "Help"

CATEGORY_BUTTONS: dict[Category, str] = {
    Category.EQUIPMENT: EQUIPMENT_BUTTON,
    Category.TASKS: TASKS_BUTTON,
    Category.PASSWORDS: PASSWORDS_BUTTON,
}


def get_role_keyboard() -> ReplyKeyboardMarkup:
    """One button per self-selectable role."""
    builder = ReplyKeyboardBuilder()
    for label in ROLE_BUTTONS:
        builder.button(text=label)
    builder.adjust(2)
    return builder.as_markup(
        resize_keyboard=True,
        one_time_keyboard=True,
        input_field_placeholder="Choose your role...",
    )


def get_main_menu_keyboard(permissions: dict[Category, bool]) -> ReplyKeyboardMarkup:
    """
    Build the main menu from the user's permission map.

    Args:
        permissions: Category flags; only granted sections get a button

    Returns:
        ReplyKeyboardMarkup with one button per granted section plus Help
    """
    builder = ReplyKeyboardBuilder()
    for category, label in CATEGORY_BUTTONS.items():
        if permissions.get(category):
            builder.button(text=label)
    builder.button(text=HELP_BUTTON)
    builder.adjust(2)
    return builder.as_markup(
        resize_keyboard=True,
        input_field_placeholder="Choose a section...",
    )
