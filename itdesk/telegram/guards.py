"""
Handler guards.

Checks shared by the command handlers. Each guard answers the message
itself when it refuses, so handlers only need to return.
"""

from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.models.enums import Category
from itdesk.backend.models.user import User
from itdesk.backend.services.access import AccessControl

NOT_REGISTERED_REPLY = "You are not registered yet. Send /start to register."

SECTION_NAMES: dict[Category, str] = {
    Category.EQUIPMENT: "equipment",
    Category.PASSWORDS: "passwords",
    Category.TASKS: "tasks",
}


async def require_registered(message: Message, db_user: User | None) -> bool:
    if db_user is None or not db_user.is_registered:
        await message.answer(NOT_REGISTERED_REPLY)
        return False
    return True


async def require_access(
    message: Message,
    db_user: User | None,
    session: AsyncSession,
    category: Category,
) -> bool:
    """
    Refuse unless the user is registered and holds the category.

    Admins get no bypass here: the bot always consults the stored
    permission row.
    """
    if not await require_registered(message, db_user):
        return False
    if not await AccessControl(session).has_access(db_user, category):
        await message.answer(f"You don't have access to the {SECTION_NAMES[category]} section.")
        return False
    return True
