"""
Inventory Handlers.

Equipment lookup by inventory number or by employee name.
"""

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.models.enums import Category
from itdesk.backend.models.user import User
from itdesk.backend.services.equipment import EquipmentService
from itdesk.telegram.formatting import equipment_table
from itdesk.telegram.guards import require_access
from itdesk.telegram.keyboards.common import EQUIPMENT_BUTTON

router = Router(name="inventory")

INVENTORY_HELP = (
    "Equipment search:\n"
    "/inventory_number &lt;number&gt; - find by inventory number\n"
    "/inventory_user &lt;name&gt; - find by employee first or last name"
)


@router.message(Command("inventory"))
@router.message(F.text == EQUIPMENT_BUTTON)
async def cmd_inventory(message: Message, session: AsyncSession, db_user: User | None) -> None:
    if not await require_access(message, db_user, session, Category.EQUIPMENT):
        return
    await message.answer(INVENTORY_HELP)


@router.message(Command("inventory_number"))
async def cmd_inventory_number(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    db_user: User | None,
) -> None:
    if not await require_access(message, db_user, session, Category.EQUIPMENT):
        return
    query = (command.args or "").strip()
    if not query:
        await message.answer("Usage: /inventory_number &lt;number&gt;")
        return
    items = await EquipmentService(session).search(inventory_number=query)
    await _answer_items(message, items)


@router.message(Command("inventory_user"))
async def cmd_inventory_user(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    db_user: User | None,
) -> None:
    if not await require_access(message, db_user, session, Category.EQUIPMENT):
        return
    query = (command.args or "").strip()
    if not query:
        await message.answer("Usage: /inventory_user &lt;name&gt;")
        return
    items = await EquipmentService(session).search(employee_name=query)
    await _answer_items(message, items)


async def _answer_items(message: Message, items: list) -> None:
    if not items:
        await message.answer("No equipment found.")
        return
    await message.answer(equipment_table(items))
