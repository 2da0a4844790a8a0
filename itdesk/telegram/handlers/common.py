"""
Fallback Handlers.

Included last so that every specific command gets a chance first.
"""

from aiogram import F, Router
from aiogram.types import Message

router = Router(name="common")


@router.message(F.text.startswith("/"))
async def unknown_command(message: Message) -> None:
    await message.answer("Unknown command. Send /help to see what I can do.")
