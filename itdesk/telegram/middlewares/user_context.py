"""
User Context Middleware.

Loads the stored User row for the Telegram account behind each update
and exposes it to handlers as ``db_user`` (None for unknown accounts).
Must run after DbSessionMiddleware, which provides the session.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from itdesk.backend.repositories.user import UserRepository


class UserContextMiddleware(BaseMiddleware):

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        telegram_user = None
        if isinstance(event, Update):
            if event.message is not None:
                telegram_user = event.message.from_user
            elif event.callback_query is not None:
                telegram_user = event.callback_query.from_user

        data["telegram_user"] = telegram_user
        data["db_user"] = None
        if telegram_user is not None:
            data["db_user"] = await UserRepository(data["session"]).get_by_telegram_id(str(telegram_user.id))

        return await handler(event, data)
