"""
Logging Middleware.

Logs every incoming Telegram update with structured context,
source="telegram".
"""

import time
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from itdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class LoggingMiddleware(BaseMiddleware):
    """
    Middleware for logging all Telegram updates.

    Logs update type and id, user and chat ids, the command name (never
    command arguments, which may carry secrets), processing time and errors.

    Usage:
        dp.update.outer_middleware(LoggingMiddleware())
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        start_time = time.perf_counter()
        context = self._extract_context(event)

        log_with_source(logger, "telegram", "info", "Telegram update received", **context)

        try:
            result = await handler(event, data)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            log_with_source(
                logger,
                "telegram",
                "error",
                "Telegram update processing error",
                error=str(e),
                error_type=type(e).__name__,
                elapsed_ms=round(elapsed_ms, 2),
                **context,
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log_with_source(
            logger,
            "telegram",
            "debug",
            "Telegram update processed",
            elapsed_ms=round(elapsed_ms, 2),
            **context,
        )
        return result

    def _extract_context(self, event: TelegramObject) -> dict[str, Any]:
        """
        Extract logging context from the event.

        Args:
            event: Telegram event

        Returns:
            Context dictionary for logging
        """
        context: dict[str, Any] = {}

        if not isinstance(event, Update):
            return context

        context["update_id"] = event.update_id
        context["update_type"] = event.event_type

        if event.message:
            msg = event.message
            context["chat_id"] = msg.chat.id
            context["chat_type"] = msg.chat.type
            if msg.from_user:
                context["user_id"] = msg.from_user.id
                context["username"] = msg.from_user.username
            if msg.text and msg.text.startswith("/"):
                context["command"] = msg.text.split()[0]

        elif event.callback_query:
            cb = event.callback_query
            if cb.from_user:
                context["user_id"] = cb.from_user.id
                context["username"] = cb.from_user.username
            if cb.message:
                context["chat_id"] = cb.message.chat.id
            context["callback_data"] = cb.data

        return context
