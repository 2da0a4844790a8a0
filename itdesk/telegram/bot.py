"""
Bot Connection.

Owns the aiogram Bot and Dispatcher for one token. The application creates
a single BotConnection at startup and keeps it on app.state; there is no
module-level bot. Changing the token tears the old connection down before
the new one starts polling.
"""

import asyncio
import contextlib
from typing import Any

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import Message
from aiogram.utils.token import TokenValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from itdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


def create_bot(token: str) -> Bot:
    """
    Create an aiogram Bot for a token.

    Raises:
        TokenValidationError: If the token is malformed
    """
    return Bot(
        token=token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def create_dispatcher(
    session_factory: async_sessionmaker[AsyncSession],
    update_rate_limit_per_minute: int = 30,
) -> Dispatcher:
    """
    Create a Dispatcher with every router and middleware attached.

    Args:
        session_factory: Factory for the per-update database session
        update_rate_limit_per_minute: Per-user cap on handled messages

    Returns:
        Configured Dispatcher instance
    """
    from itdesk.telegram.handlers import get_all_routers
    from itdesk.telegram.middlewares import setup_middlewares

    dp = Dispatcher(storage=MemoryStorage())
    setup_middlewares(dp, session_factory, update_rate_limit_per_minute)

    for router in get_all_routers():
        dp.include_router(router)

    logger.debug("Telegram dispatcher created with routers and middlewares")
    return dp


class BotConnection:
    """
    Restartable polling connection.

    Usage:
        connection = BotConnection(session_factory)
        notifier = NotificationService(connection)
        connection.workflow_data["notifier"] = notifier
        await connection.start(token)
        ...
        await connection.restart(new_token)
        await connection.stop()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        update_rate_limit_per_minute: int = 30,
    ) -> None:
        self._session_factory = session_factory
        self._update_rate_limit = update_rate_limit_per_minute
        self._bot: Bot | None = None
        self._dispatcher: Dispatcher | None = None
        self._polling_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self.workflow_data: dict[str, Any] = {}

    @property
    def is_running(self) -> bool:
        return self._polling_task is not None and not self._polling_task.done()

    @property
    def bot(self) -> Bot | None:
        return self._bot

    async def start(self, token: str | None) -> bool:
        """
        Start polling with token. A running connection is stopped first.

        Returns:
            True if polling started, False when the token is empty or invalid
        """
        async with self._lock:
            await self._stop_locked()
            if not token:
                log_with_source(logger, "telegram", "info", "No bot token configured; bot not started")
                return False
            try:
                bot = create_bot(token)
            except TokenValidationError:
                log_with_source(logger, "telegram", "error", "Bot token is malformed; bot not started")
                return False

            if self._dispatcher is None:
                self._dispatcher = create_dispatcher(self._session_factory, self._update_rate_limit)
            dispatcher = self._dispatcher
            self._bot = bot
            self._polling_task = asyncio.create_task(
                dispatcher.start_polling(
                    bot,
                    handle_signals=False,
                    close_bot_session=False,
                    **self.workflow_data,
                ),
                name="telegram-polling",
            )
            self._polling_task.add_done_callback(self._on_polling_done)
            log_with_source(logger, "telegram", "info", "Bot polling started")
            return True

    async def stop(self) -> None:
        """Stop polling and close the bot session. Safe to call when stopped."""
        async with self._lock:
            await self._stop_locked()

    async def restart(self, token: str | None) -> bool:
        """Tear down the current connection and start a new one with token."""
        log_with_source(logger, "telegram", "info", "Restarting bot connection")
        return await self.start(token)

    async def wait(self) -> None:
        """Block until polling ends (used by the standalone polling command)."""
        if self._polling_task is not None:
            await self._polling_task

    async def send_message(self, chat_id: str | int, text: str) -> Message:
        """
        Send a plain-text message through the running bot.

        Raises:
            RuntimeError: If the bot is not running
        """
        if self._bot is None or not self.is_running:
            raise RuntimeError("Telegram bot is not running")
        return await self._bot.send_message(chat_id=chat_id, text=text, parse_mode=None)

    async def _stop_locked(self) -> None:
        task, bot = self._polling_task, self._bot
        self._polling_task = None
        self._bot = None

        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if bot is not None:
            await bot.session.close()
            log_with_source(logger, "telegram", "info", "Bot polling stopped")

    def _on_polling_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Bot polling ended with an error",
                error=str(error),
                error_type=type(error).__name__,
            )
