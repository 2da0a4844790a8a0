"""
Database Session Middleware.

Opens one database session per Telegram update and makes the update a
single transaction: commit when the handler returns, rollback when it
raises. Application errors are turned into a chat reply after the
rollback, so handlers can let service exceptions propagate. Handlers that
report a change call commit_update before replying, so a failed commit
never follows a success message.
"""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from itdesk.backend.core.exceptions import ApplicationError, DatabaseError
from itdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DATABASE_ERROR_REPLY = "Something went wrong while saving your request. Please try again later."


async def commit_update(session: AsyncSession) -> None:
    """Commit the update's transaction, raising DatabaseError on failure."""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        raise DatabaseError("Database operation failed: commit") from e


class DbSessionMiddleware(BaseMiddleware):
    """
    Per-update unit of work.

    Usage:
        dp.update.outer_middleware(DbSessionMiddleware(session_factory))

        @router.message(Command("tasks"))
        async def cmd_tasks(message: Message, session: AsyncSession) -> None:
            ...
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        async with self.session_factory() as session:
            data["session"] = session
            try:
                result = await handler(event, data)
                await commit_update(session)
            except ApplicationError as e:
                await session.rollback()
                log_with_source(
                    logger,
                    "telegram",
                    "error" if isinstance(e, DatabaseError) else "warning",
                    "Update rejected",
                    code=e.code,
                    error=e.message,
                )
                reply = DATABASE_ERROR_REPLY if isinstance(e, DatabaseError) else e.message
                await self._reply(event, reply)
                return None
            except Exception:
                await session.rollback()
                raise
            return result

    @staticmethod
    async def _reply(event: TelegramObject, text: str) -> None:
        if isinstance(event, Update) and event.message is not None:
            await event.message.answer(text, parse_mode=None)
