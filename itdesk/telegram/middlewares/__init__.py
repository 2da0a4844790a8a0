"""
Telegram Bot Middlewares.

aiogram v3 middleware scopes:
- Outer middleware: Runs on every update
- Inner middleware: Runs after filters pass
"""

from typing import TYPE_CHECKING

from itdesk.telegram.middlewares.db_session import DbSessionMiddleware
from itdesk.telegram.middlewares.logging import LoggingMiddleware
from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware
from itdesk.telegram.middlewares.user_context import UserContextMiddleware

if TYPE_CHECKING:
    from aiogram import Dispatcher
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

__all__ = [
    "DbSessionMiddleware",
    "LoggingMiddleware",
    "RateLimitMiddleware",
    "UserContextMiddleware",
    "setup_middlewares",
]


def setup_middlewares(
    dp: "Dispatcher",
    session_factory: "async_sessionmaker[AsyncSession]",
    rate_limit_per_minute: int = 30,
) -> None:
    """
    Setup all middlewares on the dispatcher.

    Middleware order matters:
    1. LoggingMiddleware (outer) - Log all updates
    2. DbSessionMiddleware (outer) - One transaction per update
    3. UserContextMiddleware (outer) - Load the stored user
    4. RateLimitMiddleware (inner) - Rate limit messages per user

    Args:
        dp: aiogram Dispatcher instance
        session_factory: Factory for per-update sessions
        rate_limit_per_minute: Per-user message cap
    """
    dp.update.outer_middleware(LoggingMiddleware())
    dp.update.outer_middleware(DbSessionMiddleware(session_factory))
    dp.update.outer_middleware(UserContextMiddleware())

    dp.message.middleware(RateLimitMiddleware(rate_limit=rate_limit_per_minute))
