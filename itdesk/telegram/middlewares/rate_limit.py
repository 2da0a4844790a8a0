"""
Rate Limiting Middleware.

Limits how many messages one Telegram user can send within a sliding
window. State is in memory, per process.
"""

import time
from collections import defaultdict
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import Message, TelegramObject

from itdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class RateLimitMiddleware(BaseMiddleware):
    """
    Sliding-window rate limiter for messages.

    Usage:
        dp.message.middleware(RateLimitMiddleware(rate_limit=30))
    """

    def __init__(self, rate_limit: int, rate_window: int = 60) -> None:
        """
        Args:
            rate_limit: Maximum messages per window
            rate_window: Window length in seconds
        """
        self.rate_limit = rate_limit
        self.rate_window = rate_window
        self._requests: dict[int, list[float]] = defaultdict(list)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        if not isinstance(event, Message) or event.from_user is None:
            return await handler(event, data)

        user_id = event.from_user.id
        now = time.monotonic()
        is_limited, remaining = self._check_rate_limit(user_id, now)

        if is_limited:
            log_with_source(
                logger,
                "telegram",
                "warning",
                "Rate limit exceeded",
                user_id=user_id,
                rate_limit=self.rate_limit,
                rate_window=self.rate_window,
            )
            await event.answer(f"Too many requests. Please wait {remaining} seconds.")
            return None

        self._requests[user_id].append(now)
        return await handler(event, data)

    def _check_rate_limit(self, user_id: int, now: float) -> tuple[bool, int]:
        """
        Check if user has exceeded the rate limit.

        Returns:
            Tuple of (is_limited, seconds_until_a_slot_frees)
        """
        window_start = now - self.rate_window
        recent = [ts for ts in self._requests[user_id] if ts > window_start]
        self._requests[user_id] = recent

        if len(recent) >= self.rate_limit:
            remaining = int(self.rate_window - (now - min(recent))) + 1
            return True, remaining
        return False, 0
