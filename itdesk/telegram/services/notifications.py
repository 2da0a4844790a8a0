"""
Notification Service.

Best-effort delivery of chat messages over the owned bot connection.
notify() returns immediately; delivery runs as a background task and
failures are logged, never raised. There is no retry and no persistent
queue.

Usage:
    notifier = NotificationService(connection)
    notifier.notify("123456789", "You have been assigned task #4")
"""

import asyncio
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from itdesk.backend.core.logging import get_logger, log_with_source
from itdesk.backend.core.utils import utc_now

if TYPE_CHECKING:
    from itdesk.telegram.bot import BotConnection

logger = get_logger(__name__)

RATE_LIMIT_WINDOW = 60  # seconds


@dataclass
class NotificationResult:
    """Result of a notification send attempt."""

    success: bool
    chat_id: str
    message_id: int | None = None
    error: str | None = None
    rate_limited: bool = False
    timestamp: datetime = field(default_factory=utc_now)


class NotificationService:
    """
    Fire-and-forget sender with a per-chat sliding-window rate limit.

    Background tasks are referenced until they finish so they are not
    garbage-collected mid-flight; drain() awaits whatever is outstanding.
    """

    def __init__(self, connection: "BotConnection", rate_limit_per_minute: int = 20) -> None:
        self._connection = connection
        self._rate_limit = rate_limit_per_minute
        self._sent_at: dict[str, list[float]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def _check_rate_limit(self, chat_id: str) -> bool:
        """Record an attempt for chat_id and report whether it is within the limit."""
        now = time.monotonic()
        window_start = now - RATE_LIMIT_WINDOW
        recent = [ts for ts in self._sent_at[chat_id] if ts > window_start]
        if len(recent) >= self._rate_limit:
            self._sent_at[chat_id] = recent
            return False
        recent.append(now)
        self._sent_at[chat_id] = recent
        return True

    def notify(self, chat_id: str, text: str) -> None:
        """Schedule delivery of text to chat_id and return without waiting."""
        chat_id = str(chat_id)
        if not self._check_rate_limit(chat_id):
            log_with_source(logger, "notifications", "warning", "Notification rate limited", chat_id=chat_id)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log_with_source(
                logger, "notifications", "warning", "No event loop; notification dropped", chat_id=chat_id
            )
            return
        task = loop.create_task(self.send(chat_id, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def send(self, chat_id: str, text: str) -> NotificationResult:
        """
        Deliver one message now.

        Returns:
            NotificationResult; failures are reported here and logged
        """
        if not self._connection.is_running:
            log_with_source(
                logger, "notifications", "warning", "Bot not running; notification dropped", chat_id=chat_id
            )
            return NotificationResult(success=False, chat_id=chat_id, error="Bot not running")

        try:
            message = await self._connection.send_message(chat_id, text)
        except Exception as e:
            log_with_source(
                logger,
                "notifications",
                "error",
                "Failed to send notification",
                chat_id=chat_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return NotificationResult(success=False, chat_id=chat_id, error=str(e))

        log_with_source(
            logger,
            "notifications",
            "info",
            "Notification sent",
            chat_id=chat_id,
            message_id=message.message_id,
        )
        return NotificationResult(success=True, chat_id=chat_id, message_id=message.message_id)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
