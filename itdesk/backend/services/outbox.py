"""
Post-commit notification outbox.

Services queue chat notifications on the session instead of sending them
directly. Queued messages are handed to their notifier only after the
transaction commits; a rollback discards them, so no one is told about a
change that never happened.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from itdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

PENDING_KEY = "pending_notifications"


class Notifier(Protocol):
    """Anything that can deliver a chat message without blocking or raising."""

    def notify(self, chat_id: str, text: str) -> None: ...


@dataclass(frozen=True)
class PendingNotification:
    notifier: Notifier
    chat_id: str
    text: str


def queue_notification(session: AsyncSession | Session, notifier: Notifier, chat_id: str, text: str) -> None:
    """Hold a notification until the session's transaction commits."""
    session.info.setdefault(PENDING_KEY, []).append(PendingNotification(notifier, chat_id, text))


@event.listens_for(Session, "after_commit")
def _release_after_commit(session: Session) -> None:
    for item in session.info.pop(PENDING_KEY, []):
        try:
            item.notifier.notify(item.chat_id, item.text)
        except Exception:
            logger.exception("Notifier raised while releasing notification", extra={"chat_id": item.chat_id})


@event.listens_for(Session, "after_rollback")
def _discard_after_rollback(session: Session) -> None:
    dropped = session.info.pop(PENDING_KEY, [])
    if dropped:
        logger.info("Discarded notifications after rollback", extra={"count": len(dropped)})
