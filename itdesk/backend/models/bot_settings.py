"""
Bot Settings Model.

Key/value rows holding JSON documents. The bot configuration lives
under the single key "settings".
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from itdesk.backend.core.utils import utc_now
from itdesk.backend.models.base import Base, IntIdMixin

BOT_SETTINGS_KEY = "settings"


class BotSettings(IntIdMixin, Base):
    __tablename__ = "bot_settings"

    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    value: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<BotSettings(key={self.key!r})>"
