"""
Bot Settings Repository.
"""

from typing import Any

from sqlalchemy import select

from itdesk.backend.models.bot_settings import BotSettings
from itdesk.backend.repositories.base import BaseRepository


class BotSettingsRepository(BaseRepository[BotSettings]):
    model = BotSettings

    async def get_by_key(self, key: str) -> BotSettings | None:
        result = await self.session.execute(select(BotSettings).where(BotSettings.key == key))
        return result.scalar_one_or_none()

    async def upsert(self, key: str, value: dict[str, Any]) -> BotSettings:
        """Store the JSON document under key, replacing any previous value."""
        existing = await self.get_by_key(key)
        if existing is None:
            return await self.create(key=key, value=value)
        existing.value = value
        await self.session.flush()
        return await self._reload(existing.id)
