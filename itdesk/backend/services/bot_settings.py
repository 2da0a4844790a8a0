"""
Bot Settings Service.

Reads and merges the single bot configuration document. Callers use the
returned token_changed flag to decide whether the bot connection must be
restarted.
"""

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import ValidationError
from itdesk.backend.models.bot_settings import BOT_SETTINGS_KEY
from itdesk.backend.repositories.bot_settings import BotSettingsRepository
from itdesk.backend.schemas.bot_settings import BotSettingsData, BotSettingsUpdate
from itdesk.backend.services.base import BaseService


class BotSettingsService(BaseService):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = BotSettingsRepository(session)

    async def get(self) -> BotSettingsData:
        """Stored settings, or defaults when none were saved yet."""
        row = await self.repo.get_by_key(BOT_SETTINGS_KEY)
        if row is None:
            return BotSettingsData()
        return BotSettingsData.model_validate(row.value)

    async def update(self, data: BotSettingsUpdate) -> tuple[BotSettingsData, bool]:
        """
        Merge provided fields into the stored settings.

        Returns:
            Tuple of (new settings, whether the bot token changed)

        Raises:
            ValidationError: If the merged document is not valid settings
        """
        current = await self.get()
        changes = data.model_dump(exclude_unset=True)
        if "admin_usernames" in changes and changes["admin_usernames"] is not None:
            changes["admin_usernames"] = [
                name.strip().lstrip("@") for name in changes["admin_usernames"] if name.strip()
            ]
        try:
            merged = BotSettingsData.model_validate({**current.model_dump(), **changes})
        except SchemaValidationError as e:
            raise ValidationError(
                "Invalid bot settings",
                details={"errors": [error["msg"] for error in e.errors()]},
            ) from e

        await self._execute_db_operation(
            "update_bot_settings",
            self.repo.upsert(BOT_SETTINGS_KEY, merged.model_dump(mode="json")),
        )
        token_changed = "bot_token" in changes and merged.bot_token != current.bot_token
        self._log_operation(
            "Bot settings updated",
            fields=sorted(changes),
            token_changed=token_changed,
        )
        return merged, token_changed
