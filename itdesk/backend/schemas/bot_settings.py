"""
Bot Settings Schemas.
"""

from pydantic import BaseModel, Field, field_validator

DEFAULT_WELCOME_MESSAGE = (
    "Welcome to the IT desk bot. Choose your role to finish registration."
)


class BotSettingsData(BaseModel):
    """The JSON document stored under the "settings" key."""

    bot_token: str | None = None
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    equipment_chat_id: str | None = None
    passwords_chat_id: str | None = None
    tasks_chat_id: str | None = None
    admin_usernames: list[str] = Field(default_factory=list)


class BotSettingsUpdate(BaseModel):
    """Partial update; only provided fields are changed."""

    bot_token: str | None = Field(default=None, min_length=1)
    welcome_message: str | None = Field(default=None, min_length=1, max_length=4000)
    equipment_chat_id: str | None = None
    passwords_chat_id: str | None = None
    tasks_chat_id: str | None = None
    admin_usernames: list[str] | None = None

    @field_validator("welcome_message", "admin_usernames")
    @classmethod
    def _not_null(cls, value: object) -> object:
        # Omit the field to keep the stored value; null is not a reset.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class BotSettingsResponse(BaseModel):
    """Settings as shown in the panel; the token is masked."""

    bot_token_set: bool
    bot_token_hint: str | None
    welcome_message: str
    equipment_chat_id: str | None
    passwords_chat_id: str | None
    tasks_chat_id: str | None
    admin_usernames: list[str]
    bot_running: bool = False

    @classmethod
    def from_data(cls, data: BotSettingsData, bot_running: bool = False) -> "BotSettingsResponse":
        token = data.bot_token
        return cls(
            bot_token_set=bool(token),
            bot_token_hint=f"...{token[-4:]}" if token else None,
            welcome_message=data.welcome_message,
            equipment_chat_id=data.equipment_chat_id,
            passwords_chat_id=data.passwords_chat_id,
            tasks_chat_id=data.tasks_chat_id,
            admin_usernames=data.admin_usernames,
            bot_running=bot_running,
        )
