"""ORM models. Importing this package registers every table on Base.metadata."""

from itdesk.backend.models.base import Base
from itdesk.backend.models.bot_settings import BOT_SETTINGS_KEY, BotSettings
from itdesk.backend.models.enums import Category, EquipmentStatus, NoteCategory, Role, TaskStatus
from itdesk.backend.models.equipment import Equipment, EquipmentHistory
from itdesk.backend.models.secure_note import SecureNote
from itdesk.backend.models.task import Task, TaskComment
from itdesk.backend.models.user import Permission, User

__all__ = [
    "BOT_SETTINGS_KEY",
    "Base",
    "BotSettings",
    "Category",
    "Equipment",
    "EquipmentHistory",
    "EquipmentStatus",
    "NoteCategory",
    "Permission",
    "Role",
    "SecureNote",
    "Task",
    "TaskComment",
    "TaskStatus",
    "User",
]
