"""
Domain enumerations.

Values are the strings stored in the database and exchanged over the API.
"""

from enum import Enum


class Role(str, Enum):
    SYSADMIN = "sysadmin"
    ACCOUNTANT = "accountant"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class Category(str, Enum):
    """Permission categories; each maps to one bot section and one API area."""

    EQUIPMENT = "equipment"
    PASSWORDS = "passwords"
    TASKS = "tasks"


class EquipmentStatus(str, Enum):
    ACTIVE = "active"
    STORAGE = "storage"
    REPAIR = "repair"
    DECOMMISSIONED = "decommissioned"
    WRITTEN_OFF = "written_off"


class TaskStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    URGENT = "urgent"


class NoteCategory(str, Enum):
    CREDENTIALS = "credentials"
    PASSWORD = "password"
    API_KEY = "api_key"
    OTHER = "other"


TASK_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NEW: "New",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.URGENT: "Urgent",
}

NOTE_CATEGORY_LABELS: dict[NoteCategory, str] = {
    NoteCategory.CREDENTIALS: "Credentials",
    NoteCategory.PASSWORD: "Password",
    NoteCategory.API_KEY: "API key",
    NoteCategory.OTHER: "Other",
}
