"""
User Schemas.

Pydantic schemas for user administration and web panel login.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from itdesk.backend.models.enums import Category, Role


class LoginRequest(BaseModel):
    """Credentials posted by the web panel login form."""

    username: str = Field(..., min_length=1, max_length=64, examples=["admin"])
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """User as shown in the admin panel, with the full permission map."""

    id: int
    telegram_id: str
    username: str | None
    first_name: str | None
    last_name: str | None
    display_name: str
    role: Role
    is_admin: bool
    is_registered: bool
    permissions: dict[Category, bool] = Field(default_factory=dict)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    """Compact user reference embedded in other records."""

    id: int
    username: str | None
    display_name: str

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: Role = Field(..., description="New role; permissions are not changed")


class PermissionsUpdate(BaseModel):
    """Category flags to set. Omitted categories keep their current value."""

    equipment: bool | None = None
    passwords: bool | None = None
    tasks: bool | None = None

    def as_mapping(self) -> dict[Category, bool]:
        return {
            Category(name): value
            for name, value in self.model_dump(exclude_none=True).items()
        }


class UserDeletionResponse(BaseModel):
    """Row counts removed or detached by the deletion cascade."""

    user_id: int
    secure_notes_deleted: int
    history_rows_deleted: int
    permissions_deleted: int
    comments_deleted: int
    tasks_deleted: int
    tasks_unassigned: int
    equipment_unassigned: int
