"""
Equipment Schemas.

Pydantic schemas for equipment API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from itdesk.backend.models.enums import EquipmentStatus
from itdesk.backend.schemas.user import UserBrief


class EquipmentCreate(BaseModel):
    """Schema for creating an equipment record."""

    inventory_number: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Unique inventory number",
        examples=["INV-0042"],
    )
    name: str = Field(..., min_length=1, max_length=255, examples=["ThinkPad T14"])
    type: str = Field(..., min_length=1, max_length=128, examples=["Laptop"])
    status: EquipmentStatus = Field(default=EquipmentStatus.STORAGE)
    assigned_to_user_id: int | None = Field(default=None, description="Assignee user id")
    description: str | None = Field(default=None, max_length=10000)
    department: str | None = Field(default=None, max_length=128)


class EquipmentUpdate(BaseModel):
    """
    Schema for a partial equipment update.

    Send ``assigned_to_user_id: null`` explicitly to return an item to storage.
    """

    inventory_number: str | None = Field(default=None, min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, min_length=1, max_length=128)
    status: EquipmentStatus | None = None
    assigned_to_user_id: int | None = None
    description: str | None = Field(default=None, max_length=10000)
    department: str | None = Field(default=None, max_length=128)


class EquipmentResponse(BaseModel):
    id: int
    inventory_number: str
    name: str
    type: str
    status: EquipmentStatus
    assigned_to_user_id: int | None
    assigned_to: UserBrief | None
    description: str | None
    department: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EquipmentHistoryResponse(BaseModel):
    id: int
    equipment_id: int
    user_id: int | None
    user: UserBrief | None
    action: str
    details: str | None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ImportRowError(BaseModel):
    row: int = Field(description="1-based spreadsheet row number")
    message: str


class ImportResult(BaseModel):
    """Outcome of a spreadsheet import."""

    created: int = 0
    skipped: int = 0
    errors: list[ImportRowError] = Field(default_factory=list)
    warnings: list[ImportRowError] = Field(default_factory=list)
