"""
Task Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from itdesk.backend.models.enums import TaskStatus
from itdesk.backend.schemas.user import UserBrief


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Replace printer toner"])
    description: str | None = Field(default=None, max_length=10000)
    assigned_to_user_id: int | None = None
    status: TaskStatus | None = Field(
        default=None,
        description="Initial status; 'new' when omitted",
    )


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskAssign(BaseModel):
    user_id: int


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None
    status: TaskStatus
    created_by_user_id: int
    created_by: UserBrief | None
    assigned_to_user_id: int | None
    assigned_to: UserBrief | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskCommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=5000)


class TaskCommentResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    user: UserBrief | None
    comment: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
