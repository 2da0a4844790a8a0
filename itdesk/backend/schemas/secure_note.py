"""
Secure Note Schemas.

Responses never carry the note payload; it is only revealed through the bot.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from itdesk.backend.models.enums import NoteCategory
from itdesk.backend.schemas.user import UserBrief


class SecureNoteCreate(BaseModel):
    receiver_id: int
    title: str = Field(..., min_length=1, max_length=255, examples=["VPN credentials"])
    category: NoteCategory = NoteCategory.OTHER
    content: str = Field(..., min_length=1, max_length=10000)


class SecureNoteResponse(BaseModel):
    id: int
    sender_id: int
    sender: UserBrief | None
    receiver_id: int
    receiver: UserBrief | None
    title: str
    category: NoteCategory
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
