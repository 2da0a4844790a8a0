"""
Secure Note Model.

A titled secret sent from one user to another. The payload is stored
as a Fernet token in content_ciphertext and never in plain text.
"""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from itdesk.backend.models.base import Base, IntIdMixin, TimestampMixin, enum_column_type
from itdesk.backend.models.enums import NoteCategory
from itdesk.backend.models.user import User


class SecureNote(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "secure_notes"

    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    receiver_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[NoteCategory] = mapped_column(
        enum_column_type(NoteCategory),
        default=NoteCategory.OTHER,
        nullable=False,
    )
    content_ciphertext: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    sender: Mapped[User] = relationship(foreign_keys=[sender_id], lazy="selectin")
    receiver: Mapped[User] = relationship(foreign_keys=[receiver_id], lazy="selectin")

    def __repr__(self) -> str:
        return f"<SecureNote(id={self.id}, title={self.title!r}, is_read={self.is_read})>"
