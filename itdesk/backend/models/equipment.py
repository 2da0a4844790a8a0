"""
Equipment Models.

Equipment records and their append-only audit trail.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from itdesk.backend.core.utils import utc_now
from itdesk.backend.models.base import Base, IntIdMixin, TimestampMixin, enum_column_type
from itdesk.backend.models.enums import EquipmentStatus
from itdesk.backend.models.user import User


class Equipment(IntIdMixin, TimestampMixin, Base):
    """Inventory item, optionally assigned to a user."""

    __tablename__ = "equipment"

    inventory_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[EquipmentStatus] = mapped_column(
        enum_column_type(EquipmentStatus),
        default=EquipmentStatus.STORAGE,
        nullable=False,
    )
    assigned_to_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    department: Mapped[str | None] = mapped_column(String(128))

    assigned_to: Mapped[User | None] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<Equipment(id={self.id}, inventory_number={self.inventory_number!r})>"


class EquipmentHistory(IntIdMixin, Base):
    """One audit entry. Rows are only ever appended."""

    __tablename__ = "equipment_history"

    equipment_id: Mapped[int] = mapped_column(ForeignKey("equipment.id"), nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    user: Mapped[User | None] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<EquipmentHistory(equipment_id={self.equipment_id}, action={self.action!r})>"
