"""
User and Permission Models.

A user is created on first chat registration (or by admin tooling) and
carries one Permission row per category it has been granted or denied.
"""

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from itdesk.backend.models.base import Base, IntIdMixin, TimestampMixin, enum_column_type
from itdesk.backend.models.enums import Category, Role


class User(IntIdMixin, TimestampMixin, Base):
    """Chat user, optionally allowed into the web panel via password_hash."""

    __tablename__ = "users"

    telegram_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(64), index=True)
    first_name: Mapped[str | None] = mapped_column(String(128))
    last_name: Mapped[str | None] = mapped_column(String(128))
    role: Mapped[Role] = mapped_column(
        enum_column_type(Role),
        default=Role.EMPLOYEE,
        nullable=False,
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_registered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255))

    @property
    def display_name(self) -> str:
        """'Last First' when known, else the username, else the Telegram id."""
        full = " ".join(part for part in (self.last_name, self.first_name) if part)
        return full or self.username or self.telegram_id

    @property
    def chat_id(self) -> str | None:
        """Private chat id for notifications; None for web-only accounts."""
        return self.telegram_id if self.telegram_id.lstrip("-").isdigit() else None

    @property
    def is_panel_admin(self) -> bool:
        return self.is_admin or self.role == Role.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, telegram_id={self.telegram_id!r}, role={self.role})>"


class Permission(IntIdMixin, Base):
    """Access flag for one (user, category) pair. Absence means no access."""

    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("user_id", "category", name="uq_permissions_user_category"),)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category: Mapped[Category] = mapped_column(enum_column_type(Category), nullable=False)
    has_access: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Permission(user_id={self.user_id}, category={self.category}, has_access={self.has_access})>"
