"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, wrap database failures in application
exceptions, and queue chat notifications for release after commit.

Usage:
    from itdesk.backend.services.base import BaseService

    class TaskService(BaseService):
        def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
            super().__init__(session, notifier)
            self.repo = TaskRepository(session)
"""

from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from itdesk.backend.core.logging import get_logger
from itdesk.backend.models.enums import Category
from itdesk.backend.models.user import User
from itdesk.backend.services.outbox import Notifier, queue_notification

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Database session management
    - Error wrapping for database operations
    - Common validation patterns
    - Notification queueing

    Subclasses should call super().__init__(session, notifier) and
    initialize their repositories in __init__.
    """

    def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
        """
        Initialize the service with a database session.

        Args:
            session: SQLAlchemy async session for database operations
            notifier: Delivery channel for chat notifications; None disables them
        """
        self._session = session
        self._notifier = notifier
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Any,
    ) -> T:
        """
        Execute a database operation with error handling.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute

        Returns:
            Result of the coroutine

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _notify_user(self, user: User | None, text: str) -> None:
        """Queue a message to a user's private chat, if they have one."""
        if user is None or user.chat_id is None:
            return
        self._notify_chat(user.chat_id, text)

    def _notify_chat(self, chat_id: str | None, text: str) -> None:
        if not chat_id or self._notifier is None:
            return
        queue_notification(self._session, self._notifier, chat_id, text)

    async def _notify_channel(self, category: Category, text: str) -> None:
        """Queue a message to the group chat configured for a category."""
        if self._notifier is None:
            return
        from itdesk.backend.services.bot_settings import BotSettingsService

        settings = await BotSettingsService(self._session).get()
        chat_ids = {
            Category.EQUIPMENT: settings.equipment_chat_id,
            Category.PASSWORDS: settings.passwords_chat_id,
            Category.TASKS: settings.tasks_chat_id,
        }
        self._notify_chat(chat_ids[category], text)

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )
