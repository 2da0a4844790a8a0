"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, request id,
the session-cookie user, and the admin and category guards.
"""

import uuid
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.config import get_app_config
from itdesk.backend.core.database import get_db_session
from itdesk.backend.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CategoryAccessError,
)
from itdesk.backend.core.logging import get_logger
from itdesk.backend.core.security import read_session_token
from itdesk.backend.models.enums import Category
from itdesk.backend.models.user import User
from itdesk.backend.repositories.user import UserRepository
from itdesk.backend.services.access import AccessControl
from itdesk.backend.services.outbox import Notifier

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def get_notifier(request: Request) -> Notifier | None:
    """The application's notification channel, if the bot is wired up."""
    return getattr(request.app.state, "notifier", None)


NotifierDep = Annotated[Notifier | None, Depends(get_notifier)]


async def get_current_user(request: Request, session: DbSession) -> User:
    """
    Resolve the web panel user from the session cookie.

    Raises:
        AuthenticationError: If the cookie is missing, invalid, expired,
            or names a user that no longer exists
    """
    cookie_name = get_app_config().application.session_cookie.name
    token = request.cookies.get(cookie_name)
    if not token:
        raise AuthenticationError("Not authenticated")

    user_id = read_session_token(token)
    user = await UserRepository(session).get_by_id_or_none(user_id)
    if user is None:
        raise AuthenticationError("Session user no longer exists")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    if not user.is_panel_admin:
        raise AuthorizationError("Administrator access required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def require_access(category: Category) -> Callable[..., Awaitable[User]]:
    """
    Build a dependency that admits admins and holders of category.

    Usage:
        EquipmentUser = Annotated[User, Depends(require_access(Category.EQUIPMENT))]
    """

    async def dependency(user: CurrentUser, session: DbSession) -> User:
        if user.is_panel_admin:
            return user
        if not await AccessControl(session).has_access(user, category):
            logger.info(
                "Category access denied",
                extra={"user_id": user.id, "category": category.value},
            )
            raise CategoryAccessError(category.value)
        return user

    return dependency


EquipmentUser = Annotated[User, Depends(require_access(Category.EQUIPMENT))]
TasksUser = Annotated[User, Depends(require_access(Category.TASKS))]
PasswordsUser = Annotated[User, Depends(require_access(Category.PASSWORDS))]
