"""
User Service.

Registration, role and permission administration, soft logout, the
deletion cascade, and web panel authentication.
"""

from dataclasses import asdict, dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import (
    AlreadyRegisteredError,
    AuthenticationError,
    NotFoundError,
)
from itdesk.backend.core.security import hash_password, verify_password
from itdesk.backend.core.utils import normalize_username
from itdesk.backend.models.enums import Category, Role
from itdesk.backend.models.user import User
from itdesk.backend.repositories.equipment import EquipmentHistoryRepository, EquipmentRepository
from itdesk.backend.repositories.secure_note import SecureNoteRepository
from itdesk.backend.repositories.task import TaskCommentRepository, TaskRepository
from itdesk.backend.repositories.user import PermissionRepository, UserRepository
from itdesk.backend.services.access import ALL_GRANTED, AccessControl
from itdesk.backend.services.base import BaseService
from itdesk.backend.services.bot_settings import BotSettingsService
from itdesk.backend.services.outbox import Notifier


@dataclass
class UserDeletionSummary:
    """Row counts affected by one deletion cascade."""

    user_id: int
    secure_notes_deleted: int = 0
    history_rows_deleted: int = 0
    permissions_deleted: int = 0
    comments_deleted: int = 0
    tasks_deleted: int = 0
    tasks_unassigned: int = 0
    equipment_unassigned: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class UserService(BaseService):
    """
    Service for user lifecycle operations.

    Chat users are created by registration. Web panel access needs a
    password hash, set by the startup admin bootstrap or the create-admin
    CLI command.
    """

    def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
        super().__init__(session, notifier)
        self.repo = UserRepository(session)
        self.access = AccessControl(session)

    async def list_users(self) -> list[tuple[User, dict[Category, bool]]]:
        """All users, newest first, each with its permission map."""
        users = await self.repo.list_newest_first()
        maps = await self.access.permission_maps([u.id for u in users])
        return [(user, maps[user.id]) for user in users]

    async def get_user(self, user_id: int) -> User:
        return await self.repo.get_by_id(user_id)

    async def get_by_telegram_id(self, telegram_id: str | int) -> User | None:
        return await self.repo.get_by_telegram_id(str(telegram_id))

    async def get_by_username(self, username: str) -> User | None:
        cleaned = normalize_username(username)
        if cleaned is None:
            return None
        return await self.repo.get_by_username(cleaned)

    async def register(
        self,
        telegram_id: str | int,
        role: Role,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> tuple[User, dict[Category, bool]]:
        """
        Register a chat user with the chosen role.

        Creates the user if unknown, or completes registration of a known
        but unregistered one. Applies the role's default permissions.
        Usernames listed in the bot settings' admin_usernames become
        panel admins.

        Returns:
            Tuple of (user, permission map)

        Raises:
            AlreadyRegisteredError: If the user is already registered
        """
        telegram_id = str(telegram_id)
        username = normalize_username(username)
        settings = await BotSettingsService(self._session).get()
        is_listed_admin = bool(
            username and username.lower() in {name.lower() for name in settings.admin_usernames}
        )

        user = await self.repo.get_by_telegram_id(telegram_id)
        if user is not None and user.is_registered:
            raise AlreadyRegisteredError()

        fields = {
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
            "is_registered": True,
        }
        if is_listed_admin:
            fields["is_admin"] = True

        if user is None:
            user = await self._execute_db_operation(
                "create_user",
                self.repo.create(telegram_id=telegram_id, **fields),
            )
        else:
            user = await self._execute_db_operation(
                "update_user",
                self.repo.update(user.id, **fields),
            )

        permissions = await self.access.apply_role_defaults(user.id, role)
        self._log_operation(
            "User registered",
            user_id=user.id,
            telegram_id=telegram_id,
            role=role.value,
            is_admin=user.is_admin,
        )
        return user, permissions

    async def update_role(self, user_id: int, role: Role) -> User:
        """Change the role only. Stored permissions are left as they are."""
        user = await self._execute_db_operation(
            "update_role",
            self.repo.update(user_id, role=role),
        )
        self._log_operation("User role updated", user_id=user_id, role=role.value)
        return user

    async def update_permissions(self, user_id: int, mapping: dict[Category, bool]) -> dict[Category, bool]:
        await self.repo.get_by_id(user_id)
        return await self.access.set_permissions(user_id, mapping)

    async def logout(self, user: User) -> User:
        """Soft deactivation: unregister and revoke every category."""
        user = await self._execute_db_operation(
            "logout_user",
            self.repo.update(user.id, is_registered=False),
        )
        await self.access.revoke_all(user.id)
        self._log_operation("User logged out", user_id=user.id)
        return user

    async def delete_user(self, user_id: int) -> UserDeletionSummary:
        """
        Delete a user and everything that depends on them.

        Runs inside the caller's transaction, so a failure at any step
        leaves nothing half-deleted once the session rolls back. Tasks and
        equipment merely assigned to the user are kept and unassigned.

        Raises:
            NotFoundError: If the user does not exist
        """
        await self.repo.get_by_id(user_id)
        summary = UserDeletionSummary(user_id=user_id)
        tasks = TaskRepository(self._session)

        async def cascade() -> None:
            summary.secure_notes_deleted = await SecureNoteRepository(self._session).delete_for_user(user_id)
            summary.history_rows_deleted = await EquipmentHistoryRepository(self._session).delete_by_user(user_id)
            summary.permissions_deleted = await PermissionRepository(self._session).delete_for_user(user_id)
            created_task_ids = await tasks.ids_created_by(user_id)
            summary.comments_deleted = await TaskCommentRepository(self._session).delete_for_user_or_tasks(
                user_id, created_task_ids
            )
            summary.tasks_deleted = await tasks.delete_created_by(user_id)
            summary.tasks_unassigned = await tasks.unassign_user(user_id)
            summary.equipment_unassigned = await EquipmentRepository(self._session).unassign_user(user_id)
            if await self.repo.delete_by_id(user_id) != 1:
                raise NotFoundError("User not found")

        await self._execute_db_operation("delete_user", cascade())
        self._log_operation("User deleted", **summary.as_dict())
        return summary

    async def authenticate(self, username: str, password: str) -> User:
        """
        Check web panel credentials.

        Raises:
            AuthenticationError: For unknown users, users without a
                password, or a wrong password
        """
        user = await self.get_by_username(username)
        if user is None or not user.password_hash or not verify_password(password, user.password_hash):
            self._logger.warning("Login failed", extra={"username": username})
            raise AuthenticationError("Invalid username or password")
        self._log_operation("User logged in", user_id=user.id)
        return user

    async def ensure_default_admin(self, username: str, password: str) -> User | None:
        """
        Create the bootstrap admin when no admin exists yet.

        Returns:
            The created user, or None when an admin already exists
        """
        if await self.repo.get_first_admin() is not None:
            return None
        user = await self.create_admin(username, password)
        self._log_operation("Default admin created", user_id=user.id, username=username)
        return user

    async def create_admin(
        self,
        username: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """
        Create a web panel admin, or promote an existing user with that username.

        Admins get every category granted.
        """
        username = normalize_username(username)
        self._validate_required(
            {"username": username, "password": password},
            ["username", "password"],
        )

        existing = await self.repo.get_by_username(username)
        fields = {"is_admin": True, "password_hash": hash_password(password)}
        if first_name:
            fields["first_name"] = first_name
        if last_name:
            fields["last_name"] = last_name

        if existing is None:
            user = await self._execute_db_operation(
                "create_admin",
                self.repo.create(
                    telegram_id=f"web:{username}",
                    username=username,
                    role=Role.ADMIN,
                    **fields,
                ),
            )
        else:
            user = await self._execute_db_operation(
                "promote_admin",
                self.repo.update(existing.id, **fields),
            )

        await self.access.set_permissions(user.id, ALL_GRANTED)
        self._log_operation("Admin account ready", user_id=user.id, username=username)
        return user
