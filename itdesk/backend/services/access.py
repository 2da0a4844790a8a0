"""
Access Control.

Decides whether a user may use a permission category. The answer is the
stored Permission row for the (user, category) pair, or False when no row
exists. There is no inheritance between categories and no wildcard.

Role defaults are applied once, at registration. Changing a user's role
later does not touch their permissions.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.models.enums import Category, Role
from itdesk.backend.models.user import User
from itdesk.backend.repositories.user import PermissionRepository
from itdesk.backend.services.base import BaseService

ROLE_DEFAULT_PERMISSIONS: dict[Role, dict[Category, bool]] = {
    Role.SYSADMIN: {Category.EQUIPMENT: True, Category.PASSWORDS: True, Category.TASKS: True},
    Role.ACCOUNTANT: {Category.EQUIPMENT: True, Category.PASSWORDS: False, Category.TASKS: False},
    Role.MANAGER: {Category.EQUIPMENT: False, Category.PASSWORDS: True, Category.TASKS: True},
    Role.EMPLOYEE: {Category.EQUIPMENT: False, Category.PASSWORDS: False, Category.TASKS: True},
    Role.ADMIN: {Category.EQUIPMENT: True, Category.PASSWORDS: True, Category.TASKS: True},
}


def validate_role_defaults(table: dict[Role, dict[Category, bool]]) -> None:
    """
    Check that every role defines a flag for every category.

    Raises:
        RuntimeError: On the first missing role or category
    """
    for role in Role:
        if role not in table:
            raise RuntimeError(f"No default permissions defined for role {role.value!r}")
        missing = set(Category) - set(table[role])
        if missing:
            names = ", ".join(sorted(c.value for c in missing))
            raise RuntimeError(f"Role {role.value!r} has no default for: {names}")


validate_role_defaults(ROLE_DEFAULT_PERMISSIONS)

ALL_GRANTED: dict[Category, bool] = {category: True for category in Category}
ALL_REVOKED: dict[Category, bool] = {category: False for category in Category}


class AccessControl(BaseService):
    """Permission evaluator and writer."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = PermissionRepository(session)

    async def has_access(self, user: User | int, category: Category) -> bool:
        """Return the stored flag for (user, category), or False when absent."""
        user_id = user if isinstance(user, int) else user.id
        row = await self.repo.get_for(user_id, category)
        return bool(row and row.has_access)

    async def permission_map(self, user_id: int) -> dict[Category, bool]:
        return await self.repo.get_map(user_id)

    async def permission_maps(self, user_ids: list[int]) -> dict[int, dict[Category, bool]]:
        return await self.repo.get_maps(user_ids)

    async def set_permissions(self, user_id: int, mapping: dict[Category, bool]) -> dict[Category, bool]:
        """
        Upsert the given category flags.

        Categories not in mapping keep their stored value.

        Returns:
            The full permission map after the update
        """
        for category, has_access in mapping.items():
            await self._execute_db_operation(
                "upsert_permission",
                self.repo.upsert(user_id, Category(category), has_access),
            )
        self._log_operation(
            "Permissions updated",
            user_id=user_id,
            changes={Category(c).value: v for c, v in mapping.items()},
        )
        return await self.repo.get_map(user_id)

    async def apply_role_defaults(self, user_id: int, role: Role) -> dict[Category, bool]:
        """Write exactly the default permission set for role."""
        return await self.set_permissions(user_id, ROLE_DEFAULT_PERMISSIONS[role])

    async def revoke_all(self, user_id: int) -> dict[Category, bool]:
        return await self.set_permissions(user_id, ALL_REVOKED)
