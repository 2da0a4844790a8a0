"""
User Repository.

Data access for users and their permission rows.
"""

from sqlalchemy import delete, func, or_, select

from itdesk.backend.models.enums import Category, Role
from itdesk.backend.models.user import Permission, User
from itdesk.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User

    async def list_newest_first(self) -> list[User]:
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_telegram_id(self, telegram_id: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.telegram_id == telegram_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup."""
        result = await self.session.execute(
            select(User)
            .where(func.lower(User.username) == username.lower())
            .order_by(User.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_full_name(self, last_name: str, first_name: str) -> User | None:
        """
        Find a user by last and first name, case-insensitively.

        Args:
            last_name: Family name as written in "Last First" form
            first_name: Given name

        Returns:
            The first matching user or None
        """
        result = await self.session.execute(
            select(User)
            .where(
                func.lower(User.last_name) == last_name.lower(),
                func.lower(User.first_name) == first_name.lower(),
            )
            .order_by(User.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_first_admin(self) -> User | None:
        result = await self.session.execute(
            select(User)
            .where(or_(User.is_admin == True, User.role == Role.ADMIN))  # noqa: E712
            .order_by(User.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, user_id: int) -> int:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount


class PermissionRepository(BaseRepository[Permission]):
    """Repository for Permission rows, one per (user, category)."""

    model = Permission

    async def get_for(self, user_id: int, category: Category) -> Permission | None:
        result = await self.session.execute(
            select(Permission).where(
                Permission.user_id == user_id,
                Permission.category == category,
            )
        )
        return result.scalar_one_or_none()

    async def get_map(self, user_id: int) -> dict[Category, bool]:
        """
        Get every category flag for a user.

        Categories without a stored row are reported as False.
        """
        maps = await self.get_maps([user_id])
        return maps[user_id]

    async def get_maps(self, user_ids: list[int]) -> dict[int, dict[Category, bool]]:
        """Get category flags for many users in one query."""
        maps = {user_id: {category: False for category in Category} for user_id in user_ids}
        if not user_ids:
            return maps
        result = await self.session.execute(
            select(Permission).where(Permission.user_id.in_(user_ids))
        )
        for row in result.scalars().all():
            maps[row.user_id][row.category] = row.has_access
        return maps

    async def upsert(self, user_id: int, category: Category, has_access: bool) -> Permission:
        """Set the flag for a (user, category) pair, creating the row if needed."""
        existing = await self.get_for(user_id, category)
        if existing is None:
            return await self.create(user_id=user_id, category=category, has_access=has_access)
        existing.has_access = has_access
        await self.session.flush()
        return existing

    async def delete_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(Permission).where(Permission.user_id == user_id)
        )
        return result.rowcount
