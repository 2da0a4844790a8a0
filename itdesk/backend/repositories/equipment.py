"""
Equipment Repository.

Data access for equipment records and their history rows.
"""

from sqlalchemy import delete, or_, select, update

from itdesk.backend.models.equipment import Equipment, EquipmentHistory
from itdesk.backend.models.user import User
from itdesk.backend.repositories.base import BaseRepository


class EquipmentRepository(BaseRepository[Equipment]):
    """
    Repository for Equipment model.

    Adds search by inventory number and by assigned employee name.
    """

    model = Equipment

    async def search(
        self,
        inventory_number: str | None = None,
        employee_name: str | None = None,
    ) -> list[Equipment]:
        """
        Search equipment with case-insensitive substring filters.

        Both filters are combined with AND. The employee filter matches
        the first or last name of the assigned user.

        Args:
            inventory_number: Fragment of the inventory number
            employee_name: Fragment of the assignee's first or last name

        Returns:
            Matching equipment, most recently updated first
        """
        stmt = select(Equipment).outerjoin(User, Equipment.assigned_to_user_id == User.id)

        if inventory_number:
            stmt = stmt.where(Equipment.inventory_number.icontains(inventory_number, autoescape=True))
        if employee_name:
            stmt = stmt.where(
                or_(
                    User.first_name.icontains(employee_name, autoescape=True),
                    User.last_name.icontains(employee_name, autoescape=True),
                )
            )

        result = await self.session.execute(
            stmt.order_by(Equipment.updated_at.desc(), Equipment.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_inventory_number(self, inventory_number: str) -> Equipment | None:
        result = await self.session.execute(
            select(Equipment).where(Equipment.inventory_number == inventory_number)
        )
        return result.scalar_one_or_none()

    async def existing_inventory_numbers(self, numbers: list[str]) -> set[str]:
        """Return the subset of numbers that already exist."""
        if not numbers:
            return set()
        result = await self.session.execute(
            select(Equipment.inventory_number).where(Equipment.inventory_number.in_(numbers))
        )
        return set(result.scalars().all())

    async def unassign_user(self, user_id: int) -> int:
        """Clear the assignee on every item held by a user."""
        result = await self.session.execute(
            update(Equipment)
            .where(Equipment.assigned_to_user_id == user_id)
            .values(assigned_to_user_id=None)
        )
        return result.rowcount


class EquipmentHistoryRepository(BaseRepository[EquipmentHistory]):
    """Repository for the append-only equipment audit trail."""

    model = EquipmentHistory

    async def list_for_equipment(self, equipment_id: int) -> list[EquipmentHistory]:
        """History for one item, newest first."""
        result = await self.session.execute(
            select(EquipmentHistory)
            .where(EquipmentHistory.equipment_id == equipment_id)
            .order_by(EquipmentHistory.timestamp.desc(), EquipmentHistory.id.desc())
        )
        return list(result.scalars().all())

    async def delete_by_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(EquipmentHistory).where(EquipmentHistory.user_id == user_id)
        )
        return result.rowcount
