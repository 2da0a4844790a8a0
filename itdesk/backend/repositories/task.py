"""
Task Repository.
"""

from sqlalchemy import delete, or_, select, update

from itdesk.backend.models.enums import TaskStatus
from itdesk.backend.models.task import Task, TaskComment
from itdesk.backend.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    model = Task

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        """All tasks, optionally filtered by status, newest first."""
        stmt = select(Task)
        if status is not None:
            stmt = stmt.where(Task.status == status)
        result = await self.session.execute(stmt.order_by(Task.created_at.desc(), Task.id.desc()))
        return list(result.scalars().all())

    async def list_assigned_to(self, user_id: int) -> list[Task]:
        result = await self.session.execute(
            select(Task)
            .where(Task.assigned_to_user_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return list(result.scalars().all())

    async def ids_created_by(self, user_id: int) -> list[int]:
        result = await self.session.execute(
            select(Task.id).where(Task.created_by_user_id == user_id)
        )
        return list(result.scalars().all())

    async def delete_created_by(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(Task).where(Task.created_by_user_id == user_id)
        )
        return result.rowcount

    async def unassign_user(self, user_id: int) -> int:
        result = await self.session.execute(
            update(Task)
            .where(Task.assigned_to_user_id == user_id)
            .values(assigned_to_user_id=None)
        )
        return result.rowcount


class TaskCommentRepository(BaseRepository[TaskComment]):
    model = TaskComment

    async def list_for_task(self, task_id: int) -> list[TaskComment]:
        """Comments in posting order."""
        result = await self.session.execute(
            select(TaskComment)
            .where(TaskComment.task_id == task_id)
            .order_by(TaskComment.created_at, TaskComment.id)
        )
        return list(result.scalars().all())

    async def delete_for_user_or_tasks(self, user_id: int, task_ids: list[int]) -> int:
        """Delete comments written by a user or attached to any of the given tasks."""
        condition = TaskComment.user_id == user_id
        if task_ids:
            condition = or_(condition, TaskComment.task_id.in_(task_ids))
        result = await self.session.execute(delete(TaskComment).where(condition))
        return result.rowcount
