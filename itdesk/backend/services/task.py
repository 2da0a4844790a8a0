"""
Task Service.

Task creation, status changes, assignment and comments. Assignees are
notified after the change commits.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import NotFoundError
from itdesk.backend.models.enums import TASK_STATUS_LABELS, Category, TaskStatus
from itdesk.backend.models.task import Task, TaskComment
from itdesk.backend.models.user import User
from itdesk.backend.repositories.task import TaskCommentRepository, TaskRepository
from itdesk.backend.repositories.user import UserRepository
from itdesk.backend.services.base import BaseService
from itdesk.backend.services.outbox import Notifier


class TaskService(BaseService):
    """Service for tasks and task comments."""

    def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
        super().__init__(session, notifier)
        self.repo = TaskRepository(session)
        self.comment_repo = TaskCommentRepository(session)
        self.user_repo = UserRepository(session)

    async def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        return await self.repo.list_tasks(status)

    async def list_assigned_to(self, user_id: int) -> list[Task]:
        return await self.repo.list_assigned_to(user_id)

    async def get(self, task_id: int) -> Task:
        return await self.repo.get_by_id(task_id)

    async def create(
        self,
        title: str,
        creator_id: int,
        description: str | None = None,
        assigned_to_user_id: int | None = None,
        status: TaskStatus | None = None,
    ) -> Task:
        """
        Create a task.

        Args:
            title: Non-empty title
            creator_id: Id of the user creating the task
            description: Optional free text
            assigned_to_user_id: Optional assignee
            status: Initial status, 'new' when omitted

        Raises:
            ValidationError: If the title is empty
            NotFoundError: If the assignee does not exist
        """
        self._validate_required({"title": title}, ["title"])
        assignee = await self._resolve_user(assigned_to_user_id)

        task = await self._execute_db_operation(
            "create_task",
            self.repo.create(
                title=title.strip(),
                description=description,
                created_by_user_id=creator_id,
                assigned_to_user_id=assigned_to_user_id,
                status=status or TaskStatus.NEW,
            ),
        )
        self._log_operation(
            "Task created",
            task_id=task.id,
            creator_id=creator_id,
            assigned_to_user_id=assigned_to_user_id,
        )
        self._notify_user(assignee, self._assigned_message(task))
        await self._notify_channel(Category.TASKS, f"New task #{task.id}: {task.title}")
        return task

    async def update_status(self, task_id: int, status: TaskStatus) -> Task:
        """Change status; the assignee is told only when it actually changed."""
        current = await self.repo.get_by_id(task_id)
        old_status = current.status
        task = await self._execute_db_operation(
            "update_task_status",
            self.repo.update(task_id, status=status),
        )
        if old_status != status:
            self._log_operation(
                "Task status changed",
                task_id=task_id,
                old_status=old_status.value,
                new_status=status.value,
            )
            self._notify_user(
                task.assigned_to,
                f'Task #{task.id} "{task.title}" is now {TASK_STATUS_LABELS[status]}.',
            )
        return task

    async def assign(self, task_id: int, user_id: int) -> Task:
        """
        Assign a task to a user.

        Raises:
            NotFoundError: If the task or the user does not exist
        """
        await self.repo.get_by_id(task_id)
        assignee = await self._resolve_user(user_id)
        task = await self._execute_db_operation(
            "assign_task",
            self.repo.update(task_id, assigned_to_user_id=user_id),
        )
        self._log_operation("Task assigned", task_id=task_id, assigned_to_user_id=user_id)
        self._notify_user(assignee, self._assigned_message(task))
        return task

    async def add_comment(self, task_id: int, user_id: int, comment: str) -> TaskComment:
        self._validate_required({"comment": comment}, ["comment"])
        task = await self.repo.get_by_id(task_id)
        created = await self._execute_db_operation(
            "add_task_comment",
            self.comment_repo.create(task_id=task_id, user_id=user_id, comment=comment.strip()),
        )
        self._log_operation("Task comment added", task_id=task_id, user_id=user_id)
        if task.assigned_to_user_id not in (None, user_id):
            self._notify_user(task.assigned_to, f'New comment on task #{task.id} "{task.title}": {created.comment}')
        return created

    async def list_comments(self, task_id: int) -> list[TaskComment]:
        await self.repo.get_by_id(task_id)
        return await self.comment_repo.list_for_task(task_id)

    async def _resolve_user(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        user = await self.user_repo.get_by_id_or_none(user_id)
        if user is None:
            raise NotFoundError("Assigned user not found")
        return user

    @staticmethod
    def _assigned_message(task: Task) -> str:
        text = f"You have been assigned task #{task.id}: {task.title}"
        if task.description:
            text += f"\n\n{task.description}"
        return text
