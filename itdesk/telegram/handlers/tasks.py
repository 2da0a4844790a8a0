"""
Task Handlers.

Sysadmins see the tasks assigned to them; everyone with task access can
create tasks and optionally hand them to a sysadmin.
"""

from aiogram import F, Router, html
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.models.enums import Category, Role, TaskStatus
from itdesk.backend.models.user import User
from itdesk.backend.services.outbox import Notifier
from itdesk.backend.services.task import TaskService
from itdesk.backend.services.user import UserService
from itdesk.telegram.formatting import split_args, task_line
from itdesk.telegram.guards import require_access
from itdesk.telegram.keyboards.common import TASKS_BUTTON
from itdesk.telegram.middlewares.db_session import commit_update

router = Router(name="tasks")

NEW_TASK_USAGE = (
    "To create a task:\n"
    "/new_task title | description | @sysadmin\n"
    "The description and the sysadmin are optional."
)


@router.message(Command("tasks"))
@router.message(F.text == TASKS_BUTTON)
async def cmd_tasks(message: Message, session: AsyncSession, db_user: User | None) -> None:
    if not await require_access(message, db_user, session, Category.TASKS):
        return
    if db_user.role != Role.SYSADMIN:
        await message.answer(NEW_TASK_USAGE)
        return

    tasks = await TaskService(session).list_assigned_to(db_user.id)
    if not tasks:
        await message.answer("No tasks are assigned to you.\n\n" + NEW_TASK_USAGE)
        return
    await message.answer(html.bold("Your tasks") + "\n\n" + "\n\n".join(task_line(t) for t in tasks))


@router.message(Command("new_task"))
async def cmd_new_task(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    db_user: User | None,
    notifier: Notifier | None = None,
) -> None:
    """Create a task; an assigned task starts in progress, otherwise as new."""
    if not await require_access(message, db_user, session, Category.TASKS):
        return
    title, description, assignee_name = split_args(command.args, 3)
    if not title:
        await message.answer(NEW_TASK_USAGE)
        return

    assignee = None
    if assignee_name:
        assignee = await UserService(session).get_by_username(assignee_name)
        if assignee is None or assignee.role != Role.SYSADMIN:
            await message.answer(f"No sysadmin with username {html.quote(assignee_name)} was found.")
            return

    task = await TaskService(session, notifier).create(
        title=title,
        creator_id=db_user.id,
        description=description or None,
        assigned_to_user_id=assignee.id if assignee else None,
        status=TaskStatus.IN_PROGRESS if assignee else TaskStatus.NEW,
    )
    await commit_update(session)
    reply = f"Task #{task.id} {html.bold(html.quote(task.title))} created."
    if assignee is not None:
        reply += f" Assigned to {html.quote(assignee.display_name)}."
    await message.answer(reply)
