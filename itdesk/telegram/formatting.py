"""
Reply formatting helpers.

Replies are sent with HTML parse mode, so every user-supplied value goes
through html.quote.
"""

from collections.abc import Iterable

from aiogram import html

from itdesk.backend.models.enums import NOTE_CATEGORY_LABELS, TASK_STATUS_LABELS
from itdesk.backend.models.equipment import Equipment
from itdesk.backend.models.secure_note import SecureNote
from itdesk.backend.models.task import Task
from itdesk.backend.models.user import User


def split_args(args: str | None, expected: int) -> list[str]:
    """
    Split "a | b | c" command arguments.

    Returns exactly ``expected`` stripped parts; missing parts are empty
    strings and any extra separators stay inside the last part.
    """
    if not args:
        return [""] * expected
    parts = [part.strip() for part in args.split("|", expected - 1)]
    return parts + [""] * (expected - len(parts))


def equipment_table(items: Iterable[Equipment]) -> str:
    """Date | employee | item | inventory number | status, one row per item."""
    lines = []
    for item in items:
        employee = item.assigned_to.display_name if item.assigned_to else "-"
        lines.append(
            " | ".join(
                [
                    item.updated_at.strftime("%d.%m.%Y"),
                    employee,
                    item.name,
                    item.inventory_number,
                    item.status.value,
                ]
            )
        )
    header = "Date | Employee | Item | Inv. number | Status"
    return html.pre(html.quote("\n".join([header, *lines])))


def task_line(task: Task) -> str:
    line = f"#{task.id} {html.bold(html.quote(task.title))} [{TASK_STATUS_LABELS[task.status]}]"
    if task.created_by is not None:
        line += f"\nfrom {html.quote(task.created_by.display_name)}"
    if task.description:
        line += f"\n{html.quote(task.description)}"
    return line


def note_line(note: SecureNote, viewer: User) -> str:
    if note.sender_id == viewer.id:
        direction = f"to {html.quote(note.receiver.display_name)}"
    else:
        direction = f"from {html.quote(note.sender.display_name)}"
    state = "read" if note.is_read else "unread"
    return (
        f"#{note.id} {html.bold(html.quote(note.title))} "
        f"({NOTE_CATEGORY_LABELS[note.category]}, {direction}, {state})"
    )
