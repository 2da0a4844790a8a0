"""
Secure Note Handlers.

Listing, opening and sending secure notes. Note content is only ever
shown to the sender or the receiver.
"""

from aiogram import F, Router, html
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.models.enums import NOTE_CATEGORY_LABELS, Category, NoteCategory
from itdesk.backend.models.user import User
from itdesk.backend.services.access import AccessControl
from itdesk.backend.services.outbox import Notifier
from itdesk.backend.services.secure_note import SecureNoteService
from itdesk.backend.services.user import UserService
from itdesk.telegram.formatting import note_line, split_args
from itdesk.telegram.guards import require_access
from itdesk.telegram.keyboards.common import PASSWORDS_BUTTON
from itdesk.telegram.middlewares.db_session import commit_update

router = Router(name="passwords")

KIND_ALIASES: dict[str, NoteCategory] = {
    **{kind.value: kind for kind in NoteCategory},
    **{label.lower(): kind for kind, label in NOTE_CATEGORY_LABELS.items()},
    "apikey": NoteCategory.API_KEY,
}

SEND_USAGE = (
    "To send a secure note:\n"
    "/send_password @user | title | kind | content\n"
    "Kinds: " + ", ".join(kind.value for kind in NoteCategory)
)


def parse_kind(value: str) -> NoteCategory | None:
    return KIND_ALIASES.get(value.strip().lower())


@router.message(Command("passwords"))
@router.message(F.text == PASSWORDS_BUTTON)
async def cmd_passwords(message: Message, session: AsyncSession, db_user: User | None) -> None:
    if not await require_access(message, db_user, session, Category.PASSWORDS):
        return
    notes = await SecureNoteService(session).list_for_user(db_user.id)
    if not notes:
        await message.answer("You have no secure notes.\n\n" + SEND_USAGE)
        return
    lines = [note_line(note, db_user) for note in notes]
    await message.answer(
        html.bold("Your secure notes")
        + "\n\n"
        + "\n".join(lines)
        + "\n\nOpen one with /password &lt;id&gt;"
    )


@router.message(Command("password"))
async def cmd_password(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    db_user: User | None,
) -> None:
    if not await require_access(message, db_user, session, Category.PASSWORDS):
        return
    arg = (command.args or "").strip()
    if not arg.isdigit():
        await message.answer("Usage: /password &lt;id&gt;")
        return

    note, content = await SecureNoteService(session).reveal(int(arg), db_user)
    await commit_update(session)
    await message.answer(
        "\n".join(
            [
                html.bold(html.quote(note.title)),
                f"Kind: {NOTE_CATEGORY_LABELS[note.category]}",
                f"From: {html.quote(note.sender.display_name)}",
                "",
                html.spoiler(html.quote(content)),
            ]
        )
    )


@router.message(Command("send_password"))
async def cmd_send_password(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    db_user: User | None,
    notifier: Notifier | None = None,
) -> None:
    if not await require_access(message, db_user, session, Category.PASSWORDS):
        return
    receiver_name, title, kind_text, content = split_args(command.args, 4)
    if not (receiver_name and title and kind_text and content):
        await message.answer(SEND_USAGE)
        return

    kind = parse_kind(kind_text)
    if kind is None:
        await message.answer(f"Unknown kind {html.quote(kind_text)}.\n\n" + SEND_USAGE)
        return

    receiver = await UserService(session).get_by_username(receiver_name)
    if receiver is None:
        await message.answer(f"User {html.quote(receiver_name)} was not found.")
        return
    if not await AccessControl(session).has_access(receiver, Category.PASSWORDS):
        await message.answer(f"{html.quote(receiver.display_name)} has no access to passwords.")
        return

    note = await SecureNoteService(session, notifier).create(
        sender_id=db_user.id,
        receiver_id=receiver.id,
        title=title,
        content=content,
        category=kind,
    )
    await commit_update(session)
    await message.answer(f"Secure note #{note.id} sent to {html.quote(receiver.display_name)}.")
