"""
Registration Handlers.

/start, role selection, /logout, /exit and /help. Role selection is the
only multi-step flow in the bot and needs no FSM state: the role buttons
are only offered to unregistered users, and a registered user pressing
one is refused.
"""

from aiogram import F, Router, html
from aiogram.filters import Command, CommandStart
from aiogram.types import Message, ReplyKeyboardRemove
from aiogram.types import User as TelegramUser
from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.logging import get_logger, log_with_source
from itdesk.backend.models.enums import Category
from itdesk.backend.models.user import User
from itdesk.backend.services.access import AccessControl
from itdesk.backend.services.bot_settings import BotSettingsService
from itdesk.backend.services.outbox import Notifier
from itdesk.backend.services.user import UserService
from itdesk.telegram.guards import SECTION_NAMES, require_registered
from itdesk.telegram.keyboards.common import (
    HELP_BUTTON,
    ROLE_BUTTONS,
    ROLE_LABELS,
    get_main_menu_keyboard,
    get_role_keyboard,
)
from itdesk.telegram.middlewares.db_session import commit_update

logger = get_logger(__name__)

router = Router(name="registration")

HELP_TEXT = "\n".join(
    [
        html.bold("Available commands"),
        "",
        "/start - register or open the main menu",
        "/help - show this message",
        "",
        html.bold("Equipment"),
        "/inventory - equipment search help",
        "/inventory_number &lt;number&gt; - find by inventory number",
        "/inventory_user &lt;name&gt; - find by employee name",
        "",
        html.bold("Tasks"),
        "/tasks - your tasks",
        "/new_task title | description | @sysadmin - create a task",
        "",
        html.bold("Passwords"),
        "/passwords - your secure notes",
        "/password &lt;id&gt; - open a secure note",
        "/send_password @user | title | kind | content - send a secure note",
        "",
        html.bold("Account"),
        "/logout - deactivate your account",
        "/exit - delete all your data",
    ]
)


def _sections_text(permissions: dict[Category, bool]) -> str:
    granted = [SECTION_NAMES[c] for c, allowed in permissions.items() if allowed]
    if not granted:
        return "You have no sections available yet. Ask an administrator for access."
    return "Available sections: " + ", ".join(granted) + "."


@router.message(CommandStart())
async def cmd_start(
    message: Message,
    session: AsyncSession,
    db_user: User | None,
    telegram_user: TelegramUser,
) -> None:
    """Greet returning users with their menu; offer roles to everyone else."""
    if db_user is not None and db_user.is_registered:
        permissions = await AccessControl(session).permission_map(db_user.id)
        await message.answer(
            f"Welcome back, {html.bold(html.quote(db_user.display_name))}!\n{_sections_text(permissions)}",
            reply_markup=get_main_menu_keyboard(permissions),
        )
        return

    settings = await BotSettingsService(session).get()
    await message.answer(
        html.quote(settings.welcome_message),
        reply_markup=get_role_keyboard(),
    )
    log_with_source(logger, "telegram", "info", "Registration offered", telegram_id=telegram_user.id)


@router.message(F.text.in_(list(ROLE_BUTTONS)))
async def select_role(
    message: Message,
    session: AsyncSession,
    db_user: User | None,
    telegram_user: TelegramUser,
    notifier: Notifier | None = None,
) -> None:
    """Complete registration with the chosen role and its default permissions."""
    if db_user is not None and db_user.is_registered:
        await message.answer(
            f"You are already registered as {ROLE_LABELS[db_user.role]}. "
            "Use /logout first to choose a different role."
        )
        return

    role = ROLE_BUTTONS[message.text]
    user, permissions = await UserService(session, notifier).register(
        telegram_id=telegram_user.id,
        role=role,
        username=telegram_user.username,
        first_name=telegram_user.first_name,
        last_name=telegram_user.last_name,
    )
    await commit_update(session)
    await message.answer(
        f"You are registered as {html.bold(ROLE_LABELS[role])}.\n{_sections_text(permissions)}",
        reply_markup=get_main_menu_keyboard(permissions),
    )


@router.message(Command("logout"))
async def cmd_logout(message: Message, session: AsyncSession, db_user: User | None) -> None:
    if not await require_registered(message, db_user):
        return
    await UserService(session).logout(db_user)
    await commit_update(session)
    await message.answer(
        "You have been logged out and your access was revoked. Send /start to register again.",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(Command("exit"))
async def cmd_exit(message: Message, session: AsyncSession, db_user: User | None) -> None:
    """Delete the caller and everything that depends on them."""
    if db_user is None:
        await message.answer("There is no data stored about you.")
        return
    await UserService(session).delete_user(db_user.id)
    await commit_update(session)
    await message.answer(
        "All your data has been deleted. Send /start if you want to register again.",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(Command("help"))
@router.message(F.text == HELP_BUTTON)
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)
