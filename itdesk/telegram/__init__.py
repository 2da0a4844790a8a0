"""
Telegram Bot Module.

aiogram v3 front end for registration, equipment lookup, tasks and
secure notes. The bot polls on the same event loop as the FastAPI
application; the application owns one BotConnection on app.state.

Structure:
    itdesk/telegram/
    ├── bot.py               # Bot, Dispatcher and the restartable connection
    ├── guards.py            # Registration and permission checks
    ├── formatting.py        # Reply formatting
    ├── handlers/            # Command and message handlers
    ├── middlewares/         # Session, user context, logging, rate limiting
    ├── keyboards/           # Reply keyboards
    └── services/            # Outbound notifications
"""

from itdesk.telegram.bot import BotConnection, create_bot, create_dispatcher

__all__ = [
    "BotConnection",
    "create_bot",
    "create_dispatcher",
]
