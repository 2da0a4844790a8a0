"""
IT Desk.

- backend/: REST admin panel, services, database, configuration
- telegram/: Telegram bot front end (aiogram v3)
"""
