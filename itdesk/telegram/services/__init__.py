"""
Telegram Bot Services.

Outbound chat notifications over the owned bot connection.
"""

from itdesk.telegram.services.notifications import NotificationResult, NotificationService

__all__ = [
    "NotificationResult",
    "NotificationService",
]
