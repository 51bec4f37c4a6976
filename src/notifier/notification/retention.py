"""Retention sweep for read notifications.

Invoked by a scheduler or cron. Removes notifications that are both read and
older than the window; unread notifications are kept however old they are.
"""

from datetime import UTC, datetime

import structlog
from notifier.domain import notifier
from notifier.notification.notification import Notification
from notifier.settings import Settings
from notifier.wiring import build_services
from protean.fields import DateTime, Integer
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifier.command(part_of="Notification")
class CleanupReadNotifications:
    """Request to delete read notifications older than ``older_than_days``."""

    older_than_days: Integer(min_value=0)  # Defaults to NOTIFICATION_RETENTION_DAYS
    as_of: DateTime()  # Defaults to now


@notifier.command_handler(part_of=Notification)
class NotificationRetentionHandler:
    @handle(CleanupReadNotifications)
    def cleanup_read_notifications(self, command: CleanupReadNotifications):
        settings = Settings.from_env()
        days = command.older_than_days if command.older_than_days is not None else settings.notification_retention_days

        services = build_services(settings)
        result = services.notifications.cleanup_old_notifications(days, now=command.as_of or datetime.now(UTC))

        logger.info(
            "Notification retention sweep finished",
            deleted_count=result.deleted_count,
            older_than_days=days,
        )
        return result.deleted_count
