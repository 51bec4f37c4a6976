"""Decides whether an intent becomes a stored notification.

The gate checks the in-app channel, which quiet hours never suppress, so
quiet hours do not stop creation; they only hold back push and email.
"""

import structlog
from notifier.notification.notification import DeliveryChannel
from notifier.preference.management import PreferenceService

logger = structlog.get_logger(__name__)


class PreferenceGate:
    def __init__(self, preferences: PreferenceService | None = None, channel=DeliveryChannel.IN_APP):
        self.preferences = preferences or PreferenceService()
        self.channel = channel

    def permits(self, intent, now=None) -> bool:
        """True when the recipient's preferences allow the intent.

        If preferences cannot be loaded the notification is allowed.
        """
        try:
            allowed = self.preferences.should_send(
                intent.recipient_id,
                intent.notification_type,
                self.channel,
                now=now,
            )
        except Exception as exc:
            logger.error(
                "Preference lookup failed, allowing notification",
                recipient_id=intent.recipient_id,
                notification_type=intent.notification_type.value,
                error=str(exc),
            )
            return True

        if not allowed:
            logger.info(
                "Notification filtered by user preferences",
                recipient_id=intent.recipient_id,
                notification_type=intent.notification_type.value,
                channel=self.channel.value,
            )
        return allowed
