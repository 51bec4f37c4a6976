"""Inbound handlers for user service events (user_events exchange).

User lifecycle events keep the sender profile cache in step with the user
service; they never produce notifications.
"""

import structlog
from notifier.profile.cache import SenderProfileCache

logger = structlog.get_logger(__name__)


class UserEventsHandler:
    def __init__(self, profiles: SenderProfileCache | None = None):
        self.profiles = profiles or SenderProfileCache()

    def on_user_registered(self, data):
        return self.profiles.upsert(data)

    def on_user_updated(self, data):
        return self.profiles.upsert(data)

    def on_user_deleted(self, data):
        removed = self.profiles.remove(data.get("user_id"))
        if not removed:
            logger.info("No sender profile to remove", user_id=data.get("user_id"))
        return removed
