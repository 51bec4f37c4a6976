"""Load-or-create, partial updates, eligibility checks.

Preferences are created lazily: the first read or eligibility check for a user
stores the defaults. Two concurrent first accesses may both try to create the
record; the unique ``user_id`` makes the loser fail and it re-reads instead.
"""

import structlog
from notifier.notification.notification import DeliveryChannel
from notifier.preference.preference import NotificationPreferences
from notifier.preference.schemas import PreferenceUpdate, parse_preference_update
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


class PreferenceService:
    def _repo(self):
        return current_domain.repository_for(NotificationPreferences)

    def find(self, user_id):
        """Stored preferences for a user, or None."""
        items = self._repo()._dao.query.filter(user_id=str(user_id)).all().items
        return items[0] if items else None

    def get_or_create(self, user_id):
        preferences = self.find(user_id)
        if preferences is not None:
            return preferences

        preferences = NotificationPreferences.create_default(user_id=str(user_id))
        try:
            self._repo().add(preferences)
        except ValidationError:
            # Lost a creation race against another consumer
            existing = self.find(user_id)
            if existing is None:
                raise
            return existing

        logger.info(
            "Default notification preferences created",
            user_id=str(user_id),
            preference_id=str(preferences.id),
        )
        return preferences

    def get_bulk(self, user_ids):
        """Preferences for many users, keyed by user id. Missing users are created."""
        return {str(user_id): self.get_or_create(user_id) for user_id in dict.fromkeys(user_ids)}

    def update_preferences(self, user_id, payload):
        """Validate and merge a partial update. ``payload`` is a dict or a PreferenceUpdate."""
        update = payload if isinstance(payload, PreferenceUpdate) else parse_preference_update(payload)

        preferences = self.get_or_create(user_id)
        changed = preferences.apply_update(update)
        if changed:
            self._repo().add(preferences)
            logger.info("Notification preferences updated", user_id=str(user_id), changed=changed)
        return preferences

    def update_type_preference(self, user_id, notification_type, channel, enabled):
        preferences = self.get_or_create(user_id)
        preferences.set_type_preference(notification_type, channel, enabled)
        self._repo().add(preferences)
        return preferences

    def update_channel(self, user_id, channel, enabled):
        preferences = self.get_or_create(user_id)
        preferences.set_channel(channel, enabled)
        self._repo().add(preferences)
        return preferences

    def update_quiet_hours(self, user_id, enabled=None, start_time=None, end_time=None, timezone=None):
        preferences = self.get_or_create(user_id)
        preferences.update_quiet_hours(
            enabled=enabled,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone,
        )
        self._repo().add(preferences)
        return preferences

    def reset_to_default(self, user_id):
        preferences = self.get_or_create(user_id)
        preferences.reset_to_default()
        self._repo().add(preferences)
        logger.info("Notification preferences reset", user_id=str(user_id))
        return preferences

    def should_send(self, user_id, notification_type, channel=DeliveryChannel.IN_APP, now=None):
        return self.get_or_create(user_id).should_send(notification_type, channel, now=now)

    def delete(self, user_id):
        """Remove a user's preferences. Returns False when none were stored."""
        preferences = self.find(user_id)
        if preferences is None:
            return False

        self._repo()._dao.delete(preferences)
        logger.info("Notification preferences deleted", user_id=str(user_id))
        return True
