"""Domain events for the NotificationPreferences aggregate."""

from notifier.domain import notifier
from protean.fields import DateTime, Identifier, String


@notifier.event(part_of="NotificationPreferences")
class PreferencesCreated:
    """Default preferences were created for a user."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    created_at: DateTime(required=True)


@notifier.event(part_of="NotificationPreferences")
class PreferencesUpdated:
    """Some preferences changed; ``changed`` names the sections touched."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    changed: String(max_length=200)  # comma-separated section names
    updated_at: DateTime(required=True)


@notifier.event(part_of="NotificationPreferences")
class PreferencesReset:
    """Preferences were reset to the defaults."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    reset_at: DateTime(required=True)
