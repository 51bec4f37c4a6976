"""Domain events for the Notification aggregate."""

from notifier.domain import notifier
from protean.fields import DateTime, Identifier, String


@notifier.event(part_of="Notification")
class NotificationCreated:
    """A notification was stored for a recipient."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    sender_id: Identifier()
    notification_type: String(required=True)
    priority: String(required=True)
    source_event: String()
    created_at: DateTime(required=True)


@notifier.event(part_of="Notification")
class NotificationRead:
    """The recipient marked a notification as read."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    read_at: DateTime(required=True)


@notifier.event(part_of="Notification")
class NotificationUnread:
    """The recipient marked a notification as unread again."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    updated_at: DateTime(required=True)
