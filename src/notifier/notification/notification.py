"""Notification aggregate — one in-app notification for one recipient.

Notifications are created from platform events (follows, likes, comments,
mentions, RSVPs, messages) or directly for system and security notices.
After creation the only state that changes is the read flag:

    unread ⇄ read

``read_at`` is set exactly when ``is_read`` is true; every transition keeps
the two in step and refreshes ``updated_at``.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from notifier.domain import notifier
from notifier.notification.events import (
    NotificationCreated,
    NotificationRead,
    NotificationUnread,
)
from protean.fields import Boolean, DateTime, Identifier, String, Text


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    FOLLOW = "FOLLOW"
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    EVENT_INVITE = "EVENT_INVITE"
    EVENT_RSVP = "EVENT_RSVP"
    POST_MENTION = "POST_MENTION"
    SYSTEM = "SYSTEM"
    MESSAGE = "MESSAGE"
    POST_SHARE = "POST_SHARE"
    EVENT_REMINDER = "EVENT_REMINDER"
    FRIEND_REQUEST = "FRIEND_REQUEST"
    ACCOUNT_VERIFICATION = "ACCOUNT_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"
    SECURITY_ALERT = "SECURITY_ALERT"


class ReferenceType(Enum):
    POST = "POST"
    EVENT = "EVENT"
    USER = "USER"
    MESSAGE = "MESSAGE"
    COMMENT = "COMMENT"


class NotificationPriority(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class DeliveryChannel(Enum):
    EMAIL = "email"
    PUSH = "push"
    IN_APP = "in_app"


TITLE_MAX_LENGTH = 200
MESSAGE_MAX_LENGTH = 1000


def _isoformat(value):
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifier.aggregate
class Notification:
    """A notification addressed to a single recipient."""

    # Parties
    recipient_id: Identifier(required=True)
    sender_id: Identifier()

    # Content
    notification_type: String(choices=NotificationType, required=True)
    title: String(required=True, max_length=TITLE_MAX_LENGTH)
    message: String(required=True, max_length=MESSAGE_MAX_LENGTH)
    priority: String(choices=NotificationPriority, default=NotificationPriority.MEDIUM.value)

    # What the notification points at
    reference_id: String(max_length=255)
    reference_type: String(choices=ReferenceType)

    # Free-form details, rendered back as "metadata"
    context_data: Text()  # JSON object

    # Event that produced the notification
    source_event: String(max_length=100)

    # Read state
    is_read: Boolean(default=False)
    read_at: DateTime()

    # Timestamps
    created_at: DateTime(required=True)
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        recipient_id,
        notification_type,
        title,
        message,
        sender_id=None,
        reference_id=None,
        reference_type=None,
        priority=NotificationPriority.MEDIUM.value,
        metadata=None,
        source_event=None,
    ):
        """Create a new, unread notification."""
        now = datetime.now(UTC)

        notification = cls(
            recipient_id=recipient_id,
            sender_id=sender_id,
            notification_type=notification_type,
            title=title,
            message=message,
            reference_id=reference_id,
            reference_type=reference_type,
            priority=priority,
            context_data=json.dumps(metadata or {}),
            source_event=source_event,
            is_read=False,
            read_at=None,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                sender_id=str(sender_id) if sender_id else None,
                notification_type=notification_type,
                priority=priority,
                source_event=source_event,
                created_at=now,
            )
        )

        return notification

    @classmethod
    def from_intent(cls, intent):
        return cls.create(
            recipient_id=intent.recipient_id,
            notification_type=intent.notification_type.value,
            title=intent.title,
            message=intent.message,
            sender_id=intent.sender_id,
            reference_id=intent.reference_id,
            reference_type=intent.reference_type.value if intent.reference_type else None,
            priority=intent.priority.value,
            metadata=intent.metadata,
            source_event=intent.source_event,
        )

    # -------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------
    def mark_read(self, read_at=None):
        """Mark as read. Already-read notifications keep their read_at."""
        if self.is_read:
            return

        now = read_at or datetime.now(UTC)
        self.is_read = True
        self.read_at = now
        self.updated_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                read_at=now,
            )
        )

    def mark_unread(self):
        """Mark as unread, clearing read_at."""
        if not self.is_read:
            return

        now = datetime.now(UTC)
        self.is_read = False
        self.read_at = None
        self.updated_at = now

        self.raise_(
            NotificationUnread(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                updated_at=now,
            )
        )

    def set_read_state(self, is_read):
        if is_read:
            self.mark_read()
        else:
            self.mark_unread()

    # -------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------
    def get_metadata(self):
        return json.loads(self.context_data) if self.context_data else {}

    def to_payload(self):
        """Plain-dict rendering used for listings and outbound events."""
        return {
            "id": str(self.id),
            "recipient_id": str(self.recipient_id),
            "sender_id": str(self.sender_id) if self.sender_id else None,
            "type": self.notification_type,
            "title": self.title,
            "message": self.message,
            "reference_id": self.reference_id,
            "reference_type": self.reference_type,
            "is_read": self.is_read,
            "read_at": _isoformat(self.read_at),
            "priority": self.priority,
            "metadata": self.get_metadata(),
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
