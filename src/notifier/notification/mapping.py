"""Pure translation from event data to notification intents.

One function per internal event type. Each takes the event's data dict and
returns a ``NotificationIntent``, or ``None`` when the event warrants no
notification. Mentions fan out, so ``map_event`` always returns a list.

Internal event types differ from broker routing keys in two places:
``post.commented`` arrives as ``comment.created`` and each entry of a
``post.mentioned`` event is mapped as ``user.mentioned``.
"""

from dataclasses import dataclass, field

from notifier.notification.notification import (
    NotificationPriority,
    NotificationType,
    ReferenceType,
)

FALLBACK_NAME = "Someone"


@dataclass(frozen=True)
class NotificationIntent:
    """A notification that should exist, before gating and persistence."""

    recipient_id: str
    notification_type: NotificationType
    title: str
    message: str
    sender_id: str | None = None
    reference_id: str | None = None
    reference_type: ReferenceType | None = None
    priority: NotificationPriority = NotificationPriority.MEDIUM
    metadata: dict = field(default_factory=dict)
    source_event: str | None = None


def _name(value):
    return value or FALLBACK_NAME


# ---------------------------------------------------------------------------
# Social graph
# ---------------------------------------------------------------------------
def map_user_followed(data):
    return NotificationIntent(
        recipient_id=data.get("following_id"),
        sender_id=data.get("follower_id"),
        notification_type=NotificationType.FOLLOW,
        title="New Follower",
        message=f"{_name(data.get('follower_username'))} started following you",
        reference_id=data.get("follower_id"),
        reference_type=ReferenceType.USER,
        priority=NotificationPriority.MEDIUM,
        metadata={"follower_username": data.get("follower_username")},
        source_event="user.followed",
    )


def map_user_blocked(data):
    """Security alert for the blocked user. Created without a preference check."""
    return NotificationIntent(
        recipient_id=data.get("blocked_user_id"),
        notification_type=NotificationType.SECURITY_ALERT,
        title="Account Blocked",
        message="Your account has been blocked by another user",
        priority=NotificationPriority.HIGH,
        metadata={"blocker_id": data.get("blocker_id"), "reason": data.get("reason")},
        source_event="user.blocked",
    )


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------
def map_post_liked(data):
    return NotificationIntent(
        recipient_id=data.get("post_author_id"),
        sender_id=data.get("user_id"),
        notification_type=NotificationType.LIKE,
        title="Post Liked",
        message=f"{_name(data.get('user_username'))} liked your post",
        reference_id=data.get("post_id"),
        reference_type=ReferenceType.POST,
        priority=NotificationPriority.LOW,
        metadata={"post_id": data.get("post_id"), "liker_username": data.get("user_username")},
        source_event="post.liked",
    )


def map_comment_created(data):
    return NotificationIntent(
        recipient_id=data.get("post_author_id"),
        sender_id=data.get("commenter_id"),
        notification_type=NotificationType.COMMENT,
        title="New Comment",
        message=f"{_name(data.get('commenter_username'))} commented on your post",
        reference_id=data.get("post_id"),
        reference_type=ReferenceType.POST,
        priority=NotificationPriority.HIGH,
        metadata={
            "post_id": data.get("post_id"),
            "comment_id": data.get("comment_id"),
            "commenter_username": data.get("commenter_username"),
        },
        source_event="comment.created",
    )


def map_post_shared(data):
    return NotificationIntent(
        recipient_id=data.get("post_author_id"),
        sender_id=data.get("user_id"),
        notification_type=NotificationType.POST_SHARE,
        title="Post Shared",
        message=f"{_name(data.get('user_username'))} shared your post",
        reference_id=data.get("post_id"),
        reference_type=ReferenceType.POST,
        priority=NotificationPriority.LOW,
        metadata={"post_id": data.get("post_id"), "sharer_username": data.get("user_username")},
        source_event="post.shared",
    )


def map_user_mentioned(data):
    return NotificationIntent(
        recipient_id=data.get("mentioned_user_id"),
        sender_id=data.get("mentioner_id"),
        notification_type=NotificationType.POST_MENTION,
        title="You were mentioned",
        message=f"{_name(data.get('mentioner_username'))} mentioned you in a post",
        reference_id=data.get("post_id"),
        reference_type=ReferenceType.POST,
        priority=NotificationPriority.HIGH,
        metadata={
            "post_id": data.get("post_id"),
            "mentioned_user_id": data.get("mentioned_user_id"),
            "mentioner_username": data.get("mentioner_username"),
        },
        source_event="user.mentioned",
    )


def mention_entries(data):
    """Split a post.mentioned payload into one user.mentioned entry per user."""
    return [
        {
            "post_id": data.get("post_id"),
            "mentioned_user_id": mentioned.get("user_id"),
            "mentioner_id": data.get("user_id"),
            "mentioner_username": data.get("user_username"),
        }
        for mentioned in data.get("mentioned_users") or []
    ]


# ---------------------------------------------------------------------------
# Events (calendar)
# ---------------------------------------------------------------------------
def map_event_rsvp_added(data):
    status = (data.get("status") or "attending").lower()
    return NotificationIntent(
        recipient_id=data.get("event_creator_id"),
        sender_id=data.get("user_id"),
        notification_type=NotificationType.EVENT_RSVP,
        title="Event RSVP",
        message=f"{_name(data.get('user_username'))} is {status} to your event",
        reference_id=data.get("event_id"),
        reference_type=ReferenceType.EVENT,
        priority=NotificationPriority.MEDIUM,
        metadata={
            "event_id": data.get("event_id"),
            "event_title": data.get("event_title"),
            "rsvp_status": data.get("status"),
        },
        source_event="event.rsvp.added",
    )


def map_event_cancelled(data):
    """System notice for the event creator. Created without a preference check."""
    return NotificationIntent(
        recipient_id=data.get("creator_id"),
        notification_type=NotificationType.SYSTEM,
        title="Event Cancelled",
        message=f'Your event "{data.get("event_title")}" has been cancelled',
        reference_id=data.get("event_id"),
        reference_type=ReferenceType.EVENT,
        priority=NotificationPriority.HIGH,
        metadata={"event_id": data.get("event_id"), "event_title": data.get("event_title")},
        source_event="event.cancelled",
    )


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------
def map_message_sent(data):
    # Messages to yourself never notify
    if data.get("sender_id") == data.get("recipient_id"):
        return None

    return NotificationIntent(
        recipient_id=data.get("recipient_id"),
        sender_id=data.get("sender_id"),
        notification_type=NotificationType.MESSAGE,
        title="New Message",
        message=f"{_name(data.get('sender_username'))} sent you a message",
        reference_id=data.get("conversation_id"),
        reference_type=ReferenceType.MESSAGE,
        priority=NotificationPriority.HIGH,
        metadata={
            "conversation_id": data.get("conversation_id"),
            "message_id": data.get("message_id"),
            "sender_username": data.get("sender_username"),
        },
        source_event="message.sent",
    )


# ---------------------------------------------------------------------------
# Dispatch tables
# ---------------------------------------------------------------------------
MAPPERS = {
    "user.followed": map_user_followed,
    "post.liked": map_post_liked,
    "comment.created": map_comment_created,
    "post.shared": map_post_shared,
    "user.mentioned": map_user_mentioned,
    "event.rsvp.added": map_event_rsvp_added,
    "message.sent": map_message_sent,
}

# Recipients of these are notified regardless of their preferences
DIRECT_MAPPERS = {
    "event.cancelled": map_event_cancelled,
    "user.blocked": map_user_blocked,
}

NO_OP_EVENTS = frozenset(
    {
        "post.created",
        "event.created",
        "event.updated",
        "event.rsvp.removed",
        "user.unfollowed",
        "message.read",
        "user.online",
        "user.offline",
    }
)


def is_known_event(event_type):
    return event_type in MAPPERS or event_type in DIRECT_MAPPERS or event_type in NO_OP_EVENTS


def map_event(event_type, data):
    """Map an internal event to zero or more intents. Unknown types map to nothing."""
    mapper = MAPPERS.get(event_type) or DIRECT_MAPPERS.get(event_type)
    if mapper is None:
        return []

    intent = mapper(data)
    return [intent] if intent is not None else []
