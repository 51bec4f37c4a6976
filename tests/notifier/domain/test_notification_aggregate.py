"""Tests for Notification aggregate creation, read state and rendering."""

import pytest
from notifier.notification.mapping import NotificationIntent
from notifier.notification.notification import (
    Notification,
    NotificationPriority,
    NotificationType,
    ReferenceType,
)
from protean.exceptions import ValidationError


def _make_notification(**overrides):
    defaults = {
        "recipient_id": "user-b",
        "notification_type": NotificationType.FOLLOW.value,
        "title": "New Follower",
        "message": "alice started following you",
        "sender_id": "user-a",
    }
    defaults.update(overrides)
    return Notification.create(**defaults)


# ---------------------------------------------------------------
# Factory
# ---------------------------------------------------------------
class TestNotificationCreation:
    def test_create_sets_id(self):
        assert _make_notification().id is not None

    def test_create_is_unread(self):
        notification = _make_notification()
        assert notification.is_read is False
        assert notification.read_at is None

    def test_create_defaults_priority_to_medium(self):
        assert _make_notification().priority == NotificationPriority.MEDIUM.value

    def test_create_sets_timestamps(self):
        notification = _make_notification()
        assert notification.created_at is not None
        assert notification.updated_at == notification.created_at

    def test_create_stores_metadata_as_json(self):
        notification = _make_notification(metadata={"post_id": "p-1"})
        assert notification.get_metadata() == {"post_id": "p-1"}

    def test_create_raises_notification_created_event(self):
        notification = _make_notification(source_event="user.followed")
        assert len(notification._events) == 1
        event = notification._events[0]
        assert event.__class__.__name__ == "NotificationCreated"
        assert str(event.notification_id) == str(notification.id)
        assert event.source_event == "user.followed"

    def test_title_longer_than_200_chars_rejected(self):
        with pytest.raises(ValidationError):
            _make_notification(title="x" * 201)

    def test_message_longer_than_1000_chars_rejected(self):
        with pytest.raises(ValidationError):
            _make_notification(message="x" * 1001)

    def test_missing_recipient_rejected(self):
        with pytest.raises(ValidationError):
            _make_notification(recipient_id=None)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            _make_notification(notification_type="POKE")

    def test_from_intent_copies_fields(self):
        intent = NotificationIntent(
            recipient_id="user-b",
            sender_id="user-a",
            notification_type=NotificationType.LIKE,
            title="Post Liked",
            message="alice liked your post",
            reference_id="post-1",
            reference_type=ReferenceType.POST,
            priority=NotificationPriority.LOW,
            metadata={"post_id": "post-1"},
            source_event="post.liked",
        )

        notification = Notification.from_intent(intent)

        assert notification.notification_type == "LIKE"
        assert notification.reference_type == "POST"
        assert notification.priority == "LOW"
        assert notification.source_event == "post.liked"
        assert notification.get_metadata() == {"post_id": "post-1"}


# ---------------------------------------------------------------
# Read state
# ---------------------------------------------------------------
class TestReadState:
    def test_mark_read_sets_read_at(self):
        notification = _make_notification()
        notification.mark_read()
        assert notification.is_read is True
        assert notification.read_at is not None

    def test_mark_unread_clears_read_at(self):
        notification = _make_notification()
        notification.mark_read()
        notification.mark_unread()
        assert notification.is_read is False
        assert notification.read_at is None

    def test_read_at_tracks_is_read_through_transitions(self):
        notification = _make_notification()
        for is_read in [True, True, False, True, False, False]:
            notification.set_read_state(is_read)
            assert notification.is_read is is_read
            assert (notification.read_at is not None) is is_read

    def test_mark_read_twice_keeps_first_read_at(self):
        notification = _make_notification()
        notification.mark_read()
        first = notification.read_at
        notification.mark_read()
        assert notification.read_at == first

    def test_mark_read_refreshes_updated_at(self):
        notification = _make_notification()
        created = notification.updated_at
        notification.mark_read()
        assert notification.updated_at >= created

    def test_mark_read_raises_event(self):
        notification = _make_notification()
        notification._events.clear()
        notification.mark_read()
        assert [e.__class__.__name__ for e in notification._events] == ["NotificationRead"]

    def test_mark_unread_on_unread_raises_nothing(self):
        notification = _make_notification()
        notification._events.clear()
        notification.mark_unread()
        assert notification._events == []


# ---------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------
class TestPayload:
    def test_payload_shape(self):
        notification = _make_notification(reference_id="user-a", reference_type=ReferenceType.USER.value)
        payload = notification.to_payload()

        assert payload["id"] == str(notification.id)
        assert payload["recipient_id"] == "user-b"
        assert payload["sender_id"] == "user-a"
        assert payload["type"] == "FOLLOW"
        assert payload["reference_type"] == "USER"
        assert payload["is_read"] is False
        assert payload["read_at"] is None
        assert payload["metadata"] == {}
        assert isinstance(payload["created_at"], str)

    def test_payload_without_sender(self):
        payload = _make_notification(sender_id=None).to_payload()
        assert payload["sender_id"] is None
