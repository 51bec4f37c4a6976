"""Tests for the pure event-to-intent mapping rules."""

from notifier.notification.mapping import (
    DIRECT_MAPPERS,
    MAPPERS,
    NO_OP_EVENTS,
    is_known_event,
    map_comment_created,
    map_event,
    map_event_cancelled,
    map_event_rsvp_added,
    map_message_sent,
    map_post_liked,
    map_post_shared,
    map_user_blocked,
    map_user_followed,
    map_user_mentioned,
    mention_entries,
)
from notifier.notification.notification import (
    NotificationPriority,
    NotificationType,
    ReferenceType,
)


class TestFollow:
    def test_follow_targets_followed_user(self):
        intent = map_user_followed({"follower_id": "A", "follower_username": "alice", "following_id": "B"})

        assert intent.recipient_id == "B"
        assert intent.sender_id == "A"
        assert intent.notification_type == NotificationType.FOLLOW
        assert intent.title == "New Follower"
        assert intent.message == "alice started following you"
        assert intent.reference_id == "A"
        assert intent.reference_type == ReferenceType.USER
        assert intent.priority == NotificationPriority.MEDIUM

    def test_missing_username_falls_back_to_someone(self):
        intent = map_user_followed({"follower_id": "A", "following_id": "B"})
        assert intent.message == "Someone started following you"


class TestPostEvents:
    def test_like_is_low_priority_post_reference(self):
        intent = map_post_liked(
            {"post_id": "p-1", "post_author_id": "B", "user_id": "A", "user_username": "alice"}
        )
        assert intent.recipient_id == "B"
        assert intent.notification_type == NotificationType.LIKE
        assert intent.message == "alice liked your post"
        assert intent.reference_id == "p-1"
        assert intent.reference_type == ReferenceType.POST
        assert intent.priority == NotificationPriority.LOW

    def test_comment_is_high_priority(self):
        intent = map_comment_created(
            {
                "post_id": "p-1",
                "post_author_id": "B",
                "comment_id": "c-9",
                "commenter_id": "A",
                "commenter_username": "alice",
            }
        )
        assert intent.notification_type == NotificationType.COMMENT
        assert intent.priority == NotificationPriority.HIGH
        assert intent.metadata["comment_id"] == "c-9"
        assert intent.source_event == "comment.created"

    def test_share_maps_to_post_share(self):
        intent = map_post_shared({"post_id": "p-1", "post_author_id": "B", "user_id": "A"})
        assert intent.notification_type == NotificationType.POST_SHARE
        assert intent.message == "Someone shared your post"

    def test_mention_entry_maps_to_post_mention(self):
        intent = map_user_mentioned(
            {"post_id": "p-1", "mentioned_user_id": "C", "mentioner_id": "A", "mentioner_username": "alice"}
        )
        assert intent.recipient_id == "C"
        assert intent.notification_type == NotificationType.POST_MENTION
        assert intent.metadata["mentioned_user_id"] == "C"


class TestMentionFanOut:
    def test_one_entry_per_mentioned_user(self):
        data = {
            "post_id": "p-1",
            "user_id": "A",
            "user_username": "alice",
            "mentioned_users": [{"user_id": "B"}, {"user_id": "C", "username": "carol"}, {"user_id": "D"}],
        }

        intents = [map_user_mentioned(entry) for entry in mention_entries(data)]

        assert len(intents) == 3
        assert [i.metadata["mentioned_user_id"] for i in intents] == ["B", "C", "D"]
        assert all(i.notification_type == NotificationType.POST_MENTION for i in intents)
        assert all(i.sender_id == "A" for i in intents)

    def test_no_mentioned_users_gives_nothing(self):
        assert mention_entries({"post_id": "p-1", "user_id": "A"}) == []


class TestEventEvents:
    def test_rsvp_message_includes_lowercased_status(self):
        intent = map_event_rsvp_added(
            {
                "event_id": "e-1",
                "event_title": "Launch",
                "event_creator_id": "B",
                "user_id": "A",
                "user_username": "alice",
                "status": "GOING",
            }
        )
        assert intent.recipient_id == "B"
        assert intent.message == "alice is going to your event"
        assert intent.reference_type == ReferenceType.EVENT

    def test_cancellation_is_high_priority_system_notice(self):
        intent = map_event_cancelled({"event_id": "e-1", "creator_id": "B", "event_title": "Launch"})
        assert intent.recipient_id == "B"
        assert intent.notification_type == NotificationType.SYSTEM
        assert intent.priority == NotificationPriority.HIGH
        assert intent.title == "Event Cancelled"
        assert intent.message == 'Your event "Launch" has been cancelled'
        assert intent.metadata == {"event_id": "e-1", "event_title": "Launch"}


class TestSecurityAndMessaging:
    def test_block_alerts_blocked_user(self):
        intent = map_user_blocked({"blocker_id": "A", "blocked_user_id": "B", "reason": "spam"})
        assert intent.recipient_id == "B"
        assert intent.sender_id is None
        assert intent.notification_type == NotificationType.SECURITY_ALERT
        assert intent.priority == NotificationPriority.HIGH
        assert intent.metadata == {"blocker_id": "A", "reason": "spam"}

    def test_message_notifies_recipient(self):
        intent = map_message_sent(
            {"conversation_id": "conv-1", "message_id": "m-1", "sender_id": "A", "recipient_id": "B"}
        )
        assert intent.recipient_id == "B"
        assert intent.reference_id == "conv-1"
        assert intent.reference_type == ReferenceType.MESSAGE
        assert intent.priority == NotificationPriority.HIGH

    def test_message_to_self_produces_nothing(self):
        assert map_message_sent({"sender_id": "X", "recipient_id": "X", "conversation_id": "c"}) is None

    def test_self_message_maps_to_empty_list(self):
        assert map_event("message.sent", {"sender_id": "X", "recipient_id": "X"}) == []


class TestDispatchTables:
    def test_unknown_event_maps_to_nothing(self):
        assert map_event("user.poked", {"foo": "bar"}) == []
        assert is_known_event("user.poked") is False

    def test_no_op_events_are_known_but_unmapped(self):
        for event_type in NO_OP_EVENTS:
            assert is_known_event(event_type)
            assert map_event(event_type, {}) == []

    def test_tables_do_not_overlap(self):
        assert not set(MAPPERS) & set(DIRECT_MAPPERS)
        assert not set(MAPPERS) & NO_OP_EVENTS
        assert not set(DIRECT_MAPPERS) & NO_OP_EVENTS
