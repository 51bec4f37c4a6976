"""Application tests for the broker subscribers and the engine wiring."""

from unittest.mock import MagicMock

from notifier.consumer.subscribers import PostLikedSubscriber, RoutedSubscriber
from notifier.domain import notifier
from notifier.notification.notification import Notification
from protean import current_domain
from protean.server.engine import Engine


def _stored(recipient_id=None):
    items = current_domain.repository_for(Notification)._dao.query.all().items
    return [n for n in items if recipient_id is None or n.recipient_id == recipient_id]


def _publish(stream, message):
    return current_domain.brokers["default"].publish(stream, message)


class TestRegistration:
    def test_one_subscriber_per_binding(self, registry):
        streams = [record.cls.meta_.stream for record in notifier.registry.subscribers.values()]

        assert sorted(streams) == sorted(binding.stream for binding in registry.bindings)
        assert len(streams) == 20

    def test_subscribers_share_the_routing_base(self):
        for record in notifier.registry.subscribers.values():
            assert issubclass(record.cls, RoutedSubscriber)
            assert record.cls.meta_.broker == "default"

    def test_engine_subscribes_to_every_stream(self, registry):
        engine = Engine(notifier, test_mode=True)
        try:
            streams = {subscription.stream_name for subscription in engine._broker_subscriptions.values()}
        finally:
            engine.loop.close()

        assert streams == {binding.stream for binding in registry.bindings}


class TestDelivery:
    def test_published_follow_creates_notification(self, registry):
        _publish(
            "pulse.events::user.followed",
            {"follower_id": "A", "follower_username": "alice", "following_id": "B"},
        )

        [notification] = _stored("B")
        assert notification.notification_type == "FOLLOW"
        assert notification.sender_id == "A"

    def test_subscriber_delivers_by_its_stream(self, registry):
        PostLikedSubscriber()({"post_id": "p1", "author_id": "B", "user_id": "A"})

        assert _stored("B")[0].notification_type == "LIKE"

    def test_rejected_message_does_not_raise(self, registry, services):
        PostLikedSubscriber()({"post_id": "p1", "user_id": "A"})

        assert _stored() == []
        assert services.metrics.sample("notifier_messages", routing_key="post.liked", result="error") == 1


class TestIsolation:
    def test_connection_failure_on_one_stream_leaves_others_running(self, registry, services, monkeypatch):
        monkeypatch.setattr(
            services.profiles,
            "upsert",
            MagicMock(side_effect=ConnectionError("redis connection reset")),
        )

        _publish("user_events::user.registered", {"user_id": "A", "username": "alice"})
        _publish("pulse.events::user.followed", {"follower_id": "A", "following_id": "B"})
        _publish("messaging_events::message.sent", {"conversation_id": "c1", "sender_id": "A", "recipient_id": "B"})

        assert sorted(n.notification_type for n in _stored("B")) == ["FOLLOW", "MESSAGE"]
        assert services.metrics.sample("notifier_messages", routing_key="user.registered", result="error") == 1

    def test_store_failure_is_isolated_per_message(self, registry, services, monkeypatch):
        original_add = services.store.add
        failures = iter([ConnectionError("database connection reset")])

        def flaky_add(notification):
            error = next(failures, None)
            if error is not None:
                raise error
            return original_add(notification)

        monkeypatch.setattr(services.store, "add", flaky_add)

        _publish("pulse.events::user.followed", {"follower_id": "A", "following_id": "B"})
        _publish("pulse.events::user.followed", {"follower_id": "C", "following_id": "B"})

        assert [n.sender_id for n in _stored("B")] == ["C"]
