"""Shared BDD fixtures and step definitions for the notifier."""

import pytest
from notifier.notification.notification import Notification
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Container for values captured by when-steps."""
    return {}


def _notifications_for(recipient_id):
    items = current_domain.repository_for(Notification)._dao.query.all().items
    return [n for n in items if n.recipient_id == recipient_id]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('user "{user_id}" is registered as "{username}"'))
def registered_user(registry, user_id, username):
    registry.deliver_to("user.registered", {"user_id": user_id, "username": username})


@given(parsers.cfparse('user "{user_id}" has disabled in-app {notification_type} notifications'))
def disabled_in_app(services, user_id, notification_type):
    services.preferences.update_preferences(
        user_id, {"preferences": {notification_type: {"in_app": False}}}
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('user "{user_id}" has {count:d} unread notification'))
@then(parsers.cfparse('user "{user_id}" has {count:d} unread notifications'))
def unread_count(services, user_id, count):
    assert services.notifications.get_unread_count(user_id) == count


@then(parsers.cfparse('user "{user_id}" has no notifications'))
def no_notifications(user_id):
    assert _notifications_for(user_id) == []


@then(parsers.cfparse('the latest notification for "{user_id}" reads "{message}"'))
def latest_message(services, user_id, message):
    listing = services.notifications.get_notifications(user_id)
    assert listing["notifications"][0]["message"] == message


@then(parsers.cfparse('{count:d} "{routing_key}" event was published'))
@then(parsers.cfparse('{count:d} "{routing_key}" events were published'))
def published_count(fake_publisher, count, routing_key):
    assert len(fake_publisher.messages_for(routing_key)) == count
