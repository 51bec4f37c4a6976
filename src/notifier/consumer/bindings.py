"""Queue bindings for every inbound routing key.

Queues are named ``notifier.<group>.<routing_key>``; one queue per routing
key so a slow or failing event type never holds up the others.
"""

from notifier.consumer.registry import ConsumerRegistry
from notifier.notification.event_events import EventEventsHandler
from notifier.notification.messaging_events import MessagingEventsHandler
from notifier.notification.post_events import PostEventsHandler
from notifier.notification.social_events import SocialEventsHandler
from notifier.profile.user_events import UserEventsHandler

USER_EXCHANGE = "user_events"
POST_EXCHANGE = "post_events"
EVENT_EXCHANGE = "event_events"
SOCIAL_EXCHANGE = "pulse.events"
MESSAGING_EXCHANGE = "messaging_events"

QUEUE_PREFIX = "notifier"


def queue_name(group, routing_key):
    return f"{QUEUE_PREFIX}.{group}.{routing_key}"


def build_registry(services) -> ConsumerRegistry:
    """Create a registry with inbound bindings wired to the given services."""
    users = UserEventsHandler(services.profiles)
    posts = PostEventsHandler(services.pipeline)
    events = EventEventsHandler(services.pipeline)
    social = SocialEventsHandler(services.pipeline)
    messaging = MessagingEventsHandler(services.pipeline)

    table = [
        ("user", USER_EXCHANGE, "user.registered", users.on_user_registered),
        ("user", USER_EXCHANGE, "user.updated", users.on_user_updated),
        ("user", USER_EXCHANGE, "user.deleted", users.on_user_deleted),
        ("post", POST_EXCHANGE, "post.created", posts.on_post_created),
        ("post", POST_EXCHANGE, "post.liked", posts.on_post_liked),
        ("post", POST_EXCHANGE, "post.commented", posts.on_post_commented),
        ("post", POST_EXCHANGE, "post.shared", posts.on_post_shared),
        ("post", POST_EXCHANGE, "post.mentioned", posts.on_post_mentioned),
        ("event", EVENT_EXCHANGE, "event.created", events.on_event_created),
        ("event", EVENT_EXCHANGE, "event.rsvp.added", events.on_rsvp_added),
        ("event", EVENT_EXCHANGE, "event.rsvp.removed", events.on_rsvp_removed),
        ("event", EVENT_EXCHANGE, "event.updated", events.on_event_updated),
        ("event", EVENT_EXCHANGE, "event.cancelled", events.on_event_cancelled),
        ("social", SOCIAL_EXCHANGE, "user.followed", social.on_user_followed),
        ("social", SOCIAL_EXCHANGE, "user.unfollowed", social.on_user_unfollowed),
        ("social", SOCIAL_EXCHANGE, "user.blocked", social.on_user_blocked),
        ("messaging", MESSAGING_EXCHANGE, "message.sent", messaging.on_message_sent),
        ("messaging", MESSAGING_EXCHANGE, "message.read", messaging.on_message_read),
        ("messaging", MESSAGING_EXCHANGE, "user.online", messaging.on_user_online),
        ("messaging", MESSAGING_EXCHANGE, "user.offline", messaging.on_user_offline),
    ]

    registry = ConsumerRegistry(metrics=services.metrics)
    for group, exchange, routing_key, handler in table:
        registry.bind(queue_name(group, routing_key), exchange, routing_key, handler)
    return registry
