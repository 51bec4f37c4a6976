"""Broker subscribers, one per inbound routing key.

Each subscriber listens on one ``<exchange>::<routing_key>`` stream and hands
the raw payload to the consumer registry, which decodes it, runs the handler
and decides ACK or REJECT. Rejected messages are logged and dropped there;
the subscriber never raises, so the engine acknowledges every message and
nothing is redelivered.
"""

from notifier.consumer import get_registry
from notifier.consumer.bindings import (
    EVENT_EXCHANGE,
    MESSAGING_EXCHANGE,
    POST_EXCHANGE,
    SOCIAL_EXCHANGE,
    USER_EXCHANGE,
)
from notifier.domain import notifier
from notifier.publishing.broker_publisher import split_stream, stream_name
from protean.core.subscriber import BaseSubscriber


class RoutedSubscriber(BaseSubscriber):
    """Delivers the payload to the registry binding for this subscriber's stream."""

    def __call__(self, payload: dict) -> None:
        exchange, routing_key = split_stream(self.meta_.stream)
        get_registry().deliver_to(routing_key, payload, exchange=exchange)


# ---------------------------------------------------------------------------
# user_events
# ---------------------------------------------------------------------------
@notifier.subscriber(stream=stream_name(USER_EXCHANGE, "user.registered"))
class UserRegisteredSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(USER_EXCHANGE, "user.updated"))
class UserUpdatedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(USER_EXCHANGE, "user.deleted"))
class UserDeletedSubscriber(RoutedSubscriber):
    pass


# ---------------------------------------------------------------------------
# post_events
# ---------------------------------------------------------------------------
@notifier.subscriber(stream=stream_name(POST_EXCHANGE, "post.created"))
class PostCreatedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(POST_EXCHANGE, "post.liked"))
class PostLikedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(POST_EXCHANGE, "post.commented"))
class PostCommentedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(POST_EXCHANGE, "post.shared"))
class PostSharedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(POST_EXCHANGE, "post.mentioned"))
class PostMentionedSubscriber(RoutedSubscriber):
    pass


# ---------------------------------------------------------------------------
# event_events
# ---------------------------------------------------------------------------
@notifier.subscriber(stream=stream_name(EVENT_EXCHANGE, "event.created"))
class EventCreatedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(EVENT_EXCHANGE, "event.rsvp.added"))
class RsvpAddedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(EVENT_EXCHANGE, "event.rsvp.removed"))
class RsvpRemovedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(EVENT_EXCHANGE, "event.updated"))
class EventUpdatedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(EVENT_EXCHANGE, "event.cancelled"))
class EventCancelledSubscriber(RoutedSubscriber):
    pass


# ---------------------------------------------------------------------------
# pulse.events (social graph)
# ---------------------------------------------------------------------------
@notifier.subscriber(stream=stream_name(SOCIAL_EXCHANGE, "user.followed"))
class UserFollowedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(SOCIAL_EXCHANGE, "user.unfollowed"))
class UserUnfollowedSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(SOCIAL_EXCHANGE, "user.blocked"))
class UserBlockedSubscriber(RoutedSubscriber):
    pass


# ---------------------------------------------------------------------------
# messaging_events
# ---------------------------------------------------------------------------
@notifier.subscriber(stream=stream_name(MESSAGING_EXCHANGE, "message.sent"))
class MessageSentSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(MESSAGING_EXCHANGE, "message.read"))
class MessageReadSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(MESSAGING_EXCHANGE, "user.online"))
class UserOnlineSubscriber(RoutedSubscriber):
    pass


@notifier.subscriber(stream=stream_name(MESSAGING_EXCHANGE, "user.offline"))
class UserOfflineSubscriber(RoutedSubscriber):
    pass
