"""Inbound handlers for social graph events (pulse.events exchange)."""

from notifier.notification.pipeline import NotificationPipeline


class SocialEventsHandler:
    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    def on_user_followed(self, data):
        return self.pipeline.process_event(
            "user.followed",
            {
                "follower_id": data.get("follower_id"),
                "follower_username": data.get("follower_username"),
                "following_id": data.get("following_id"),
            },
        )

    def on_user_unfollowed(self, data):
        return self.pipeline.process_event("user.unfollowed", data)

    def on_user_blocked(self, data):
        """The blocked user gets a security alert regardless of preferences."""
        return self.pipeline.process_event("user.blocked", data)
