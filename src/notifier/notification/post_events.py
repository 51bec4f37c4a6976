"""Inbound handlers for post service events (post_events exchange)."""

import structlog
from notifier.notification.pipeline import NotificationPipeline

logger = structlog.get_logger(__name__)


class PostEventsHandler:
    """Translates post service payloads into pipeline events."""

    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    def on_post_created(self, data):
        return self.pipeline.process_event("post.created", data)

    def on_post_liked(self, data):
        return self.pipeline.process_event(
            "post.liked",
            {
                "post_id": data.get("post_id"),
                "post_author_id": data.get("author_id"),
                "user_id": data.get("user_id"),
                "user_username": data.get("user_username"),
            },
        )

    def on_post_commented(self, data):
        return self.pipeline.process_event(
            "comment.created",
            {
                "post_id": data.get("post_id"),
                "post_author_id": data.get("author_id"),
                "comment_id": data.get("comment_id"),
                "commenter_id": data.get("user_id"),
                "commenter_username": data.get("user_username"),
            },
        )

    def on_post_shared(self, data):
        return self.pipeline.process_event(
            "post.shared",
            {
                "post_id": data.get("post_id"),
                "post_author_id": data.get("author_id"),
                "user_id": data.get("user_id"),
                "user_username": data.get("user_username"),
            },
        )

    def on_post_mentioned(self, data):
        result = self.pipeline.process_mentions(data)
        logger.info(
            "Mentions processed",
            post_id=data.get("post_id"),
            mentioned=len(data.get("mentioned_users") or []),
            created=len(result.created),
        )
        return result
