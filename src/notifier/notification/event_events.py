"""Inbound handlers for event service events (event_events exchange)."""

from notifier.notification.pipeline import NotificationPipeline


class EventEventsHandler:
    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    def on_event_created(self, data):
        return self.pipeline.process_event("event.created", data)

    def on_rsvp_added(self, data):
        return self.pipeline.process_event(
            "event.rsvp.added",
            {
                "event_id": data.get("event_id"),
                "event_title": data.get("event_title"),
                "event_creator_id": data.get("creator_id"),
                "user_id": data.get("user_id"),
                "user_username": data.get("user_username"),
                "status": data.get("status"),
            },
        )

    def on_rsvp_removed(self, data):
        return self.pipeline.process_event("event.rsvp.removed", data)

    def on_event_updated(self, data):
        return self.pipeline.process_event("event.updated", data)

    def on_event_cancelled(self, data):
        """The creator is told directly; preferences are not consulted."""
        return self.pipeline.process_event("event.cancelled", data)
