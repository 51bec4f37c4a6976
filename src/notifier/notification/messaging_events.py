"""Inbound handlers for messaging service events (messaging_events exchange)."""

from notifier.notification.pipeline import NotificationPipeline


class MessagingEventsHandler:
    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    def on_message_sent(self, data):
        return self.pipeline.process_event(
            "message.sent",
            {
                "conversation_id": data.get("conversation_id"),
                "message_id": data.get("message_id"),
                "sender_id": data.get("sender_id"),
                "sender_username": data.get("sender_username"),
                "recipient_id": data.get("recipient_id"),
            },
        )

    def on_message_read(self, data):
        return self.pipeline.process_event("message.read", data)

    def on_user_online(self, data):
        return self.pipeline.process_event("user.online", data)

    def on_user_offline(self, data):
        return self.pipeline.process_event("user.offline", data)
