"""Fake publisher — records published messages for testing."""

from uuid import uuid4

from notifier.publishing.publisher_port import PublisherPort


class FakePublisher(PublisherPort):
    """Publisher that records messages in memory for test assertions."""

    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Broker unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Broker unavailable"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, exchange: str, routing_key: str, message: dict) -> str:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        message_id = f"msg-{uuid4().hex[:12]}"
        self.published.append(
            {
                "message_id": message_id,
                "exchange": exchange,
                "routing_key": routing_key,
                "message": message,
            }
        )
        return message_id

    def messages_for(self, routing_key: str) -> list[dict]:
        return [record["message"] for record in self.published if record["routing_key"] == routing_key]

    def reset(self):
        """Clear published messages (useful between tests)."""
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Broker unavailable"
