"""Prometheus instrumentation for the notification pipeline.

Each ``PipelineMetrics`` owns its own ``CollectorRegistry`` so several
pipelines (or tests) can run in one process without duplicate-metric errors.
``sample`` reads a counter back, which is how tests assert on outcomes.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram

# Consumer dispositions
SUCCESS = "success"
ERROR = "error"

# Pipeline outcomes
CREATED = "created"
FILTERED = "filtered_by_preferences"
IGNORED = "ignored"
UNKNOWN = "unknown_event"


class PipelineMetrics:
    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        self.messages = Counter(
            "notifier_messages",
            "Broker messages handled, by routing key and disposition",
            ["routing_key", "result"],
            registry=self.registry,
        )
        self.events = Counter(
            "notifier_events",
            "Events run through the pipeline, by event type and outcome",
            ["event_type", "outcome"],
            registry=self.registry,
        )
        self.notifications_created = Counter(
            "notifier_notifications_created",
            "Notifications stored, by notification type",
            ["notification_type"],
            registry=self.registry,
        )
        self.cache_operations = Counter(
            "notifier_cache_operations",
            "Read-through cache operations, by operation and result",
            ["operation", "result"],
            registry=self.registry,
        )
        self.publications = Counter(
            "notifier_publications",
            "Outbound notification.created publications, by result",
            ["result"],
            registry=self.registry,
        )
        self.processing_seconds = Histogram(
            "notifier_message_processing_seconds",
            "Time spent handling one broker message",
            ["routing_key"],
            registry=self.registry,
        )

    def message_handled(self, routing_key: str, result: str) -> None:
        self.messages.labels(routing_key=routing_key, result=result).inc()

    def event_outcome(self, event_type: str, outcome: str, count: int = 1) -> None:
        if count:
            self.events.labels(event_type=event_type, outcome=outcome).inc(count)

    def notification_created(self, notification_type: str) -> None:
        self.notifications_created.labels(notification_type=notification_type).inc()

    def cache_operation(self, operation: str, result: str) -> None:
        self.cache_operations.labels(operation=operation, result=result).inc()

    def publication(self, result: str) -> None:
        self.publications.labels(result=result).inc()

    def sample(self, name: str, **labels) -> float:
        """Current value of a counter (``name`` without the ``_total`` suffix)."""
        return self.registry.get_sample_value(f"{name}_total", labels) or 0.0
