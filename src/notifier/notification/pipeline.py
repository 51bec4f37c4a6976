"""Notification pipeline: map, gate and create.

``process_event`` takes an internal event type and its data, maps it to
intents, checks each intent against the recipient's preferences and creates
the permitted ones. System and security notices skip the preference check.
No-op and unknown event types complete without creating anything; only a
failure to build or store a notification raises.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from notifier.metrics import CREATED, FILTERED, IGNORED, UNKNOWN, PipelineMetrics
from notifier.notification.mapping import (
    DIRECT_MAPPERS,
    MAPPERS,
    NO_OP_EVENTS,
    map_event,
    map_user_mentioned,
    mention_entries,
)
from notifier.notification.notification import Notification
from notifier.notification.service import CreationResult, NotificationService
from notifier.preference.gate import PreferenceGate

logger = structlog.get_logger(__name__)


class ProcessingStatus(Enum):
    CREATED = CREATED
    FILTERED = FILTERED
    IGNORED = IGNORED
    UNKNOWN = UNKNOWN


@dataclass
class ProcessingResult:
    event_type: str
    status: ProcessingStatus
    created: list[CreationResult] = field(default_factory=list)
    filtered: int = 0

    @property
    def notifications(self):
        return [result.notification for result in self.created]


class NotificationPipeline:
    def __init__(
        self,
        notifications: NotificationService,
        gate: PreferenceGate,
        metrics: PipelineMetrics | None = None,
    ):
        self.notifications = notifications
        self.gate = gate
        self.metrics = metrics or PipelineMetrics()

    def process_event(self, event_type, data, now=None) -> ProcessingResult:
        if event_type in NO_OP_EVENTS:
            logger.debug("Event requires no notification", event_type=event_type)
            self.metrics.event_outcome(event_type, IGNORED)
            return ProcessingResult(event_type=event_type, status=ProcessingStatus.IGNORED)

        if event_type in DIRECT_MAPPERS:
            return self._process_intents(event_type, map_event(event_type, data), gated=False)

        if event_type not in MAPPERS:
            logger.warning("Unknown event type", event_type=event_type)
            self.metrics.event_outcome(event_type, UNKNOWN)
            return ProcessingResult(event_type=event_type, status=ProcessingStatus.UNKNOWN)

        return self._process_intents(event_type, map_event(event_type, data), gated=True, now=now)

    def process_mentions(self, data, now=None) -> ProcessingResult:
        """Fan a post.mentioned payload out to one notification per mentioned user."""
        intents = [map_user_mentioned(entry) for entry in mention_entries(data)]
        return self._process_intents("user.mentioned", intents, gated=True, now=now)

    def _process_intents(self, event_type, intents, gated, now=None) -> ProcessingResult:
        result = ProcessingResult(event_type=event_type, status=ProcessingStatus.IGNORED)

        for intent in intents:
            # Field validation runs before preferences are consulted
            notification = Notification.from_intent(intent)

            if gated and not self.gate.permits(intent, now=now):
                result.filtered += 1
                continue

            result.created.append(self.notifications.create_notification(notification))

        if result.created:
            result.status = ProcessingStatus.CREATED
        elif result.filtered:
            result.status = ProcessingStatus.FILTERED

        self.metrics.event_outcome(event_type, CREATED, len(result.created))
        self.metrics.event_outcome(event_type, FILTERED, result.filtered)
        if result.status == ProcessingStatus.IGNORED:
            self.metrics.event_outcome(event_type, IGNORED)

        return result
