"""Outbound publication of ``notification.created``.

Real-time fan-out services consume this event. The payload is the full
notification plus a small sender block (``None`` when the sender is unknown).
Publication is best-effort: the notification is already stored, so a broker
failure is logged and returned as ``Failed`` rather than raised.
"""

import structlog
from notifier.metrics import ERROR, PipelineMetrics
from notifier.profile.cache import SenderProfileCache
from notifier.results import OK, Failed

logger = structlog.get_logger(__name__)

NOTIFICATION_EXCHANGE = "notification_events"
NOTIFICATION_CREATED = "notification.created"


def build_created_payload(notification, sender_profile=None):
    payload = notification.to_payload()
    payload["sender"] = sender_profile.summary() if sender_profile is not None else None
    return payload


class OutboundPublisher:
    def __init__(
        self,
        publisher,
        profiles: SenderProfileCache | None = None,
        exchange: str = NOTIFICATION_EXCHANGE,
        metrics: PipelineMetrics | None = None,
    ):
        self.publisher = publisher
        self.profiles = profiles or SenderProfileCache()
        self.exchange = exchange
        self.metrics = metrics or PipelineMetrics()

    def _sender_profile(self, sender_id):
        if not sender_id:
            return None
        try:
            return self.profiles.find(sender_id)
        except Exception as exc:
            logger.warning("Sender profile lookup failed", sender_id=str(sender_id), error=str(exc))
            return None

    def publish_created(self, notification):
        payload = build_created_payload(notification, self._sender_profile(notification.sender_id))

        try:
            self.publisher.publish(self.exchange, NOTIFICATION_CREATED, payload)
        except Exception as exc:
            logger.error(
                "Failed to publish notification event",
                notification_id=str(notification.id),
                exchange=self.exchange,
                error=str(exc),
            )
            self.metrics.publication(ERROR)
            return Failed(reason=f"publish failed: {exc}")

        self.metrics.publication("ok")
        logger.debug(
            "Notification event published",
            notification_id=str(notification.id),
            recipient_id=str(notification.recipient_id),
        )
        return OK
