"""Consumer registry — binds broker queues to event handlers.

Each binding ties one (exchange, routing key) pair to one queue and one
handler. ``deliver`` decodes a message body, unwraps the
``{type, data, timestamp, service}`` envelope some producers use, runs the
handler and answers with a disposition:

    handler returned   → ACK
    decode failure     → REJECT
    handler raised     → REJECT

Rejected messages are dropped, never requeued.
"""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import structlog
from notifier.errors import MessageDecodeError
from notifier.metrics import ERROR, SUCCESS, PipelineMetrics
from notifier.publishing.broker_publisher import stream_name
from notifier.utils.logging import delivery_context

logger = structlog.get_logger(__name__)


class Disposition(Enum):
    ACK = "ack"
    REJECT = "reject"


@dataclass(frozen=True)
class Binding:
    queue: str
    exchange: str
    routing_key: str
    handler: Callable[[dict], object] = field(compare=False, repr=False)

    @property
    def stream(self) -> str:
        return stream_name(self.exchange, self.routing_key)


def decode_message(body) -> dict:
    """Decode a message body (bytes, str or an already-decoded dict) into a dict."""
    if isinstance(body, dict):
        return body

    try:
        if isinstance(body, bytes | bytearray):
            body = body.decode("utf-8")
        payload = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise MessageDecodeError(f"Message body is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MessageDecodeError(f"Message body must be a JSON object, got {type(payload).__name__}")
    return payload


def unwrap_envelope(payload: dict) -> dict:
    """Return the envelope's ``data`` when present, else the payload itself."""
    data = payload.get("data")
    return data if isinstance(data, dict) else payload


class ConsumerRegistry:
    def __init__(self, metrics: PipelineMetrics | None = None):
        self.metrics = metrics or PipelineMetrics()
        self._bindings: dict[tuple[str, str], Binding] = {}
        self._active: set[str] = set()

    # -------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------
    def bind(self, queue, exchange, routing_key, handler) -> Binding:
        key = (exchange, routing_key)
        if key in self._bindings:
            raise ValueError(f"A consumer is already bound to {exchange}/{routing_key}")

        binding = Binding(queue=queue, exchange=exchange, routing_key=routing_key, handler=handler)
        self._bindings[key] = binding
        logger.info("Consumer bound", queue=queue, exchange=exchange, routing_key=routing_key)
        return binding

    @property
    def bindings(self) -> list[Binding]:
        return list(self._bindings.values())

    def binding_for(self, routing_key, exchange=None) -> Binding:
        for binding in self._bindings.values():
            if binding.routing_key == routing_key and exchange in (None, binding.exchange):
                return binding
        raise KeyError(f"No consumer bound to routing key {routing_key}")

    # -------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------
    def mark_active(self, binding: Binding):
        self._active.add(binding.queue)

    def mark_inactive(self, binding: Binding):
        self._active.discard(binding.queue)

    def status(self) -> dict:
        return {
            "total_consumers": len(self._bindings),
            "consumers": [binding.queue for binding in self._bindings.values()],
            "status": "active" if self._active else "inactive",
        }

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def deliver(self, binding: Binding, body) -> Disposition:
        """Process one message for a binding and decide its fate."""
        started = time.perf_counter()
        try:
            with delivery_context(binding):
                disposition = self._handle(binding, body)
        finally:
            self.metrics.processing_seconds.labels(routing_key=binding.routing_key).observe(
                time.perf_counter() - started
            )

        self.metrics.message_handled(
            binding.routing_key,
            SUCCESS if disposition == Disposition.ACK else ERROR,
        )
        return disposition

    def _handle(self, binding, body) -> Disposition:
        try:
            payload = unwrap_envelope(decode_message(body))
        except MessageDecodeError as exc:
            logger.error("Discarding undecodable message", error=exc.message)
            return Disposition.REJECT

        try:
            binding.handler(payload)
        except Exception as exc:
            logger.error("Event handler failed, dropping message", error=str(exc), exc_info=True)
            return Disposition.REJECT

        logger.info("Event processed")
        return Disposition.ACK

    def deliver_to(self, routing_key, body, exchange=None) -> Disposition:
        """Deliver by routing key; convenient for replays and tests."""
        return self.deliver(self.binding_for(routing_key, exchange), body)
