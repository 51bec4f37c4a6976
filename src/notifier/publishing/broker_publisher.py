"""Publisher adapter over the domain's configured Protean broker.

Exchanges map onto broker streams named ``<exchange>::<routing_key>``, the
same naming the inbound subscribers listen on.
"""

from notifier.publishing.publisher_port import PublisherPort
from protean.utils.globals import current_domain

STREAM_SEPARATOR = "::"


def stream_name(exchange: str, routing_key: str) -> str:
    return f"{exchange}{STREAM_SEPARATOR}{routing_key}"


def split_stream(stream: str) -> tuple[str, str]:
    """Inverse of ``stream_name``: ``(exchange, routing_key)``."""
    exchange, _, routing_key = stream.partition(STREAM_SEPARATOR)
    return exchange, routing_key


class BrokerPublisher(PublisherPort):
    def __init__(self, broker_name: str = "default"):
        self.broker_name = broker_name

    def publish(self, exchange: str, routing_key: str, message: dict) -> str:
        broker = current_domain.brokers.get(self.broker_name)
        if broker is None:
            raise RuntimeError(f"Broker '{self.broker_name}' is not configured")
        return broker.publish(stream_name(exchange, routing_key), message)
