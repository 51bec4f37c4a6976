"""Publisher port — abstract interface for outbound event publication."""

from abc import ABC, abstractmethod


class PublisherPort(ABC):
    @abstractmethod
    def publish(self, exchange: str, routing_key: str, message: dict) -> str:
        """Publish a message; returns a broker-assigned identifier. Raises on failure."""
        ...
