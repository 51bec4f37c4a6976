"""Cache port — abstract key/value store with per-key expiry."""

from abc import ABC, abstractmethod


class CachePort(ABC):
    """Abstract interface for string key/value cache adapters."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the cached value, or None when absent or expired."""
        ...

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds."""
        ...

    @abstractmethod
    def delete(self, *keys: str) -> int:
        """Remove keys; returns how many existed."""
        ...
