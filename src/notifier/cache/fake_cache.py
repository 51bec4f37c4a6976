"""In-memory cache adapter — used in development and for test assertions."""

import time

from notifier.cache.cache_port import CachePort


class FakeCacheAdapter(CachePort):
    """Dict-backed cache honouring TTLs, with switchable failure for tests."""

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self.entries: dict[str, tuple[str, float]] = {}
        self.deleted_keys: list[str] = []
        self.should_succeed = True
        self.failure_reason = "Cache unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Cache unavailable"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _check(self):
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

    def get(self, key: str) -> str | None:
        self._check()
        entry = self.entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self.clock():
            del self.entries[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: int) -> None:
        self._check()
        self.entries[key] = (value, self.clock() + ttl)

    def delete(self, *keys: str) -> int:
        self._check()
        self.deleted_keys.extend(keys)
        return sum(1 for key in keys if self.entries.pop(key, None) is not None)

    def ttl(self, key: str) -> float | None:
        entry = self.entries.get(key)
        return entry[1] - self.clock() if entry else None

    def reset(self):
        """Clear entries and restore default behavior (useful between tests)."""
        self.entries.clear()
        self.deleted_keys.clear()
        self.should_succeed = True
        self.failure_reason = "Cache unavailable"
