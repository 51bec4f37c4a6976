"""Redis cache adapter."""

import redis
from notifier.cache.cache_port import CachePort


class RedisCacheAdapter(CachePort):
    def __init__(self, url: str = "redis://localhost:6379/0", client: redis.Redis | None = None):
        self.client = client or redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> str | None:
        return self.client.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self.client.setex(key, ttl, value)

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return self.client.delete(*keys)
