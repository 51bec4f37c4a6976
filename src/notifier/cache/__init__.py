"""Cache adapter registry.

Provides singleton access to the configured cache adapter. The in-memory
fake is the default; set ``CACHE_BACKEND=redis`` to use Redis.
"""

from notifier.settings import Settings

_cache_instance = None


def get_cache(settings: Settings | None = None):
    """Return the configured cache adapter (singleton)."""
    global _cache_instance

    if _cache_instance is None:
        settings = settings or Settings.from_env()
        if settings.cache_backend == "redis":
            from notifier.cache.redis_cache import RedisCacheAdapter

            _cache_instance = RedisCacheAdapter(settings.redis_url)
        elif settings.cache_backend == "memory":
            from notifier.cache.fake_cache import FakeCacheAdapter

            _cache_instance = FakeCacheAdapter()
        else:
            raise ValueError(f"Unknown cache backend: {settings.cache_backend}")

    return _cache_instance


def reset_cache():
    """Reset the cache singleton (useful for testing)."""
    global _cache_instance
    _cache_instance = None
