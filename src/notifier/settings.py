"""Runtime settings for the notifier service, read from the environment."""

import os
from dataclasses import dataclass


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    """Tunable knobs for caching, paging and retention."""

    redis_url: str = "redis://localhost:6379/0"
    cache_backend: str = "memory"  # "memory" or "redis"
    publisher_backend: str = "broker"  # "broker" or "memory"
    outbound_exchange: str = "notification_events"

    listing_cache_ttl: int = 300
    unread_count_cache_ttl: int = 60

    default_page_size: int = 20
    max_page_size: int = 100

    notification_retention_days: int = 30
    profile_retention_days: int = 30

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            cache_backend=os.getenv("CACHE_BACKEND", cls.cache_backend).lower(),
            publisher_backend=os.getenv("PUBLISHER_BACKEND", cls.publisher_backend).lower(),
            outbound_exchange=os.getenv("OUTBOUND_EXCHANGE", cls.outbound_exchange),
            listing_cache_ttl=_int_env("LISTING_CACHE_TTL", cls.listing_cache_ttl),
            unread_count_cache_ttl=_int_env("UNREAD_COUNT_CACHE_TTL", cls.unread_count_cache_ttl),
            default_page_size=_int_env("DEFAULT_PAGE_SIZE", cls.default_page_size),
            max_page_size=_int_env("MAX_PAGE_SIZE", cls.max_page_size),
            notification_retention_days=_int_env("NOTIFICATION_RETENTION_DAYS", cls.notification_retention_days),
            profile_retention_days=_int_env("PROFILE_RETENTION_DAYS", cls.profile_retention_days),
        )
