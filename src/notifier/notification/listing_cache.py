"""Read-through cache for notification listings and unread counts.

Keys::

    notifications:<recipient>:<page>:<limit>:<type|all>:<unread true|false>[:asc]
    unread_count:<recipient>

After any mutation for a recipient, the unread count and the first page of
the common listing variants are dropped; every other variant simply expires.
Cache failures never propagate: reads fall back to the store and
invalidation reports a ``Failed`` result.
"""

import json

import structlog
from notifier.metrics import ERROR, PipelineMetrics
from notifier.results import OK, Failed

logger = structlog.get_logger(__name__)

LISTING_TTL = 300
UNREAD_COUNT_TTL = 60

# (page, limit, unread_only) variants dropped on every invalidation
COMMON_LISTING_VARIANTS = [
    (1, 20, False),
    (1, 20, True),
    (1, 50, False),
    (1, 50, True),
]


def listing_key(recipient_id, page, limit, notification_type=None, unread_only=False, sort="desc"):
    key = f"notifications:{recipient_id}:{page}:{limit}:{notification_type or 'all'}:{str(bool(unread_only)).lower()}"
    return f"{key}:asc" if sort == "asc" else key


def unread_count_key(recipient_id):
    return f"unread_count:{recipient_id}"


def invalidation_keys(recipient_id):
    return [unread_count_key(recipient_id)] + [
        listing_key(recipient_id, page, limit, None, unread_only)
        for page, limit, unread_only in COMMON_LISTING_VARIANTS
    ]


class ListingCache:
    def __init__(
        self,
        cache,
        metrics: PipelineMetrics | None = None,
        listing_ttl: int = LISTING_TTL,
        unread_count_ttl: int = UNREAD_COUNT_TTL,
    ):
        self.cache = cache
        self.metrics = metrics or PipelineMetrics()
        self.listing_ttl = listing_ttl
        self.unread_count_ttl = unread_count_ttl

    def _read(self, key):
        try:
            raw = self.cache.get(key)
        except Exception as exc:
            logger.warning("Cache read failed", key=key, error=str(exc))
            self.metrics.cache_operation("get", ERROR)
            return None

        self.metrics.cache_operation("get", "hit" if raw is not None else "miss")
        return json.loads(raw) if raw is not None else None

    def _write(self, key, value, ttl):
        try:
            self.cache.set(key, json.dumps(value), ttl)
        except Exception as exc:
            logger.warning("Cache write failed", key=key, error=str(exc))
            self.metrics.cache_operation("set", ERROR)
            return
        self.metrics.cache_operation("set", "ok")

    def listing(self, recipient_id, page, limit, notification_type, unread_only, sort, load):
        """Cached listing, or ``load()`` stored under the listing key on a miss."""
        key = listing_key(recipient_id, page, limit, notification_type, unread_only, sort)
        cached = self._read(key)
        if cached is not None:
            return cached

        value = load()
        self._write(key, value, self.listing_ttl)
        return value

    def unread_count(self, recipient_id, load):
        key = unread_count_key(recipient_id)
        cached = self._read(key)
        if cached is not None:
            return cached

        value = load()
        self._write(key, value, self.unread_count_ttl)
        return value

    def invalidate(self, recipient_id):
        """Drop the recipient's unread count and common listing pages."""
        try:
            self.cache.delete(*invalidation_keys(recipient_id))
        except Exception as exc:
            logger.warning("Cache invalidation failed", recipient_id=str(recipient_id), error=str(exc))
            self.metrics.cache_operation("invalidate", ERROR)
            return Failed(reason=f"cache invalidation failed: {exc}")

        self.metrics.cache_operation("invalidate", "ok")
        return OK
