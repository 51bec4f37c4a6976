"""The notification store wrapped with caching and publication.

Creation stores the notification, invalidates the recipient's cached
listings and publishes ``notification.created``. The two side effects are
best-effort and reported on the returned ``CreationResult``. Reads go
through the cache; every mutation invalidates the recipient's entries.
"""

from dataclasses import dataclass

import structlog
from notifier.errors import NotificationNotFoundError
from notifier.metrics import PipelineMetrics
from notifier.notification.listing_cache import ListingCache
from notifier.notification.notification import Notification
from notifier.notification.outbound import OutboundPublisher
from notifier.notification.store import NotificationStore
from notifier.profile.cache import SenderProfileCache
from notifier.results import SideEffectResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CreationResult:
    notification: Notification
    cache: SideEffectResult
    publication: SideEffectResult


class NotificationService:
    def __init__(
        self,
        store: NotificationStore,
        listing_cache: ListingCache,
        outbound: OutboundPublisher,
        profiles: SenderProfileCache | None = None,
        metrics: PipelineMetrics | None = None,
        retention_days: int = 30,
    ):
        self.store = store
        self.listing_cache = listing_cache
        self.outbound = outbound
        self.profiles = profiles or SenderProfileCache()
        self.metrics = metrics or PipelineMetrics()
        self.retention_days = retention_days

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------
    def create_notification(self, intent_or_notification) -> CreationResult:
        """Persist a notification, then invalidate caches and publish."""
        notification = (
            intent_or_notification
            if isinstance(intent_or_notification, Notification)
            else Notification.from_intent(intent_or_notification)
        )
        self.store.add(notification)
        self.metrics.notification_created(notification.notification_type)

        cache_result = self.listing_cache.invalidate(notification.recipient_id)
        publication = self.outbound.publish_created(notification)

        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            recipient_id=str(notification.recipient_id),
            notification_type=notification.notification_type,
            cache_invalidated=cache_result.ok,
            published=publication.ok,
        )
        return CreationResult(notification=notification, cache=cache_result, publication=publication)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def _sender_profiles(self, notifications):
        try:
            return self.profiles.find_many(n.sender_id for n in notifications)
        except Exception as exc:
            logger.warning("Sender profile enrichment failed", error=str(exc))
            return {}

    def _render(self, notification, profiles):
        payload = notification.to_payload()
        profile = profiles.get(payload["sender_id"]) if payload["sender_id"] else None
        payload["sender"] = profile.summary() if profile is not None else None
        return payload

    def get_notifications(
        self,
        recipient_id,
        page=1,
        limit=None,
        notification_type=None,
        unread_only=False,
        sort="desc",
    ) -> dict:
        """A page of notifications with sender details and pagination info."""
        page, limit = self.store.normalize_paging(page, limit)

        def load():
            result = self.store.list(
                recipient_id,
                page=page,
                limit=limit,
                notification_type=notification_type,
                unread_only=unread_only,
                sort=sort,
            )
            profiles = self._sender_profiles(result.items)
            return {
                "notifications": [self._render(n, profiles) for n in result.items],
                "pagination": result.pagination(),
            }

        return self.listing_cache.listing(recipient_id, page, limit, notification_type, unread_only, sort, load)

    def get_unread_count(self, recipient_id) -> int:
        return self.listing_cache.unread_count(recipient_id, lambda: self.store.unread_count(recipient_id))

    def get_notification(self, recipient_id, notification_id) -> dict:
        notification = self.store.get(recipient_id, notification_id)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")
        return self._render(notification, self._sender_profiles([notification]))

    def get_stats(self, recipient_id) -> dict:
        return self.store.stats(recipient_id)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _set_read_state(self, recipient_id, notification_id, is_read):
        notification = self.store.set_read_state(recipient_id, notification_id, is_read)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")

        self.listing_cache.invalidate(recipient_id)
        return notification.to_payload()

    def mark_as_read(self, recipient_id, notification_id) -> dict:
        return self._set_read_state(recipient_id, notification_id, True)

    def mark_as_unread(self, recipient_id, notification_id) -> dict:
        return self._set_read_state(recipient_id, notification_id, False)

    def mark_all_as_read(self, recipient_id) -> int:
        modified = self.store.mark_all_read(recipient_id)
        self.listing_cache.invalidate(recipient_id)
        return modified

    def delete_notification(self, recipient_id, notification_id) -> None:
        if not self.store.delete(recipient_id, notification_id):
            raise NotificationNotFoundError("Notification not found")
        self.listing_cache.invalidate(recipient_id)

    def delete_all(self, recipient_id) -> int:
        deleted = self.store.delete_all(recipient_id)
        self.listing_cache.invalidate(recipient_id)
        return deleted

    def cleanup_old_notifications(self, days=None, now=None):
        """Retention sweep over read notifications; invalidates every affected recipient."""
        result = self.store.cleanup_older_than(days if days is not None else self.retention_days, now=now)
        for recipient_id in result.recipients:
            self.listing_cache.invalidate(recipient_id)
        return result
