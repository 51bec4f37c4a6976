"""Persistence operations over the Notification aggregate.

Every per-recipient operation filters on both the notification id and the
recipient, so a caller can never read or mutate someone else's
notifications; a foreign id behaves exactly like a missing one.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog
from notifier.notification.notification import Notification, NotificationType
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)

_BATCH_SIZE = 100
SORT_DIRECTIONS = ("desc", "asc")


def _aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _cutoff(now, days):
    # Normalised to UTC so it compares cleanly against stored timestamps
    return (_aware(now or datetime.now(UTC)) - timedelta(days=days)).astimezone(UTC)


def _collect(query):
    """Materialise every match of a query, paging past the provider's default limit.

    Pages are taken over a stable id ordering so rows cannot shift between
    batches.
    """
    query = query.order_by("id")
    items, offset = [], 0
    while True:
        result = query.offset(offset).limit(_BATCH_SIZE).all()
        items.extend(result.items)
        offset += _BATCH_SIZE
        if offset >= result.total:
            return items


@dataclass(frozen=True)
class NotificationPage:
    items: list
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


@dataclass(frozen=True)
class CleanupResult:
    deleted_count: int
    recipients: list[str] = field(default_factory=list)


class NotificationStore:
    def __init__(self, default_page_size: int = 20, max_page_size: int = 100):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def _repo(self):
        return current_domain.repository_for(Notification)

    def _owned(self, recipient_id):
        return self._repo()._dao.query.filter(recipient_id=str(recipient_id))

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def add(self, notification):
        self._repo().add(notification)
        return notification

    def create(self, intent):
        """Build and persist a notification from an intent."""
        return self.add(Notification.from_intent(intent))

    def mark_read(self, recipient_id, notification_id):
        """Mark one of the recipient's notifications read. None if not found or not owned."""
        return self.set_read_state(recipient_id, notification_id, True)

    def mark_unread(self, recipient_id, notification_id):
        return self.set_read_state(recipient_id, notification_id, False)

    def set_read_state(self, recipient_id, notification_id, is_read):
        notification = self.get(recipient_id, notification_id)
        if notification is None:
            return None

        notification.set_read_state(is_read)
        self._repo().add(notification)
        return notification

    def mark_all_read(self, recipient_id) -> int:
        """Mark every unread notification of the recipient read; returns how many changed."""
        repo = self._repo()
        unread = _collect(self._owned(recipient_id).filter(is_read=False))

        now = datetime.now(UTC)
        for notification in unread:
            notification.mark_read(read_at=now)
            repo.add(notification)

        logger.info("Notifications marked read", recipient_id=str(recipient_id), count=len(unread))
        return len(unread)

    def delete(self, recipient_id, notification_id) -> bool:
        notification = self.get(recipient_id, notification_id)
        if notification is None:
            return False

        self._repo()._dao.delete(notification)
        return True

    def delete_all(self, recipient_id) -> int:
        repo = self._repo()
        notifications = _collect(self._owned(recipient_id))
        for notification in notifications:
            repo._dao.delete(notification)

        logger.info("Notifications deleted", recipient_id=str(recipient_id), count=len(notifications))
        return len(notifications)

    def cleanup_older_than(self, days: int = 30, now=None) -> CleanupResult:
        """Delete read notifications created before the cutoff. Unread ones are never touched."""
        repo = self._repo()
        expired = _collect(repo._dao.query.filter(is_read=True, created_at__lt=_cutoff(now, days)))

        recipients = []
        for notification in expired:
            repo._dao.delete(notification)
            recipient_id = str(notification.recipient_id)
            if recipient_id not in recipients:
                recipients.append(recipient_id)

        logger.info(
            "Old read notifications cleaned up",
            deleted_count=len(expired),
            older_than_days=days,
            recipients=len(recipients),
        )
        return CleanupResult(deleted_count=len(expired), recipients=recipients)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, recipient_id, notification_id):
        items = self._owned(recipient_id).filter(id=str(notification_id)).all().items
        return items[0] if items else None

    def normalize_paging(self, page=None, limit=None):
        page = max(1, int(page or 1))
        limit = min(max(1, int(limit or self.default_page_size)), self.max_page_size)
        return page, limit

    def list(self, recipient_id, page=1, limit=None, notification_type=None, unread_only=False, sort="desc"):
        """One page of the recipient's notifications, newest first unless ``sort="asc"``."""
        page, limit = self.normalize_paging(page, limit)
        if sort not in SORT_DIRECTIONS:
            raise ValidationError({"sort": [f"Sort must be one of {', '.join(SORT_DIRECTIONS)}"]})

        query = self._owned(recipient_id)
        if unread_only:
            query = query.filter(is_read=False)
        if notification_type:
            try:
                query = query.filter(notification_type=NotificationType(notification_type).value)
            except ValueError:
                raise ValidationError(
                    {"notification_type": [f"Unknown notification type: {notification_type}"]}
                ) from None

        ordering = "created_at" if sort == "asc" else "-created_at"
        result = query.order_by(ordering).offset((page - 1) * limit).limit(limit).all()

        return NotificationPage(items=list(result.items), total=result.total, page=page, limit=limit)

    def unread_count(self, recipient_id) -> int:
        return self._owned(recipient_id).filter(is_read=False).all().total

    def stats(self, recipient_id) -> dict:
        """Totals plus a per-type read/unread breakdown."""
        breakdown = {}
        total = unread = 0
        for notification in _collect(self._owned(recipient_id)):
            counts = breakdown.setdefault(notification.notification_type, {"unread": 0, "read": 0})
            total += 1
            if notification.is_read:
                counts["read"] += 1
            else:
                counts["unread"] += 1
                unread += 1

        return {
            "total": total,
            "unread": unread,
            "read": total - unread,
            "type_breakdown": breakdown,
        }
