"""Upsert, lookup and stale sweep over SenderProfile."""

from datetime import UTC, datetime, timedelta

import structlog
from notifier.profile.profile import SenderProfile
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)

_BATCH_SIZE = 100


def _aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _cutoff(now, days):
    # Normalised to UTC so it compares cleanly against stored timestamps
    return (_aware(now or datetime.now(UTC)) - timedelta(days=days)).astimezone(UTC)


class SenderProfileCache:
    def _repo(self):
        return current_domain.repository_for(SenderProfile)

    def find(self, user_id):
        if not user_id:
            return None
        items = self._repo()._dao.query.filter(user_id=str(user_id)).all().items
        return items[0] if items else None

    def find_many(self, user_ids):
        """Profiles keyed by user id, fetched in a single query; unknown ids are simply absent."""
        wanted = list(dict.fromkeys(str(uid) for uid in user_ids if uid))
        if not wanted:
            return {}
        query = self._repo()._dao.query.filter(user_id__in=wanted).limit(len(wanted))
        return {str(profile.user_id): profile for profile in query.all().items}

    def upsert(self, data, synced_at=None):
        """Create or refresh the profile for ``data["user_id"]``."""
        repo = self._repo()
        profile = self.find(data.get("user_id"))
        if profile is None:
            profile = SenderProfile.from_user_data(data, synced_at=synced_at)
        else:
            profile.sync_from(data, synced_at=synced_at)
        repo.add(profile)

        logger.info("Sender profile synced", user_id=str(profile.user_id), username=profile.username)
        return profile

    def remove(self, user_id):
        profile = self.find(user_id)
        if profile is None:
            return False

        self._repo()._dao.delete(profile)
        logger.info("Sender profile removed", user_id=str(user_id))
        return True

    def cleanup_stale(self, older_than_days=30, now=None):
        """Delete profiles not synced within the window. Returns the number removed."""
        repo = self._repo()
        query = repo._dao.query.filter(last_synced__lt=_cutoff(now, older_than_days)).order_by("id")

        stale, offset = [], 0
        while True:
            result = query.offset(offset).limit(_BATCH_SIZE).all()
            stale.extend(result.items)
            offset += _BATCH_SIZE
            if offset >= result.total:
                break

        for profile in stale:
            repo._dao.delete(profile)

        logger.info("Stale sender profiles removed", count=len(stale), older_than_days=older_than_days)
        return len(stale)
