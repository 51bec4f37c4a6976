"""Application tests for the sender profile cache and user lifecycle events."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from notifier.profile.cache import SenderProfileCache
from notifier.profile.retention import PurgeStaleSenderProfiles
from notifier.profile.user_events import UserEventsHandler
from protean import current_domain
from protean.exceptions import ValidationError


class TestUpsert:
    def test_registered_user_creates_profile(self):
        UserEventsHandler().on_user_registered(
            {"user_id": "u1", "username": "alice", "display_name": "Alice", "verified": True}
        )

        profile = SenderProfileCache().find("u1")
        assert profile.username == "alice"
        assert profile.display_name == "Alice"
        assert profile.verified is True
        assert profile.last_synced is not None

    def test_update_overwrites_existing_profile(self):
        cache = SenderProfileCache()
        cache.upsert({"user_id": "u1", "username": "alice"})

        UserEventsHandler(cache).on_user_updated({"user_id": "u1", "username": "alice2", "avatar_url": "a.png"})

        profile = cache.find("u1")
        assert profile.username == "alice2"
        assert profile.avatar_url == "a.png"
        assert len(cache.find_many(["u1"])) == 1

    def test_username_required(self):
        with pytest.raises(ValidationError):
            SenderProfileCache().upsert({"user_id": "u1"})

    def test_username_longer_than_fifty_chars_rejected(self):
        with pytest.raises(ValidationError):
            SenderProfileCache().upsert({"user_id": "u1", "username": "x" * 51})


class TestLookup:
    def test_find_many_skips_unknown_ids(self):
        cache = SenderProfileCache()
        cache.upsert({"user_id": "u1", "username": "alice"})
        cache.upsert({"user_id": "u2", "username": "bob"})

        profiles = cache.find_many(["u1", "u3", None, "u2", "u1"])

        assert sorted(profiles) == ["u1", "u2"]

    def test_find_many_issues_one_query(self):
        repo = MagicMock()
        repo._dao.query.filter.return_value.limit.return_value.all.return_value = MagicMock(items=[])

        with patch.object(SenderProfileCache, "_repo", return_value=repo):
            assert SenderProfileCache().find_many(["u1", "u2", "u1", None]) == {}

        repo._dao.query.filter.assert_called_once_with(user_id__in=["u1", "u2"])

    def test_find_many_with_no_ids_skips_the_query(self):
        repo = MagicMock()

        with patch.object(SenderProfileCache, "_repo", return_value=repo):
            assert SenderProfileCache().find_many([None, ""]) == {}

        repo._dao.query.filter.assert_not_called()

    def test_find_many_returns_more_than_a_default_page(self):
        cache = SenderProfileCache()
        ids = [f"user-{i}" for i in range(120)]
        for user_id in ids:
            cache.upsert({"user_id": user_id, "username": user_id})

        assert set(cache.find_many(ids)) == set(ids)

    def test_find_without_id(self):
        assert SenderProfileCache().find(None) is None


class TestRemoval:
    def test_deleted_user_removes_profile(self):
        cache = SenderProfileCache()
        cache.upsert({"user_id": "u1", "username": "alice"})

        assert UserEventsHandler(cache).on_user_deleted({"user_id": "u1"}) is True
        assert cache.find("u1") is None

    def test_deleting_unknown_user_is_harmless(self):
        assert UserEventsHandler().on_user_deleted({"user_id": "ghost"}) is False


class TestStaleSweep:
    def test_cleanup_removes_only_stale_profiles(self):
        now = datetime(2026, 6, 1, tzinfo=UTC)
        cache = SenderProfileCache()
        cache.upsert({"user_id": "old", "username": "old"}, synced_at=now - timedelta(days=40))
        cache.upsert({"user_id": "fresh", "username": "fresh"}, synced_at=now - timedelta(days=2))

        assert cache.cleanup_stale(30, now=now) == 1
        assert cache.find("old") is None
        assert cache.find("fresh") is not None

    def test_purge_command(self):
        now = datetime(2026, 6, 1, tzinfo=UTC)
        cache = SenderProfileCache()
        cache.upsert({"user_id": "old", "username": "old"}, synced_at=now - timedelta(days=90))

        current_domain.process(PurgeStaleSenderProfiles(older_than_days=30, as_of=now), asynchronous=False)

        assert cache.find("old") is None

    def test_cutoff_is_applied_in_the_query(self):
        now = datetime(2026, 6, 1, tzinfo=UTC)
        repo = MagicMock()
        ordered = repo._dao.query.filter.return_value.order_by.return_value
        ordered.offset.return_value.limit.return_value.all.return_value = MagicMock(items=[], total=0)

        with patch.object(SenderProfileCache, "_repo", return_value=repo):
            assert SenderProfileCache().cleanup_stale(30, now=now) == 0

        repo._dao.query.filter.assert_called_once_with(last_synced__lt=now - timedelta(days=30))
        repo._dao.query.filter.return_value.order_by.assert_called_once_with("id")

    def test_sweep_spans_more_than_one_batch(self):
        now = datetime(2026, 6, 1, tzinfo=UTC)
        cache = SenderProfileCache()
        for i in range(130):
            cache.upsert({"user_id": f"old-{i}", "username": f"old{i}"}, synced_at=now - timedelta(days=60))
        cache.upsert({"user_id": "fresh", "username": "fresh"}, synced_at=now)

        assert cache.cleanup_stale(30, now=now) == 130
        assert cache.find("fresh") is not None
