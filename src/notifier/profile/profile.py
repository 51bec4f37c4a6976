"""SenderProfile aggregate — a local copy of user display data.

Kept in sync from user lifecycle events so notifications can show who
triggered them without calling the user service. The copy is advisory:
a missing profile never blocks notification creation.
"""

from datetime import UTC, datetime

from notifier.domain import notifier
from protean.fields import Boolean, DateTime, Identifier, String


@notifier.aggregate
class SenderProfile:
    user_id: Identifier(required=True, unique=True)
    username: String(required=True, max_length=50)
    display_name: String(max_length=100)
    avatar_url: String(max_length=500)
    verified: Boolean(default=False)

    last_synced: DateTime(required=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def from_user_data(cls, data, synced_at=None):
        now = synced_at or datetime.now(UTC)
        return cls(
            user_id=str(data.get("user_id")) if data.get("user_id") else None,
            username=data.get("username"),
            display_name=data.get("display_name"),
            avatar_url=data.get("avatar_url"),
            verified=bool(data.get("verified", False)),
            last_synced=now,
            created_at=now,
            updated_at=now,
        )

    def sync_from(self, data, synced_at=None):
        """Overwrite display fields with fresh user data. Absent keys keep their values."""
        now = synced_at or datetime.now(UTC)
        for field_name in ("username", "display_name", "avatar_url"):
            if field_name in data:
                setattr(self, field_name, data[field_name])
        if "verified" in data:
            self.verified = bool(data["verified"])
        self.last_synced = now
        self.updated_at = now

    def summary(self):
        """The sender block attached to outbound notification events."""
        return {
            "id": str(self.user_id),
            "username": self.username,
            "avatarUrl": self.avatar_url,
        }
