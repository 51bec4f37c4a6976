"""NotificationPreferences aggregate — per-user delivery preferences.

One record per user, created lazily with defaults. Holds the three channel
master switches, a toggle set for every notification type, and an optional
quiet-hours window evaluated in the user's own timezone.

A notification goes out on a channel only when both the type's toggle and
the channel's master switch are on. While quiet hours are active every
channel except in-app is suppressed, so in-app notifications are still
created during the quiet window.
"""

import json
import re
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from notifier.domain import notifier
from notifier.notification.notification import DeliveryChannel, NotificationType
from notifier.preference.events import (
    PreferencesCreated,
    PreferencesReset,
    PreferencesUpdated,
)
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

logger = structlog.get_logger(__name__)

_CLOCK_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "08:00"
DEFAULT_TIMEZONE = "UTC"


# ---------------------------------------------------------------------------
# Channel toggles
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ChannelToggles:
    email: bool = True
    push: bool = True
    in_app: bool = True

    def enabled(self, channel: DeliveryChannel) -> bool:
        return getattr(self, channel.value)

    def merged(self, email=None, push=None, in_app=None) -> "ChannelToggles":
        return ChannelToggles(
            email=self.email if email is None else email,
            push=self.push if push is None else push,
            in_app=self.in_app if in_app is None else in_app,
        )

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_TYPE_PREFERENCES = {
    NotificationType.FOLLOW: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.LIKE: ChannelToggles(email=False, push=True, in_app=True),
    NotificationType.COMMENT: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.EVENT_INVITE: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.EVENT_RSVP: ChannelToggles(email=False, push=False, in_app=True),
    NotificationType.POST_MENTION: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.SYSTEM: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.MESSAGE: ChannelToggles(email=False, push=True, in_app=True),
    NotificationType.POST_SHARE: ChannelToggles(email=False, push=True, in_app=True),
    NotificationType.EVENT_REMINDER: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.FRIEND_REQUEST: ChannelToggles(email=True, push=True, in_app=True),
    NotificationType.ACCOUNT_VERIFICATION: ChannelToggles(email=True, push=False, in_app=True),
    NotificationType.PASSWORD_RESET: ChannelToggles(email=True, push=False, in_app=False),
    NotificationType.SECURITY_ALERT: ChannelToggles(email=True, push=True, in_app=True),
}


def _serialize_type_preferences(type_preferences):
    return json.dumps({t.value: toggles.to_dict() for t, toggles in type_preferences.items()})


# ---------------------------------------------------------------------------
# Quiet hours
# ---------------------------------------------------------------------------
def parse_clock(value: str) -> time:
    """Parse an ``H:MM``/``HH:MM`` string into a time, raising ValueError."""
    match = _CLOCK_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid time format: {value}. Use HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def within_window(current: time, start: time, end: time) -> bool:
    """True when ``current`` falls in [start, end]; a start after end wraps midnight.

    Bounds are whole minutes, so the window closes at ``end``:00 exactly.
    """
    if start > end:
        return current >= start or current <= end
    return start <= current <= end


def _coerce_type(notification_type) -> NotificationType:
    try:
        return NotificationType(notification_type)
    except ValueError:
        raise ValidationError(
            {"notification_type": [f"Unknown notification type: {notification_type}"]}
        ) from None


def _coerce_channel(channel) -> DeliveryChannel:
    try:
        return DeliveryChannel(channel)
    except ValueError:
        raise ValidationError({"channel": [f"Invalid channel: {channel}"]}) from None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifier.aggregate
class NotificationPreferences:
    """A user's notification delivery preferences."""

    user_id: Identifier(required=True, unique=True)

    # Channel master switches
    email_notifications: Boolean(default=True)
    push_notifications: Boolean(default=True)
    in_app_notifications: Boolean(default=True)

    # Per-type channel toggles
    type_preferences: Text()  # JSON object keyed by NotificationType value

    # Quiet hours (DND)
    quiet_hours_enabled: Boolean(default=False)
    quiet_hours_start: String(max_length=5, default=DEFAULT_QUIET_HOURS_START)
    quiet_hours_end: String(max_length=5, default=DEFAULT_QUIET_HOURS_END)
    quiet_hours_timezone: String(max_length=64, default=DEFAULT_TIMEZONE)

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create_default(cls, user_id):
        """Create default preferences: every master switch on, quiet hours off."""
        now = datetime.now(UTC)

        preferences = cls(
            user_id=user_id,
            email_notifications=True,
            push_notifications=True,
            in_app_notifications=True,
            type_preferences=_serialize_type_preferences(DEFAULT_TYPE_PREFERENCES),
            quiet_hours_enabled=False,
            quiet_hours_start=DEFAULT_QUIET_HOURS_START,
            quiet_hours_end=DEFAULT_QUIET_HOURS_END,
            quiet_hours_timezone=DEFAULT_TIMEZONE,
            created_at=now,
            updated_at=now,
        )

        preferences.raise_(
            PreferencesCreated(
                preference_id=str(preferences.id),
                user_id=str(user_id),
                created_at=now,
            )
        )

        return preferences

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    def get_type_preferences(self):
        """Toggles for every notification type; types missing from storage get defaults."""
        stored = json.loads(self.type_preferences) if self.type_preferences else {}
        result = {}
        for notification_type, default in DEFAULT_TYPE_PREFERENCES.items():
            raw = stored.get(notification_type.value) or {}
            result[notification_type] = default.merged(
                email=raw.get("email"),
                push=raw.get("push"),
                in_app=raw.get("in_app"),
            )
        return result

    def type_preference(self, notification_type) -> ChannelToggles:
        return self.get_type_preferences()[_coerce_type(notification_type)]

    def channel_enabled(self, channel) -> bool:
        channel = _coerce_channel(channel)
        return {
            DeliveryChannel.EMAIL: self.email_notifications,
            DeliveryChannel.PUSH: self.push_notifications,
            DeliveryChannel.IN_APP: self.in_app_notifications,
        }[channel]

    def preference_for(self, notification_type, channel) -> bool:
        """The type toggle for a channel, ANDed with that channel's master switch."""
        channel = _coerce_channel(channel)
        return self.type_preference(notification_type).enabled(channel) and self.channel_enabled(channel)

    def _zone(self):
        try:
            return ZoneInfo(self.quiet_hours_timezone or DEFAULT_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown quiet hours timezone, falling back to UTC",
                user_id=str(self.user_id),
                timezone=self.quiet_hours_timezone,
            )
            return UTC

    def is_quiet_hours(self, now=None) -> bool:
        if not self.quiet_hours_enabled:
            return False

        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        local = now.astimezone(self._zone()).time()

        return within_window(
            local,
            parse_clock(self.quiet_hours_start or DEFAULT_QUIET_HOURS_START),
            parse_clock(self.quiet_hours_end or DEFAULT_QUIET_HOURS_END),
        )

    def should_send(self, notification_type, channel=DeliveryChannel.IN_APP, now=None) -> bool:
        """Whether a notification of this type may go out on this channel right now."""
        channel = _coerce_channel(channel)
        if channel != DeliveryChannel.IN_APP and self.is_quiet_hours(now):
            return False
        return self.preference_for(notification_type, channel)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _touch(self, changed):
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            PreferencesUpdated(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                changed=",".join(changed),
                updated_at=now,
            )
        )

    def _set_channel(self, channel, enabled):
        channel = _coerce_channel(channel)
        if channel == DeliveryChannel.EMAIL:
            self.email_notifications = enabled
        elif channel == DeliveryChannel.PUSH:
            self.push_notifications = enabled
        else:
            self.in_app_notifications = enabled

    def _set_type_toggles(self, updates):
        current = self.get_type_preferences()
        for notification_type, toggles in updates.items():
            notification_type = _coerce_type(notification_type)
            current[notification_type] = current[notification_type].merged(**toggles)
        self.type_preferences = _serialize_type_preferences(current)

    def _set_quiet_hours(self, enabled=None, start_time=None, end_time=None, timezone=None):
        for label, value in [("start_time", start_time), ("end_time", end_time)]:
            if value is None:
                continue
            try:
                parse_clock(value)
            except ValueError as exc:
                raise ValidationError({f"quiet_hours.{label}": [str(exc)]}) from None

        if timezone is not None:
            try:
                ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValidationError({"quiet_hours.timezone": [f"Unknown timezone: {timezone}"]}) from None

        if enabled is not None:
            self.quiet_hours_enabled = enabled
        if start_time is not None:
            self.quiet_hours_start = parse_clock(start_time).strftime("%H:%M")
        if end_time is not None:
            self.quiet_hours_end = parse_clock(end_time).strftime("%H:%M")
        if timezone is not None:
            self.quiet_hours_timezone = timezone

    def set_channel(self, channel, enabled):
        """Flip one channel master switch."""
        self._set_channel(channel, enabled)
        self._touch(["channels"])

    def set_type_preference(self, notification_type, channel, enabled):
        """Flip one channel toggle for one notification type."""
        channel = _coerce_channel(channel)
        self._set_type_toggles({notification_type: {channel.value: enabled}})
        self._touch(["preferences"])

    def update_quiet_hours(self, enabled=None, start_time=None, end_time=None, timezone=None):
        if enabled is None and start_time is None and end_time is None and timezone is None:
            raise ValidationError({"quiet_hours": ["At least one quiet hours setting must be provided"]})

        self._set_quiet_hours(enabled, start_time, end_time, timezone)
        self._touch(["quiet_hours"])

    def apply_update(self, update):
        """Merge a validated ``PreferenceUpdate``; absent fields keep their values."""
        changed = []

        channels = {
            DeliveryChannel.EMAIL: update.email_notifications,
            DeliveryChannel.PUSH: update.push_notifications,
            DeliveryChannel.IN_APP: update.in_app_notifications,
        }
        for channel, enabled in channels.items():
            if enabled is not None:
                self._set_channel(channel, enabled)
                if "channels" not in changed:
                    changed.append("channels")

        if update.preferences:
            self._set_type_toggles(
                {
                    notification_type: toggles.model_dump(exclude_none=True)
                    for notification_type, toggles in update.preferences.items()
                }
            )
            changed.append("preferences")

        if update.quiet_hours is not None:
            self._set_quiet_hours(**update.quiet_hours.model_dump())
            changed.append("quiet_hours")

        if changed:
            self._touch(changed)

        return changed

    def reset_to_default(self):
        """Restore default switches, type toggles and quiet hours."""
        now = datetime.now(UTC)

        self.email_notifications = True
        self.push_notifications = True
        self.in_app_notifications = True
        self.type_preferences = _serialize_type_preferences(DEFAULT_TYPE_PREFERENCES)
        self.quiet_hours_enabled = False
        self.quiet_hours_start = DEFAULT_QUIET_HOURS_START
        self.quiet_hours_end = DEFAULT_QUIET_HOURS_END
        self.quiet_hours_timezone = DEFAULT_TIMEZONE
        self.updated_at = now

        self.raise_(
            PreferencesReset(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                reset_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------
    def to_payload(self):
        return {
            "user_id": str(self.user_id),
            "email_notifications": self.email_notifications,
            "push_notifications": self.push_notifications,
            "in_app_notifications": self.in_app_notifications,
            "preferences": {t.value: toggles.to_dict() for t, toggles in self.get_type_preferences().items()},
            "quiet_hours": {
                "enabled": self.quiet_hours_enabled,
                "start_time": self.quiet_hours_start,
                "end_time": self.quiet_hours_end,
                "timezone": self.quiet_hours_timezone,
            },
        }
