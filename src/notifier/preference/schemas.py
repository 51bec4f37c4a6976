"""Pydantic models validating preference updates before they reach the aggregate.

Schemas are separate from the aggregate (anti-corruption pattern). Unknown
keys are rejected everywhere, so a misspelt channel or notification type
fails loudly instead of being stored.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notifier.errors import PreferenceValidationError
from notifier.notification.notification import NotificationType
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

CLOCK_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Update Models
# ---------------------------------------------------------------------------
class ChannelTogglesUpdate(_StrictModel):
    email: bool | None = None
    push: bool | None = None
    in_app: bool | None = None


class QuietHoursUpdate(_StrictModel):
    enabled: bool | None = None
    start_time: str | None = Field(default=None, pattern=CLOCK_PATTERN, examples=["22:00"])
    end_time: str | None = Field(default=None, pattern=CLOCK_PATTERN, examples=["08:00"])
    timezone: str | None = Field(default=None, examples=["Europe/Berlin"])

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value):
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value}") from None
        return value


class PreferenceUpdate(_StrictModel):
    """Partial update: only the fields that are present are applied."""

    email_notifications: bool | None = None
    push_notifications: bool | None = None
    in_app_notifications: bool | None = None
    preferences: dict[NotificationType, ChannelTogglesUpdate] | None = None
    quiet_hours: QuietHoursUpdate | None = None


def _error_details(exc: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def parse_preference_update(payload: dict) -> PreferenceUpdate:
    """Validate a raw update payload, raising PreferenceValidationError on bad input."""
    try:
        return PreferenceUpdate.model_validate(payload)
    except PydanticValidationError as exc:
        raise PreferenceValidationError("Invalid preference update", details=_error_details(exc)) from exc


def parse_quiet_hours_update(payload: dict) -> QuietHoursUpdate:
    try:
        return QuietHoursUpdate.model_validate(payload)
    except PydanticValidationError as exc:
        raise PreferenceValidationError("Invalid quiet hours", details=_error_details(exc)) from exc
