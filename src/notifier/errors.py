"""Error taxonomy and the JSON error envelope shared with API callers.

Every error carries a stable machine-readable ``code`` and the HTTP status a
transport layer should answer with. ``error_envelope`` renders any exception
into the response body shape used across the platform; unexpected exceptions
are reduced to a generic message so internals never leak.
"""

from datetime import UTC, datetime
from typing import Any

ENVELOPE_VERSION = "v1"


class NotifierError(Exception):
    """Base class for errors raised by the notifier service."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class PreferenceValidationError(NotifierError):
    """A preference update payload failed validation."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotificationNotFoundError(NotifierError):
    """The notification does not exist or belongs to another recipient."""

    code = "NOT_FOUND"
    status_code = 404


class MessageDecodeError(NotifierError):
    """A broker message body was not a JSON object."""

    code = "INVALID_JSON"
    status_code = 400


def error_envelope(exc: Exception) -> dict:
    """Render an exception into the platform's error response body."""
    if isinstance(exc, NotifierError):
        error = {"message": exc.message, "code": exc.code}
        if exc.details is not None:
            error["details"] = exc.details
    else:
        error = {"message": "Internal server error", "code": NotifierError.code}

    return {
        "success": False,
        "error": error,
        "meta": {
            "timestamp": datetime.now(UTC).isoformat(),
            "version": ENVELOPE_VERSION,
        },
    }


def status_code_for(exc: Exception) -> int:
    return exc.status_code if isinstance(exc, NotifierError) else NotifierError.status_code
