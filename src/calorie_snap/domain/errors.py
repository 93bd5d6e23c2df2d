"""Error taxonomy shared by the client and the gateway."""

from enum import StrEnum


class ErrorCategory(StrEnum):
    """User-facing failure categories."""

    INVALID_INPUT = "invalid-input"
    OFFLINE = "offline"
    NETWORK = "network"
    TIMEOUT = "timeout"
    SERVER = "server"
    CONFIGURATION = "configuration"
    PROVIDER_UNAVAILABLE = "provider-unavailable"
    PROVIDER_AUTH = "provider-auth"
    PARSE = "parse"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


class CalorieSnapError(Exception):
    """Base error carrying a category and a human-readable message."""

    def __init__(self, category: ErrorCategory, message: str) -> None:
        super().__init__(message)
        self.category = category
        self.message = message


class RecognitionError(CalorieSnapError):
    """Raised by the recognition client when a request cannot be completed."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        *,
        status_code: int | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(category, message)
        self.status_code = status_code
        self.attempts = attempts


class GatewayError(CalorieSnapError):
    """Raised by the gateway; rendered as a JSON failure body."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        *,
        status_code: int = 500,
        debug: str | None = None,
    ) -> None:
        super().__init__(category, message)
        self.status_code = status_code
        self.debug = debug
