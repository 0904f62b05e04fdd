"""
Episode Mood Errors

Every failure the pipeline can report is a MoodError. The CLI turns
these into the single-line JSON error envelope; nothing below the CLI
prints or exits.
"""

from __future__ import annotations

from typing import Any, Optional


class MoodError(Exception):
    """Base exception for episode mood errors."""

    code = "UNKNOWN"

    def __init__(self, message: str, code: Optional[str] = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(MoodError):
    """Raised when configuration is invalid or missing."""

    code = "CONFIG_ERROR"

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, details={"config_key": config_key})
        self.config_key = config_key


class NotFoundError(MoodError):
    """Raised when the episode lookup returns no episodes."""

    code = "NOT_FOUND"


class NoVersionError(MoodError):
    """Raised when the first episode has no versions."""

    code = "NO_VERSION"


class TransportError(MoodError):
    """Raised when a service call fails or its body cannot be parsed."""

    code = "TRANSPORT_ERROR"


class DeadlineExceededError(TransportError):
    """Raised when the pipeline deadline elapses."""

    code = "DEADLINE_EXCEEDED"


class MalformedLinkError(MoodError):
    """Raised when a SPOTIFY link value has fewer than three segments."""

    code = "MALFORMED_LINK"

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message, details={"value": value})
        self.value = value


class AuthError(MoodError):
    """Raised when the streaming service token exchange fails."""

    code = "AUTH_FAILURE"


class NoMoodDataError(MoodError):
    """Raised when no track survives to the mood reduction."""

    code = "NO_MOOD_DATA"
