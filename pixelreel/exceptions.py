"""Exception hierarchy for PixelReel."""

from __future__ import annotations


class PixelReelError(Exception):
    """Base exception for all PixelReel errors."""


class Unauthorized(PixelReelError):
    """Raised when a bearer credential is missing, malformed, or rejected."""


class Forbidden(PixelReelError):
    """Raised when admission is denied (inactive subscription or daily limit).

    Carries the numeric usage so clients can render an upgrade prompt.
    """

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        used: int | None = None,
        limit: int | None = None,
        subscription: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message or reason)
        self.reason = reason
        self.used = used
        self.limit = limit
        self.subscription = subscription or {}


class NotFound(PixelReelError):
    """Raised when a resource does not exist for the calling account."""


class InvalidSignature(PixelReelError):
    """Raised when a webhook payload fails signature verification."""


class InvalidRequest(PixelReelError):
    """Raised when a request body is missing required input."""


class UpstreamFailure(PixelReelError):
    """Raised when an identity, payment, generation, or storage provider call fails."""


class ServiceUnavailable(UpstreamFailure):
    """Raised when a provider could not be reached at all."""


class StorageError(PixelReelError):
    """Raised when media storage operations fail."""


class ConfigError(PixelReelError):
    """Raised when configuration is invalid."""
