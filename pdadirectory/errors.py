"""Error taxonomy for the PDA directory read path.

Every error carries the HTTP status it maps to and the message a client is
allowed to see. Server-side defects (configuration, corrupt rows) keep their
detail in ``str(exc)`` for the logs and expose only a generic message.
"""

from __future__ import annotations

INTERNAL_ERROR_MESSAGE = "internal error"


class PdaDirectoryError(Exception):
    status_code = 500

    @property
    def public_message(self) -> str:
        return INTERNAL_ERROR_MESSAGE


class ValidationError(PdaDirectoryError):
    """Malformed client input."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class RateLimitError(PdaDirectoryError):
    """The external rate limiter rejected the request."""

    status_code = 429

    @property
    def public_message(self) -> str:
        return "rate limit exceeded"


class ConfigurationError(PdaDirectoryError):
    """A required binding is missing or returned an unusable value."""


class FormatError(PdaDirectoryError):
    """A stored row violates the binary layout contract."""
