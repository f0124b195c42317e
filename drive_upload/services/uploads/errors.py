"""Error taxonomy for upload-session negotiation."""

from __future__ import annotations

from typing import Optional


class UploadError(Exception):
    """Base class for every failure raised while negotiating an upload."""


class ValidationError(UploadError):
    """Raised when client-supplied data fails a shape, format or allow-list check."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class ConfigurationError(UploadError):
    """Raised when a required deployment secret or root folder id is missing."""


class AuthenticationError(UploadError):
    """Raised when Google refuses the refresh-token exchange."""


class StorageBackendError(UploadError):
    """Raised when the Drive API answers a search, create or session call with a failure."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = [
    "UploadError",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    "StorageBackendError",
]
