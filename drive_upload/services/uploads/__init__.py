"""Upload-session negotiation: validation, naming and orchestration."""

from .errors import (
    AuthenticationError,
    ConfigurationError,
    StorageBackendError,
    UploadError,
    ValidationError,
)
from .models import UploadRequest, UploadSession, UploadStage
from .orchestrator import create_upload_session, parse_upload_request
from .settings import UploadSettings, get_upload_settings

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "StorageBackendError",
    "UploadError",
    "ValidationError",
    "UploadRequest",
    "UploadSession",
    "UploadStage",
    "UploadSettings",
    "create_upload_session",
    "get_upload_settings",
    "parse_upload_request",
]
