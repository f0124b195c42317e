"""OAuth refresh-token exchange for the Drive service account owner."""

from __future__ import annotations

import logging

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from drive_upload.services.uploads.errors import AuthenticationError
from drive_upload.services.uploads.settings import UploadSettings

logger = logging.getLogger(__name__)


def build_credentials(settings: UploadSettings) -> Credentials:
    """Create refreshable credentials from the configured client and refresh token."""

    client_id, client_secret, refresh_token = settings.require_credentials()
    return Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=settings.token_uri,
        client_id=client_id,
        client_secret=client_secret,
    )


def obtain_access_token(settings: UploadSettings) -> str:
    """
    Exchange the long-lived refresh token for a fresh bearer token.

    A new token is requested on every call; expiry is managed by Google and the
    caller is expected to use the token before it lapses.
    """

    credentials = build_credentials(settings)
    try:
        credentials.refresh(Request())
    except (RefreshError, TransportError) as exc:
        logger.warning("Google token refresh failed: %s", exc)
        raise AuthenticationError(f"Failed to retrieve access token: {exc}") from exc

    if not credentials.token:
        raise AuthenticationError("Failed to retrieve access token.")
    return credentials.token


__all__ = ["build_credentials", "obtain_access_token"]
