"""Deployment settings consumed by the upload orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional, Tuple

from drive_upload.config import CONFIG, _env_bool, _env_str, _env_tuple

from .errors import ConfigurationError, ValidationError

DEFAULT_SUBJECTS: Tuple[str, ...] = (
    "Микробиология",
    "Анатомия",
    "Русский Язык",
    "Химия",
    "Биология",
)

# Recognized city keys and the environment variable holding each root folder id.
CITY_ROOT_ENV_VARS: Dict[str, str] = {
    "samara": "GOOGLE_DRIVE_SAMARA_ID",
    "saratov": "GOOGLE_DRIVE_SARATOV_ID",
    "moscow": "GOOGLE_DRIVE_MOSCOW_ID",
    "spb": "GOOGLE_DRIVE_SPB_ID",
}

DEFAULT_SOURCE_TAG = "video-upload-form"


@dataclass(frozen=True, slots=True)
class UploadSettings:
    """Secrets and lookup tables loaded once from the environment.

    Values are kept optional so a missing secret only fails the request that
    needs it, with a ``ConfigurationError`` naming the variable.
    """

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    city_roots: Dict[str, Optional[str]] = field(default_factory=dict)
    allowed_subjects: Tuple[str, ...] = DEFAULT_SUBJECTS
    require_subject: bool = True
    source_tag: str = DEFAULT_SOURCE_TAG
    token_uri: str = "https://oauth2.googleapis.com/token"
    http_timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "UploadSettings":
        """Load settings from environment variables."""

        city_roots = {city: _env_str(env_name) for city, env_name in CITY_ROOT_ENV_VARS.items()}
        return cls(
            client_id=_env_str("GOOGLE_CLIENT_ID"),
            client_secret=_env_str("GOOGLE_CLIENT_SECRET"),
            refresh_token=_env_str("GOOGLE_REFRESH_TOKEN"),
            city_roots=city_roots,
            allowed_subjects=_env_tuple("UPLOAD_ALLOWED_SUBJECTS", DEFAULT_SUBJECTS),
            require_subject=_env_bool("UPLOAD_REQUIRE_SUBJECT", True),
            source_tag=_env_str("UPLOAD_SOURCE_TAG", DEFAULT_SOURCE_TAG, empty_to_none=False),
            http_timeout=CONFIG.drive_http_timeout,
        )

    def require_credentials(self) -> Tuple[str, str, str]:
        """Return ``(client_id, client_secret, refresh_token)`` or raise."""

        missing = [
            env_name
            for env_name, value in (
                ("GOOGLE_CLIENT_ID", self.client_id),
                ("GOOGLE_CLIENT_SECRET", self.client_secret),
                ("GOOGLE_REFRESH_TOKEN", self.refresh_token),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing env var: {', '.join(missing)}")
        return self.client_id, self.client_secret, self.refresh_token  # type: ignore[return-value]

    def root_for_city(self, city: str) -> str:
        """Map a city key to its Drive root folder id."""

        key = (city or "").strip().lower()
        if key not in CITY_ROOT_ENV_VARS:
            raise ValidationError("city", "Неизвестный город")
        root_id = self.city_roots.get(key)
        if not root_id:
            raise ConfigurationError(f"Missing env var: {CITY_ROOT_ENV_VARS[key]}")
        return root_id


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """Return the process-wide settings instance."""

    return UploadSettings.from_env()


__all__ = [
    "CITY_ROOT_ENV_VARS",
    "DEFAULT_SOURCE_TAG",
    "DEFAULT_SUBJECTS",
    "UploadSettings",
    "get_upload_settings",
]
