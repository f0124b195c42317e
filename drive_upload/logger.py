"""Lightweight logging helper shared by the upload services."""

from __future__ import annotations

import logging
from typing import Any, Dict

_LOGGER = logging.getLogger("drive_upload")

# Metadata keys whose values are credentials and are masked before emission.
SECRET_KEYS = frozenset(
    {"access_token", "accesstoken", "authorization", "client_secret", "refresh_token", "token"}
)
MASK = "***"


def _coerce(parts: tuple[object, ...]) -> str:
    rendered = " ".join(str(part) for part in parts if part is not None)
    return rendered.strip()


def _mask_secrets(metadata: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: MASK if key.lower() in SECRET_KEYS and value else value
        for key, value in metadata.items()
    }


def log(*parts: object, level: int = logging.INFO, **metadata: Any) -> None:
    """
    Emit a tagged log line such as ``[drive] created folder | {...}``.

    Keyword arguments are appended as a dict so request context (city, folder
    id, stage) stays greppable. Credential keys such as ``access_token`` are
    replaced with ``***``.
    """

    message = _coerce(parts)
    if metadata:
        message = f"{message} | {_mask_secrets(metadata)}"

    if not _LOGGER.handlers:
        logging.basicConfig(level=logging.INFO)

    _LOGGER.log(level, message)


__all__ = ["MASK", "SECRET_KEYS", "log"]
