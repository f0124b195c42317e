"""Negotiate a Drive upload session for one form submission.

The flow is strictly sequential and holds no state between requests:

    RECEIVED -> VALIDATED -> AUTHENTICATED -> FOLDER_RESOLVED
             -> SESSION_OPENED -> RESPONDED

Any step may end in FAILED. Validation runs before the first network call, so
a rejected payload never touches Google. A folder created before a later
failure is left in place; replaying the request reuses it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from drive_upload.logger import log
from drive_upload.services.google.credentials import obtain_access_token
from drive_upload.services.google.drive import DriveClient

from .errors import ValidationError
from .models import UploadRequest, UploadSession, UploadStage, ValidatedUpload
from .naming import compose_file_name, is_valid_identity, sanitize_identity
from .settings import UploadSettings

logger = logging.getLogger(__name__)

ALLOWED_MEDIA_PREFIX = "video/"

# Drive limits each appProperties entry to 124 bytes of UTF-8 for key and value combined.
APP_PROPERTY_MAX_BYTES = 124


def parse_upload_request(raw: Any) -> UploadRequest:
    """Turn an untyped JSON body into an ``UploadRequest`` or fail with ``payload``."""

    if not isinstance(raw, Mapping):
        raise ValidationError("payload", "Invalid payload")
    try:
        return UploadRequest.model_validate(dict(raw))
    except PydanticValidationError as exc:
        logger.debug("Rejected upload payload: %s", exc)
        raise ValidationError("payload", "Invalid payload") from exc


def validate_upload_request(request: UploadRequest, settings: UploadSettings) -> ValidatedUpload:
    """Apply identity, subject, city and content-type rules in that order."""

    if not is_valid_identity(request.fio):
        raise ValidationError("identity", "ФИО должно содержать только буквы и пробелы")
    identity = sanitize_identity(request.fio)

    subject = request.subject or None
    if subject is None:
        if settings.require_subject:
            raise ValidationError("subject", "Выберите предмет")
    elif subject not in settings.allowed_subjects:
        raise ValidationError("subject", "Недопустимый предмет")

    root_id = settings.root_for_city(request.city)

    mime_type = request.mime_type or ""
    if not mime_type.startswith(ALLOWED_MEDIA_PREFIX):
        raise ValidationError("mimeType", "Разрешены только видеофайлы")

    return ValidatedUpload(
        identity=identity,
        city=request.city.strip().lower(),
        root_id=root_id,
        subject=subject,
        file_name=request.file_name,
        mime_type=mime_type,
        size=int(request.size) if request.size is not None else None,
    )


def _fit_app_property(key: str, value: str) -> str:
    budget = APP_PROPERTY_MAX_BYTES - len(key.encode("utf-8"))
    encoded = value.encode("utf-8")
    if len(encoded) <= budget:
        return value
    return encoded[:budget].decode("utf-8", errors="ignore")


def build_metadata(
    upload: ValidatedUpload,
    *,
    moment: datetime,
    source_tag: str,
) -> Dict[str, str]:
    """Return the ``appProperties`` stored on the Drive file for later lookup."""

    properties = {
        "fio": upload.identity,
        "city": upload.city,
        "uploadedAt": moment.astimezone(timezone.utc).isoformat(timespec="seconds"),
        "source": source_tag,
    }
    if upload.subject:
        properties["subject"] = upload.subject
    return {key: _fit_app_property(key, value) for key, value in properties.items()}


def create_upload_session(
    request: UploadRequest,
    settings: UploadSettings,
    *,
    now: Optional[datetime] = None,
) -> UploadSession:
    """
    Validate ``request``, resolve the identity folder and open a resumable session.

    Raises ``ValidationError`` for caller mistakes and ``ConfigurationError``,
    ``AuthenticationError`` or ``StorageBackendError`` for server-side failures.
    The returned token and session URL expire on Google's schedule.
    """

    stage = UploadStage.RECEIVED
    try:
        upload = validate_upload_request(request, settings)
        stage = UploadStage.VALIDATED
        log("[uploads] request validated", city=upload.city, subject=upload.subject)

        token = obtain_access_token(settings)
        stage = UploadStage.AUTHENTICATED

        with DriveClient(token, timeout=settings.http_timeout) as drive:
            folder_id = drive.resolve_folder(upload.root_id, upload.identity)
            stage = UploadStage.FOLDER_RESOLVED

            moment = now or datetime.now().astimezone()
            final_name = compose_file_name(upload.identity, upload.subject, upload.file_name, now=moment)
            metadata = build_metadata(upload, moment=moment, source_tag=settings.source_tag)

            upload_url = drive.open_resumable_session(
                folder_id,
                final_name,
                upload.mime_type,
                upload.size,
                metadata,
            )
        stage = UploadStage.SESSION_OPENED
    except Exception:
        log(
            "[uploads] negotiation failed",
            stage=stage.value,
            outcome=UploadStage.FAILED.value,
            level=logging.WARNING,
        )
        raise

    session = UploadSession(
        upload_url=upload_url,
        access_token=token,
        folder_id=folder_id,
        final_name=final_name,
    )
    log("[uploads] session opened", folder_id=folder_id, final_name=final_name, stage=UploadStage.RESPONDED.value)
    return session


__all__ = [
    "ALLOWED_MEDIA_PREFIX",
    "build_metadata",
    "create_upload_session",
    "parse_upload_request",
    "validate_upload_request",
]
