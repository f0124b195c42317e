"""Google Drive REST helpers for folder resolution and resumable uploads."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

import requests

from drive_upload.logger import log
from drive_upload.services.uploads.errors import StorageBackendError

logger = logging.getLogger(__name__)

DRIVE_API = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_API = "https://www.googleapis.com/upload/drive/v3"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DEFAULT_UPLOAD_MIME_TYPE = "application/octet-stream"


def escape_query_value(value: str) -> str:
    """Escape a literal for embedding between single quotes in a Drive ``q`` expression."""

    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_folder_query(parent_id: str, name: str) -> str:
    """Return the search expression for a non-trashed folder ``name`` directly under ``parent_id``."""

    return " and ".join(
        [
            f"name='{escape_query_value(name)}'",
            f"mimeType='{FOLDER_MIME_TYPE}'",
            f"'{escape_query_value(parent_id)}' in parents",
            "trashed=false",
        ]
    )


def pick_first_folder(files: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """
    Choose the canonical folder among search results.

    Drive decides the result order, so when duplicates already exist the
    lowest-index entry wins. Returns None when there is nothing to pick.
    """

    for entry in files:
        folder_id = entry.get("id")
        if folder_id:
            return str(folder_id)
    return None


def _error_text(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text


def _json_body(response: requests.Response, action: str) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise StorageBackendError(
            f"{action} error: response was not valid JSON",
            status_code=response.status_code,
        ) from exc
    return payload if isinstance(payload, dict) else {}


def _is_absolute_https(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme == "https" and bool(parsed.netloc)


class DriveClient:
    """Thin wrapper over the Drive v3 endpoints used by the upload flow."""

    def __init__(
        self,
        access_token: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._access_token = access_token
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout

    def close(self) -> None:
        """Release the HTTP session when this client created it."""

        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "DriveClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, url: str, action: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise StorageBackendError(f"{action} error: {exc}") from exc

        if not response.ok:
            text = _error_text(response)
            logger.warning("%s failed with status %s: %s", action, response.status_code, text)
            raise StorageBackendError(
                f"{action} error: {response.status_code} {text}",
                status_code=response.status_code,
            )
        return response

    # ------------------------------------------------------------------
    # Folder resolution
    # ------------------------------------------------------------------
    def find_folders(self, parent_id: str, name: str) -> List[Dict[str, Any]]:
        """Return folders named exactly ``name`` under ``parent_id``."""

        response = self._send(
            "GET",
            f"{DRIVE_API}/files",
            "Drive search",
            headers=self._headers(),
            params={
                "q": build_folder_query(parent_id, name),
                "fields": "files(id,name)",
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
        )
        files = _json_body(response, "Drive search").get("files") or []
        return [entry for entry in files if isinstance(entry, dict)]

    def create_folder(self, parent_id: str, name: str) -> str:
        """Create folder ``name`` under ``parent_id`` and return its id."""

        response = self._send(
            "POST",
            f"{DRIVE_API}/files",
            "Create folder",
            headers=self._headers({"Content-Type": "application/json; charset=UTF-8"}),
            params={"supportsAllDrives": "true", "fields": "id"},
            data=json.dumps(
                {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
                ensure_ascii=False,
            ).encode("utf-8"),
        )
        folder_id = _json_body(response, "Create folder").get("id")
        if not folder_id:
            raise StorageBackendError("Create folder error: response did not include a folder id")
        return str(folder_id)

    def resolve_folder(self, parent_id: str, name: str) -> str:
        """
        Return the id of folder ``name`` under ``parent_id``, creating it when absent.

        The search and the create are separate calls, so two concurrent first-time
        requests for the same name can both create a folder. Later resolutions
        then return whichever one Drive lists first.
        """

        existing = pick_first_folder(self.find_folders(parent_id, name))
        if existing:
            log("[drive] reusing folder", parent_id=parent_id, folder_id=existing)
            return existing

        folder_id = self.create_folder(parent_id, name)
        log("[drive] created folder", parent_id=parent_id, folder_id=folder_id)
        return folder_id

    # ------------------------------------------------------------------
    # Resumable uploads
    # ------------------------------------------------------------------
    def open_resumable_session(
        self,
        folder_id: str,
        file_name: str,
        mime_type: Optional[str],
        size: Optional[int],
        metadata: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Start a resumable upload and return the session URL from ``Location``.

        The declared content type and length travel in ``X-Upload-*`` headers so
        Drive can check the bytes later sent to the session URL.
        """

        headers = {
            "Content-Type": "application/json; charset=UTF-8",
            "X-Upload-Content-Type": mime_type or DEFAULT_UPLOAD_MIME_TYPE,
        }
        if size is not None:
            headers["X-Upload-Content-Length"] = str(int(size))

        body: Dict[str, Any] = {"name": file_name, "parents": [folder_id]}
        if metadata:
            body["appProperties"] = dict(metadata)

        response = self._send(
            "POST",
            f"{DRIVE_UPLOAD_API}/files",
            "Open resumable session",
            headers=self._headers(headers),
            params={"uploadType": "resumable", "supportsAllDrives": "true"},
            data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        )

        upload_url = response.headers.get("Location")
        if not upload_url:
            raise StorageBackendError(
                "No 'Location' header returned by Drive",
                status_code=response.status_code,
            )
        if not _is_absolute_https(upload_url):
            raise StorageBackendError(
                "Drive returned a malformed upload session URL",
                status_code=response.status_code,
            )
        return upload_url


__all__ = [
    "DRIVE_API",
    "DRIVE_UPLOAD_API",
    "FOLDER_MIME_TYPE",
    "DriveClient",
    "build_folder_query",
    "escape_query_value",
    "pick_first_folder",
]
