"""Repository-wide pytest fixtures."""

from __future__ import annotations

import json
import re
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pytest

from drive_upload.services.uploads.settings import UploadSettings, get_upload_settings

_NAME_RX = re.compile(r"name='((?:\\.|[^'\\])*)'")
_PARENT_RX = re.compile(r"'((?:\\.|[^'\\])*)' in parents")


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


@pytest.fixture(autouse=True)
def _set_default_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Give every test a complete, offline configuration."""

    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "client-secret")
    monkeypatch.setenv("GOOGLE_REFRESH_TOKEN", "refresh-token")
    monkeypatch.setenv("GOOGLE_DRIVE_SAMARA_ID", "root-samara")
    monkeypatch.setenv("GOOGLE_DRIVE_SARATOV_ID", "root-saratov")
    monkeypatch.delenv("GOOGLE_DRIVE_MOSCOW_ID", raising=False)
    monkeypatch.delenv("GOOGLE_DRIVE_SPB_ID", raising=False)
    monkeypatch.delenv("UPLOAD_ALLOWED_SUBJECTS", raising=False)
    monkeypatch.delenv("UPLOAD_REQUIRE_SUBJECT", raising=False)
    get_upload_settings.cache_clear()
    yield
    get_upload_settings.cache_clear()


@pytest.fixture
def upload_settings() -> UploadSettings:
    """Settings equivalent to the default test environment."""

    return UploadSettings(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        city_roots={"samara": "root-samara", "saratov": "root-saratov", "moscow": None, "spb": None},
    )


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = text or (json.dumps(payload) if payload is not None else "")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: Dict[str, str]
    params: Dict[str, str]
    body: Optional[Dict[str, Any]]


@dataclass
class FakeDriveBackend:
    """In-memory stand-in for the Drive endpoints, used as a ``requests.Session``."""

    folders: List[Tuple[str, str, str]] = field(default_factory=list)
    calls: List[RecordedCall] = field(default_factory=list)
    session_location: Optional[str] = "https://www.googleapis.com/upload/drive/v3/files?upload_id=session-1"
    fail_with: Dict[str, FakeResponse] = field(default_factory=dict)
    _next_id: int = 1

    def add_folder(self, parent_id: str, name: str) -> str:
        folder_id = f"folder-{self._next_id}"
        self._next_id += 1
        self.folders.append((folder_id, parent_id, name))
        return folder_id

    def fail(self, kind: str, status_code: int, payload: Optional[Dict[str, Any]] = None, text: str = "") -> None:
        self.fail_with[kind] = FakeResponse(status_code, payload, text=text)

    def calls_of(self, kind: str) -> List[RecordedCall]:
        return [call for call in self.calls if self._kind(call.method, call.url) == kind]

    @staticmethod
    def _kind(method: str, url: str) -> str:
        if "/upload/drive/v3/files" in url:
            return "session"
        if method == "GET":
            return "search"
        return "create"

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        raw = kwargs.get("data")
        body = json.loads(raw.decode("utf-8")) if raw else None
        call = RecordedCall(
            method=method,
            url=url,
            headers=dict(kwargs.get("headers") or {}),
            params=dict(kwargs.get("params") or {}),
            body=body,
        )
        self.calls.append(call)

        kind = self._kind(method, url)
        if kind in self.fail_with:
            return self.fail_with[kind]

        if kind == "search":
            query = call.params["q"]
            name = _unescape(_NAME_RX.search(query).group(1))
            parent = _unescape(_PARENT_RX.search(query).group(1))
            matches = [
                {"id": folder_id, "name": folder_name}
                for folder_id, folder_parent, folder_name in self.folders
                if folder_parent == parent and folder_name == name
            ]
            return FakeResponse(200, {"files": matches})

        if kind == "create":
            folder_id = self.add_folder(body["parents"][0], body["name"])
            return FakeResponse(200, {"id": folder_id})

        headers = {"Location": self.session_location} if self.session_location else {}
        return FakeResponse(200, None, headers=headers)


@pytest.fixture
def drive_backend() -> FakeDriveBackend:
    return FakeDriveBackend()
