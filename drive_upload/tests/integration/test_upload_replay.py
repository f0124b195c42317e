"""Integration-style tests replaying one submission against the same Drive tree."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from drive_upload.api.main import app
from drive_upload.services.google.drive import DriveClient
from drive_upload.services.uploads import orchestrator

BODY = {
    "identity": "Сидорова Мария",
    "city": "saratov",
    "subject": "Анатомия",
    "fileName": "practice.session.mp4",
    "mimeType": "video/mp4",
    "size": 734003200,
}


@pytest.fixture
def wired_client(monkeypatch: pytest.MonkeyPatch, drive_backend) -> TestClient:
    monkeypatch.setattr(orchestrator, "obtain_access_token", lambda settings: "ya29.replay")
    monkeypatch.setattr(
        orchestrator,
        "DriveClient",
        lambda access_token, timeout=None: DriveClient(access_token, session=drive_backend, timeout=timeout),
    )
    return TestClient(app)


def test_replay_reuses_folder_without_second_create(wired_client: TestClient, drive_backend) -> None:
    first = wired_client.post("/api/create-upload-url", json=BODY)
    assert first.status_code == 200
    assert len(drive_backend.calls_of("create")) == 1
    assert drive_backend.folders[0][1:] == ("root-saratov", "Сидорова Мария")

    second = wired_client.post("/api/create-upload-url", json=BODY)
    assert second.status_code == 200

    assert second.json()["fioFolderId"] == first.json()["fioFolderId"]
    assert len(drive_backend.calls_of("create")) == 1
    assert len(drive_backend.calls_of("session")) == 2


def test_session_request_carries_declared_type_and_size(wired_client: TestClient, drive_backend) -> None:
    response = wired_client.post("/api/create-upload-url", json=BODY)

    assert response.status_code == 200
    final_name = response.json()["finalName"]
    assert final_name.startswith("Сидорова_Мария_Анатомия_")
    assert final_name.endswith(".mp4")

    session_call = drive_backend.calls_of("session")[0]
    assert session_call.headers["Authorization"] == "Bearer ya29.replay"
    assert session_call.headers["X-Upload-Content-Type"] == "video/mp4"
    assert session_call.headers["X-Upload-Content-Length"] == "734003200"
    assert session_call.body["appProperties"]["subject"] == "Анатомия"
    assert session_call.body["appProperties"]["source"] == "video-upload-form"
