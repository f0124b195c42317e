"""Typed request and result structures for upload negotiation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)


class UploadRequest(BaseModel):
    """Inbound payload after the shape and type checks."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fio: StrictStr = Field(..., validation_alias=AliasChoices("fio", "identity"))
    city: StrictStr
    subject: Optional[StrictStr] = None
    file_name: StrictStr = Field(..., alias="fileName")
    mime_type: Optional[StrictStr] = Field(default=None, alias="mimeType")
    size: Optional[Union[StrictInt, StrictFloat]] = None

    @field_validator("size")
    @classmethod
    def require_whole_byte_count(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
            raise ValueError("size must be a whole number of bytes")
        if value < 0:
            raise ValueError("size must not be negative")
        return value


class UploadStage(str, Enum):
    """Per-request progress through the negotiation."""

    RECEIVED = "received"
    VALIDATED = "validated"
    AUTHENTICATED = "authenticated"
    FOLDER_RESOLVED = "folder_resolved"
    SESSION_OPENED = "session_opened"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass(frozen=True)
class ValidatedUpload:
    """Request fields after identity, subject, city and content-type checks."""

    identity: str
    city: str
    root_id: str
    subject: Optional[str]
    file_name: str
    mime_type: str
    size: Optional[int]


@dataclass(frozen=True)
class UploadSession:
    """Everything the browser needs to stream the file to Drive."""

    upload_url: str
    access_token: str
    folder_id: str
    final_name: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "uploadUrl": self.upload_url,
            "accessToken": self.access_token,
            "fioFolderId": self.folder_id,
            "finalName": self.final_name,
        }


__all__ = ["UploadRequest", "UploadSession", "UploadStage", "ValidatedUpload"]
