"""Pydantic schemas for the public API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadSessionResponse(BaseModel):
    """Session details handed to the browser for the direct PUT to Drive."""

    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(..., alias="uploadUrl", description="Resumable session URL issued by Drive.")
    access_token: str = Field(
        ...,
        alias="accessToken",
        description="Short-lived bearer token authorizing the upload PUT.",
    )
    folder_id: str = Field(..., alias="fioFolderId", description="Drive id of the per-identity folder.")
    final_name: Optional[str] = Field(
        default=None,
        alias="finalName",
        description="Name the file will carry in Drive.",
    )


class ErrorResponse(BaseModel):
    error: str
