"""Upload-session negotiation endpoint used by the video form."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from drive_upload.api.schemas import ErrorResponse, UploadSessionResponse
from drive_upload.services.uploads import (
    UploadError,
    UploadSettings,
    ValidationError,
    create_upload_session,
    get_upload_settings,
    parse_upload_request,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/create-upload-url",
    response_model=UploadSessionResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def create_upload_url(
    payload: Any = Body(default=None),
    settings: UploadSettings = Depends(get_upload_settings),
) -> UploadSessionResponse:
    """Find or create the identity folder and open a resumable Drive session."""

    try:
        request = parse_upload_request(payload)
        session = create_upload_session(request, settings)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except UploadError as exc:
        logger.error("Upload negotiation failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Unexpected error while negotiating upload session")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return UploadSessionResponse(**session.to_payload())
