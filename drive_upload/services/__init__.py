"""Shared service exports."""

from .uploads import create_upload_session, parse_upload_request

__all__ = [
    "create_upload_session",
    "parse_upload_request",
]
