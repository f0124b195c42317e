"""Google service helpers for the Drive upload flow."""

from .credentials import build_credentials, obtain_access_token
from .drive import DriveClient, escape_query_value, pick_first_folder

__all__ = [
    "DriveClient",
    "build_credentials",
    "escape_query_value",
    "obtain_access_token",
    "pick_first_folder",
]
