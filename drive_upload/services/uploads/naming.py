"""Identity sanitizing and final file-name composition."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

MIN_IDENTITY_LENGTH = 3

_WHITESPACE_RUN = re.compile(r"\s{2,}")
_ANY_WHITESPACE = re.compile(r"\s+")
_PATH_HOSTILE = re.compile(r'[\\/:*?"<>|]')


def _is_identity_char(char: str) -> bool:
    # Unicode letter categories start with "L" (Lu, Ll, Lt, Lm, Lo).
    return char.isalpha() or char.isspace()


def sanitize_identity(raw: str) -> str:
    """Keep only letters and whitespace, collapse whitespace runs and trim."""

    letters_and_spaces = "".join(char for char in raw or "" if _is_identity_char(char))
    return _WHITESPACE_RUN.sub(" ", letters_and_spaces.strip())


def is_valid_identity(raw: str) -> bool:
    """
    Return True when ``raw`` holds only letters and whitespace and its
    sanitized form is at least ``MIN_IDENTITY_LENGTH`` characters long.

    Digits or punctuation make the identity invalid rather than being
    silently dropped, matching the check the form performs before submitting.
    """

    if not all(_is_identity_char(char) for char in raw or ""):
        return False
    return len(sanitize_identity(raw)) >= MIN_IDENTITY_LENGTH


def format_timestamp(moment: datetime) -> str:
    """Render a sortable, filesystem-safe ``YYYY-MM-DD_HH-MM-SS`` label."""

    return moment.strftime("%Y-%m-%d_%H-%M-%S")


def _extension(original_file_name: str) -> str:
    name = original_file_name or ""
    index = name.rfind(".")
    if index == -1:
        return ""
    return _PATH_HOSTILE.sub("", name[index:])


def _name_segment(value: str) -> str:
    cleaned = _PATH_HOSTILE.sub("", value or "")
    collapsed = _ANY_WHITESPACE.sub(" ", cleaned).strip()
    return collapsed.replace(" ", "_")


def compose_file_name(
    identity: str,
    category: Optional[str],
    original_file_name: str,
    now: Optional[datetime] = None,
) -> str:
    """
    Build ``{identity}_{category}_{timestamp}{ext}`` for the Drive file.

    Two calls within the same second for the same identity and category
    produce the same name; the per-identity folder is what keeps uploads apart.
    """

    moment = now or datetime.now()
    segments = [_name_segment(identity)]
    if category:
        segments.append(_name_segment(category))
    segments.append(format_timestamp(moment))
    return "_".join(segment for segment in segments if segment) + _extension(original_file_name)


__all__ = [
    "MIN_IDENTITY_LENGTH",
    "compose_file_name",
    "format_timestamp",
    "is_valid_identity",
    "sanitize_identity",
]
