"""Identifier generation shared by every record store."""

from __future__ import annotations

import re
import time
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9\-]")
_DASH_RUNS = re.compile(r"-+")


def slugify(text: object) -> str:
    """Return a lowercase, hyphenated, filesystem-safe form of ``text``.

    Empty input yields an empty string; callers fall back to
    :func:`timestamp_token` in that case.
    """
    if text is None:
        return ""
    slug = str(text).lower()
    slug = _WHITESPACE.sub("-", slug)
    slug = _DISALLOWED.sub("", slug)
    slug = _DASH_RUNS.sub("-", slug)
    return slug.strip("-")


def timestamp_token(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}"


def derive_identifier(*candidates: Optional[object], prefix: str) -> str:
    """Slug of the first non-empty candidate, else a timestamp token."""
    for candidate in candidates:
        if candidate in (None, ""):
            continue
        slug = slugify(candidate)
        if slug:
            return slug
        break
    return slugify(timestamp_token(prefix))
