"""Text normalization for extracted article content."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")

# Keep word characters, whitespace and basic punctuation only
_DISALLOWED_RE = re.compile(r"[^\w\s.,!?;:()\-\"']")


def clean_text(text: str | None) -> str:
    """Collapse whitespace and strip characters outside the allowed set."""
    if not text:
        return ""
    text = _DISALLOWED_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
