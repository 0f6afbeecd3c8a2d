"""Text helpers for pasted, typed and OCR-derived messages."""

from __future__ import annotations

import re
from typing import Optional

ZERO_WIDTH_RE = re.compile("[\u200B-\u200D\uFEFF]")
INLINE_WHITESPACE_RE = re.compile(r"[^\S\r\n]+")

OCR_SEPARATOR = "\n\n"


def normalize_text(text: Optional[str]) -> str:
    """Drop zero-width characters, collapse inline whitespace and trim.

    Newlines are kept so the layout of a social-media post survives.
    """
    if not text:
        return ""
    cleaned = ZERO_WIDTH_RE.sub("", text)
    cleaned = INLINE_WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def append_staged_text(existing: str, addition: str, separator: str = OCR_SEPARATOR) -> str:
    """Append ``addition`` to staged text, never replacing what is there."""
    cleaned = normalize_text(addition)
    if not cleaned:
        return existing
    if not existing:
        return cleaned
    return existing + separator + cleaned


def append_pasted_text(existing: str, pasted: str) -> str:
    """Append a clipboard paste directly after the staged text."""
    return append_staged_text(existing, pasted, separator="")
