"""Utility helpers."""

from fri.utils.hashing import hash_text
from fri.utils.logging import configure_logging, get_logger
from fri.utils.phone import format_phone_list, format_phone_number
from fri.utils.text import append_pasted_text, append_staged_text, normalize_text

__all__ = [
    "hash_text",
    "configure_logging",
    "get_logger",
    "format_phone_number",
    "format_phone_list",
    "normalize_text",
    "append_staged_text",
    "append_pasted_text",
]
