"""Thai phone number formatting."""

from __future__ import annotations

import re
from typing import Iterable, Optional

NON_DIGIT_RE = re.compile(r"\D")
COUNTRY_CODE = "66"


def _national_digits(value: str) -> str:
    digits = NON_DIGIT_RE.sub("", value)
    # +66 81 234 5678 -> 0812345678
    if digits.startswith(COUNTRY_CODE) and len(digits) in (10, 11):
        return "0" + digits[len(COUNTRY_CODE):]
    return digits


def format_phone_number(value: Optional[str]) -> str:
    """Format a free-form phone string for display.

    Mobile numbers become ``0XX-XXX-XXXX``, Bangkok landlines ``02-XXX-XXXX``
    and other landlines ``0XX-XXX-XXX``. Input that does not look like a Thai
    number is returned trimmed.
    """
    if not value:
        return ""
    text = value.strip()
    digits = _national_digits(text)

    if len(digits) == 10 and digits.startswith("0"):
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    if len(digits) == 9 and digits.startswith("02"):
        return f"{digits[:2]}-{digits[2:5]}-{digits[5:]}"
    if len(digits) == 9 and digits.startswith("0"):
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return text


def format_phone_list(values: Optional[Iterable[Optional[str]]]) -> list[str]:
    """Format each non-empty entry, keeping order and duplicates."""
    formatted: list[str] = []
    for value in values or []:
        phone = format_phone_number(value)
        if phone:
            formatted.append(phone)
    return formatted
