"""Turn report candidates and edit forms into store-ready records.

Every coercion here is total: bad input falls back to a default instead of
raising, so the only failure a caller sees is the write that follows.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Iterator, Optional, Union

from fri.models import (
    COUNT_FIELDS,
    DEFAULT_STATUS,
    HELP_CATEGORIES,
    MAX_URGENCY,
    MIN_URGENCY,
    NAME_PLACEHOLDER,
    UNSPECIFIED_NAME,
    NewReport,
    ReportCandidate,
    ReportFields,
)
from fri.utils.phone import format_phone_number
from fri.utils.text import normalize_text

LEADING_INT_RE = re.compile(r"^\s*\+?(\d+)")
LAT_LIMIT = 90.0
LON_LIMIT = 180.0


class HelpCategorySet:
    """Ordered set of help category tags with checkbox-style toggling."""

    def __init__(self, tags: Optional[Iterable[str]] = None) -> None:
        self._tags: list[str] = []
        for tag in tags or []:
            self.add(tag)

    def add(self, tag: str) -> None:
        if tag not in self._tags:
            self._tags.append(tag)

    def remove(self, tag: str) -> None:
        self._tags = [t for t in self._tags if t != tag]

    def toggle(self, tag: str, checked: bool) -> None:
        if checked:
            self.add(tag)
        else:
            self.remove(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def to_list(self) -> list[str]:
        return list(self._tags)


def resolve_name(value: Optional[str]) -> str:
    """Return the name, or the unspecified sentinel for blanks and ``-``."""
    if value is None or value.strip() in ("", NAME_PLACEHOLDER):
        return UNSPECIFIED_NAME
    return value


def text_or_empty(value: Optional[str]) -> str:
    """Free-text fields store an empty string when unset."""
    if value is None:
        return ""
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    """Optional text fields store ``None`` when unset."""
    if value is None or not value.strip():
        return None
    return value


def split_phone_input(value: Union[str, Iterable[Optional[str]], None]) -> list[str]:
    """Split comma-separated phone input and format each entry.

    Order is kept; duplicates are left for the caller to resolve.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: Iterable[Optional[str]] = value.split(",")
    else:
        parts = [piece for entry in value if entry for piece in entry.split(",")]

    phones: list[str] = []
    for part in parts:
        cleaned = (part or "").strip()
        if cleaned:
            phones.append(format_phone_number(cleaned))
    return phones


def parse_coordinate(value: Any, limit: float) -> Optional[float]:
    """Parse a latitude/longitude; anything unusable becomes ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def coerce_count(value: Any) -> int:
    """Coerce a head count to a non-negative integer, defaulting to 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(int(value), 0)
    if isinstance(value, str):
        match = LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else 0
    return 0


def coerce_urgency(value: Any) -> int:
    """Clamp urgency into the five selectable levels; default to the lowest."""
    level = coerce_count(value)
    if level < MIN_URGENCY:
        return MIN_URGENCY
    return min(level, MAX_URGENCY)


def split_help_categories(values: Optional[Iterable[str]]) -> tuple[HelpCategorySet, list[str]]:
    """Separate known category tags from free-form concerns."""
    known = HelpCategorySet()
    unknown: list[str] = []
    for value in values or []:
        tag = (value or "").strip()
        if not tag:
            continue
        if tag in HELP_CATEGORIES:
            known.add(tag)
        elif tag not in unknown:
            unknown.append(tag)
    return known, unknown


def _merge_additional_info(additional_info: str, extra: list[str]) -> str:
    if not extra:
        return additional_info
    joined = ", ".join(extra)
    if not additional_info.strip():
        return joined
    return f"{additional_info}\n{joined}"


def build_report_fields(
    candidate: ReportCandidate,
    phone_input: Union[str, Iterable[Optional[str]], None] = None,
) -> ReportFields:
    """Apply the defaulting and coercion rules to a candidate.

    ``phone_input`` overrides ``candidate.phone`` when given, which is how
    the edit form passes its comma-separated phone field.
    """
    categories, unknown_categories = split_help_categories(candidate.help_categories)
    phones = split_phone_input(candidate.phone if phone_input is None else phone_input)
    counts = {field: coerce_count(getattr(candidate, field)) for field in COUNT_FIELDS}

    return ReportFields(
        name=resolve_name(candidate.name),
        lastname=text_or_empty(candidate.lastname),
        reporter_name=text_or_empty(candidate.reporter_name),
        address=text_or_empty(candidate.address),
        phone=phones,
        location_lat=parse_coordinate(candidate.location_lat, LAT_LIMIT),
        location_long=parse_coordinate(candidate.location_long, LON_LIMIT),
        map_link=optional_text(candidate.map_link),
        health_condition=text_or_empty(candidate.health_condition),
        help_needed=text_or_empty(candidate.help_needed),
        help_categories=categories.to_list(),
        additional_info=_merge_additional_info(
            text_or_empty(candidate.additional_info), unknown_categories
        ),
        urgency_level=coerce_urgency(candidate.urgency_level),
        status=optional_text(candidate.status) or DEFAULT_STATUS,
        **counts,
    )


def build_new_report(
    candidate: ReportCandidate,
    raw_message: str,
    phone_input: Optional[str] = None,
) -> NewReport:
    """Build the record inserted when a reviewed candidate is accepted."""
    fields = build_report_fields(candidate, phone_input=phone_input)
    return NewReport(**fields.column_values(), raw_message=normalize_text(raw_message))


def build_report_update(candidate: ReportCandidate, phone_input: Optional[str] = None) -> ReportFields:
    """Build the column set written by the edit dialog.

    The original message is not part of the result, so an edit can never
    change it.
    """
    return build_report_fields(candidate, phone_input=phone_input)
