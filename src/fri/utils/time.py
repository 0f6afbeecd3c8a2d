"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

BUDDHIST_ERA_OFFSET = 543
BANGKOK_TZ = timezone(timedelta(hours=7))


def format_thai_datetime(value: Optional[datetime]) -> str:
    """Render a timestamp in Bangkok time with a Buddhist-era year."""
    if value is None:
        return "-"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(BANGKOK_TZ)
    year = local.year + BUDDHIST_ERA_OFFSET
    return f"{local.day}/{local.month}/{year} {local:%H:%M:%S}"
