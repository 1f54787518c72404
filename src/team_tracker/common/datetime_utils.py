from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD, or a full ISO timestamp, into date. Anything else is rejected."""
    v = (value or "").strip()
    if v[-1:] in ("Z", "z"):
        v = v[:-1] + "+00:00"
    try:
        if len(v) == 10:
            return datetime.strptime(v, "%Y-%m-%d").date()
        if len(v) > 10 and v[10] in "T ":
            return datetime.fromisoformat(v).date()
    except ValueError:
        pass
    raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


def date_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def duration_to_seconds(value: Optional[str]) -> int:
    """'HH:MM:SS' (or 'HH:MM', 'HH') -> seconds. Empty/garbled parts count as 0."""
    if not value:
        return 0
    parts = str(value).strip().split(":")
    total = 0
    for unit, part in zip((3600, 60, 1), parts):
        try:
            total += int(float(part or 0)) * unit
        except ValueError:
            continue
    return max(total, 0)


def format_hms(seconds: int) -> str:
    seconds = max(int(seconds or 0), 0)
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"


def format_duration(seconds: int) -> str:
    """Compact display form: '7h 05m', '45m', '0m'."""
    seconds = max(int(seconds or 0), 0)
    hours, minutes = seconds // 3600, (seconds % 3600) // 60
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
