from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name)


def parse_bool_flag(value: Optional[str]) -> Optional[bool]:
    """'true'/'false' query flags; anything else means 'no filter'."""
    if value is None:
        return None
    v = value.strip().lower()
    if v == "true":
        return True
    if v == "false":
        return False
    return None


def clamp_page(page: Any, page_size: Any, *, default_size: int, max_size: int) -> tuple[int, int]:
    p = require_int(page or 1, "page")
    s = require_int(page_size or default_size, "page_size")
    if p < 1:
        raise ValidationError("page must be >= 1")
    if s < 1:
        raise ValidationError("page_size must be >= 1")
    return p, min(s, max_size)
