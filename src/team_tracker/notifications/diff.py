"""Field-level change detection between a stored task and an update payload.

Only tracked fields present in the payload are compared. Values are
normalized for the comparison only; the returned map keeps the values as
they were given.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..core.constants import TRACKED_FIELDS

_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T")


def normalize(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        if value == "":
            return None
        if _TIMESTAMP.match(value):
            return value[:10]
    return str(value).strip()


def compute_changes(previous: Mapping[str, Any], updates: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Return {field: {"old": ..., "new": ...}} for tracked fields whose value really changes."""
    changes: Dict[str, Dict[str, Any]] = {}
    for name in TRACKED_FIELDS:
        if name not in updates:
            continue
        old = previous.get(name)
        new = updates[name]
        if normalize(old) != normalize(new):
            changes[name] = {"old": old, "new": new}
    return changes
