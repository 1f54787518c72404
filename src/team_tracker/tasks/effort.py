"""Effort bookkeeping for tasks: days taken, deviation, effective status."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..common.datetime_utils import duration_to_seconds
from ..core.constants import SECONDS_PER_WORKDAY
from ..core.enums import OVERDUE, TaskStatus

# Statuses that never turn into Overdue.
_SETTLED = frozenset({TaskStatus.COMPLETED, TaskStatus.REJECTED, TaskStatus.ON_HOLD, TaskStatus.FORECAST})


def days_taken(time_taken: Optional[str]) -> float:
    """Workdays spent, from an 'HH:MM:SS' duration (8-hour workday)."""
    return round(duration_to_seconds(time_taken) / SECONDS_PER_WORKDAY, 2)


def deviation(taken_days: float, allotted_days: Any) -> float:
    """Positive = over budget."""
    try:
        allotted = float(allotted_days or 0)
    except (TypeError, ValueError):
        allotted = 0.0
    return round(float(taken_days) - allotted, 2)


def apply_effort(values: Dict[str, Any], *, current: Any = None) -> Dict[str, Any]:
    """Recompute days_taken/deviation when time_taken or days_allotted is being written.

    `current` supplies the stored value of whichever of the two is not in `values`.
    """
    if "time_taken" not in values and "days_allotted" not in values:
        return values

    out = dict(values)
    time_taken = out.get("time_taken", getattr(current, "time_taken", "00:00:00"))
    allotted = out.get("days_allotted", getattr(current, "days_allotted", 0))
    taken = days_taken(time_taken)
    out["days_taken"] = taken
    out["deviation"] = deviation(taken, allotted)
    return out


def stamp_completion(values: Dict[str, Any], *, today: date, current: Any = None) -> Dict[str, Any]:
    """Set actual_completion_date to today when a task becomes Completed without one."""
    if values.get("status") != TaskStatus.COMPLETED:
        return values
    if values.get("actual_completion_date"):
        return values
    if "actual_completion_date" not in values and getattr(current, "actual_completion_date", None):
        return values
    out = dict(values)
    out["actual_completion_date"] = today
    return out


def effective_status(task: Any, today: date) -> str:
    status = task.status
    end = task.end_date
    if end is not None and end < today and status not in _SETTLED:
        return OVERDUE
    return status.value if isinstance(status, TaskStatus) else str(status)
