from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import date_to_str, parse_optional_date
from ..core.enums import TaskStatus
from ..core.exceptions import ValidationError
from ..database.mysql_base import load_json


@dataclass(frozen=True)
class Task:
    """Domain entity: a unit of work tracked for a team."""

    task_id: int
    team_id: Optional[int]
    project_name: str
    status: TaskStatus
    project_type: Optional[str] = None
    sub_phase: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_to2: Optional[str] = None
    additional_assignees: tuple[str, ...] = ()
    pc: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    actual_completion_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days_allotted: float = 0.0
    time_taken: str = "00:00:00"
    days_taken: float = 0.0
    deviation: float = 0.0
    activity_percentage: int = 0
    bug_count: int = 0
    html_bugs: int = 0
    functional_bugs: int = 0
    deviation_reason: Optional[str] = None
    sprint_link: Optional[str] = None
    comments: Optional[str] = None
    current_updates: Optional[str] = None
    include_saturday: bool = False
    include_sunday: bool = False
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def task_name(self) -> Optional[str]:
        return self.sub_phase

    @property
    def assignees(self) -> list[str]:
        names = [self.assigned_to, self.assigned_to2, *self.additional_assignees]
        return [n for n in names if n]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation using the column names the API speaks."""
        out: Dict[str, Any] = {"id": self.task_id}
        for f in fields(self):
            if f.name == "task_id":
                continue
            value = getattr(self, f.name)
            if isinstance(value, TaskStatus):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, date):
                value = date_to_str(value)
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out


@dataclass(frozen=True)
class TaskPage:
    items: Sequence[Task]
    total: int
    page: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "tasks": [t.to_dict() for t in self.items],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
        }


DATE_FIELDS = frozenset({"start_date", "end_date", "actual_completion_date"})
INT_FIELDS = frozenset({"activity_percentage", "bug_count", "html_bugs", "functional_bugs"})
FLOAT_FIELDS = frozenset({"days_allotted", "days_taken", "deviation"})
BOOL_FIELDS = frozenset({"include_saturday", "include_sunday"})

# Columns a client may write. id / created_at are owned by the database.
WRITABLE_FIELDS = tuple(f.name for f in fields(Task) if f.name not in {"task_id", "created_at"})


def status_of(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value!r}")


def coerce_value(name: str, value: Any) -> Any:
    """Convert one payload value to the type stored for that column."""
    if name == "status":
        return status_of(value)
    if name in DATE_FIELDS:
        return parse_optional_date(value)
    if name in INT_FIELDS:
        if value in (None, ""):
            return 0
        try:
            return int(float(value))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {name}")
    if name in FLOAT_FIELDS:
        if value in (None, ""):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {name}")
    if name in BOOL_FIELDS:
        return bool(value)
    if name == "additional_assignees":
        if not value:
            return ()
        if not isinstance(value, (list, tuple)):
            raise ValidationError("additional_assignees must be a list")
        return tuple(str(v).strip() for v in value if str(v).strip())
    if name == "time_taken":
        return (str(value).strip() or "00:00:00") if value is not None else "00:00:00"
    if isinstance(value, str):
        return value.strip() or None
    return value


def coerce_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(k for k in payload if k not in WRITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown task field(s): {', '.join(unknown)}")
    return {k: coerce_value(k, v) for k, v in payload.items()}


def _num(value: Any, cast):
    if value is None:
        return cast(0)
    if isinstance(value, Decimal):
        return cast(float(value))
    return cast(value)


def task_from_row(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(row["id"]),
        team_id=row.get("team_id"),
        project_name=row["project_name"],
        status=TaskStatus(row["status"]),
        project_type=row.get("project_type"),
        sub_phase=row.get("sub_phase"),
        priority=row.get("priority"),
        assigned_to=row.get("assigned_to"),
        assigned_to2=row.get("assigned_to2"),
        additional_assignees=tuple(load_json(row.get("additional_assignees"), []) or ()),
        pc=row.get("pc"),
        start_date=parse_optional_date(row.get("start_date")),
        end_date=parse_optional_date(row.get("end_date")),
        actual_completion_date=parse_optional_date(row.get("actual_completion_date")),
        start_time=row.get("start_time"),
        end_time=row.get("end_time"),
        days_allotted=_num(row.get("days_allotted"), float),
        time_taken=row.get("time_taken") or "00:00:00",
        days_taken=_num(row.get("days_taken"), float),
        deviation=_num(row.get("deviation"), float),
        activity_percentage=_num(row.get("activity_percentage"), int),
        bug_count=_num(row.get("bug_count"), int),
        html_bugs=_num(row.get("html_bugs"), int),
        functional_bugs=_num(row.get("functional_bugs"), int),
        deviation_reason=row.get("deviation_reason"),
        sprint_link=row.get("sprint_link"),
        comments=row.get("comments"),
        current_updates=row.get("current_updates"),
        include_saturday=bool(row.get("include_saturday")),
        include_sunday=bool(row.get("include_sunday")),
        created_at=row.get("created_at"),
    )
