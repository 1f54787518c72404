from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from ..common.datetime_utils import date_to_str, duration_to_seconds, format_hms
from ..core.constants import SECONDS_PER_WORKDAY, UNASSIGNED
from ..core.enums import OVERDUE, TaskStatus
from ..core.exceptions import ValidationError
from ..tasks.effort import effective_status
from ..tasks.model import Task
from ..teams.repository import TeamRepository

TRACKER_CSV_HEADERS = [
    "Project Name",
    "Type",
    "Priority",
    "Phase",
    "Status",
    "Start Date",
    "End Date",
    "Actual End",
    "Assignees",
    "Bug Count",
    "HTML Bugs",
    "Functional Bugs",
    "Comments",
    "Current Updates",
]

QA_REPORT_CSV_HEADERS = [
    "Project Name",
    "Phase",
    "Status",
    "Start Date",
    "End Date",
    "Assignee",
    "Rejection Reason",
    "Comments",
]


@dataclass(frozen=True)
class ReportFilters:
    project: Optional[str] = None
    assignee: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise ValidationError("start must be on or before end")


@dataclass
class AssigneeStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0


@dataclass(frozen=True)
class ReportSummary:
    tasks: Sequence[Task]
    total: int
    completed: int
    in_progress: int
    overdue: int
    by_assignee: Dict[str, AssigneeStats] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "stats": {
                "total": self.total,
                "completed": self.completed,
                "inProgress": self.in_progress,
                "overdue": self.overdue,
            },
            "byAssignee": {
                name: {"total": s.total, "completed": s.completed, "inProgress": s.in_progress}
                for name, s in self.by_assignee.items()
            },
            "byStatus": dict(self.by_status),
            "taskIds": [t.task_id for t in self.tasks],
        }


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


class TaskReportService:
    """Statistics over a set of tasks (the reports page)."""

    def __init__(self, teams: TeamRepository):
        self._teams = teams

    def _alias(self, assignee: str) -> str:
        """Tracker short name for a Hubstaff display name, if one is configured."""
        q = _norm(assignee)
        for m in self._teams.list_members(team_id=None):
            if m.hubstaff_name and _norm(m.hubstaff_name) == q:
                return _norm(m.name)
        return ""

    @staticmethod
    def _assignee_matches(task: Task, q: str, alias: str) -> bool:
        candidates = [_norm(task.assigned_to), _norm(task.assigned_to2)]
        for a in candidates:
            if a and (a == q or (alias and a == alias)):
                return True
        return any(a and (a in q or q in a) for a in candidates)

    def filter(self, tasks: Iterable[Task], filters: ReportFilters) -> List[Task]:
        project = _norm(filters.project)
        q = _norm(filters.assignee)
        alias = self._alias(q) if q else ""

        out = []
        for t in tasks:
            if project and _norm(t.project_name) != project:
                continue
            if q and not self._assignee_matches(t, q, alias):
                continue
            if filters.start and filters.end:
                if not t.start_date or not t.end_date:
                    continue
                if not (t.start_date <= filters.end and t.end_date >= filters.start):
                    continue
            out.append(t)
        return out

    def summary(self, tasks: Iterable[Task], filters: ReportFilters, today: date) -> ReportSummary:
        selected = self.filter(tasks, filters)

        by_assignee: Dict[str, AssigneeStats] = OrderedDict()
        by_status: Dict[str, int] = OrderedDict()
        completed = in_progress = overdue = 0

        for t in selected:
            status = effective_status(t, today)
            done = t.status == TaskStatus.COMPLETED
            active = status == TaskStatus.IN_PROGRESS.value

            completed += done
            in_progress += active
            if status == OVERDUE and t.status != TaskStatus.REJECTED:
                overdue += 1

            stats = by_assignee.setdefault(t.assigned_to or UNASSIGNED, AssigneeStats())
            stats.total += 1
            stats.completed += done
            stats.in_progress += active

            by_status[status] = by_status.get(status, 0) + 1

        return ReportSummary(
            tasks=selected,
            total=len(selected),
            completed=completed,
            in_progress=in_progress,
            overdue=overdue,
            by_assignee=by_assignee,
            by_status=by_status,
        )


@dataclass(frozen=True)
class BudgetRow:
    project_name: str
    task_count: int
    days_allotted: float
    time_taken_seconds: int
    activity_percentage: int
    resources: Sequence[str]

    @property
    def days_taken(self) -> float:
        return round(self.time_taken_seconds / SECONDS_PER_WORKDAY, 2)

    @property
    def deviation(self) -> float:
        """Positive = days left in the budget."""
        return round(self.days_allotted - self.time_taken_seconds / SECONDS_PER_WORKDAY, 2)

    def to_dict(self) -> dict:
        return {
            "project_name": self.project_name,
            "task_count": self.task_count,
            "days_allotted": round(self.days_allotted, 2),
            "time_taken": format_hms(self.time_taken_seconds),
            "days_taken": self.days_taken,
            "deviation": self.deviation,
            "activity_percentage": self.activity_percentage,
            "resources": ", ".join(self.resources) or None,
        }


class BudgetService:
    def rollup(self, tasks: Iterable[Task], *, projects: Optional[Sequence[str]] = None) -> List[BudgetRow]:
        """Per-project budget. Project names match trimmed and case-insensitive."""
        groups: Dict[str, List[Task]] = OrderedDict()
        display: Dict[str, str] = {}
        for name in projects or ():
            key = _norm(name)
            if key and key not in groups:
                groups[key] = []
                display[key] = name.strip()
        for t in tasks:
            key = _norm(t.project_name)
            if not key:
                continue
            if key not in groups:
                if projects:
                    continue
                groups[key] = []
                display[key] = t.project_name.strip()
            groups[key].append(t)

        rows = []
        for key, items in groups.items():
            resources = set()
            for t in items:
                resources.update(a.strip() for a in t.assignees if a and a.strip())
            rows.append(
                BudgetRow(
                    project_name=display[key],
                    task_count=len(items),
                    days_allotted=sum(float(t.days_allotted or 0) for t in items),
                    time_taken_seconds=sum(duration_to_seconds(t.time_taken) for t in items),
                    activity_percentage=int(round(sum(t.activity_percentage for t in items) / len(items))) if items else 0,
                    resources=tuple(sorted(resources, key=str.lower)),
                )
            )
        return rows


def tracker_csv_rows(tasks: Iterable[Task]) -> List[Dict[str, object]]:
    return [
        {
            "Project Name": t.project_name,
            "Type": t.project_type or "",
            "Priority": t.priority or "",
            "Phase": t.sub_phase or "",
            "Status": t.status.value,
            "Start Date": date_to_str(t.start_date) or "",
            "End Date": date_to_str(t.end_date) or "",
            "Actual End": date_to_str(t.actual_completion_date) or "",
            "Assignees": " ".join(t.assignees),
            "Bug Count": t.bug_count or 0,
            "HTML Bugs": t.html_bugs or 0,
            "Functional Bugs": t.functional_bugs or 0,
            "Comments": t.comments or "",
            "Current Updates": t.current_updates or "",
        }
        for t in tasks
    ]


def qa_report_csv_rows(tasks: Iterable[Task], today: date) -> List[Dict[str, object]]:
    return [
        {
            "Project Name": t.project_name,
            "Phase": t.sub_phase or "",
            "Status": effective_status(t, today),
            "Start Date": date_to_str(t.start_date) or "",
            "End Date": date_to_str(t.end_date) or "",
            "Assignee": t.assigned_to or "",
            "Rejection Reason": t.deviation_reason or "",
            "Comments": t.comments or "",
        }
        for t in tasks
    ]
