from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import format_duration


def activity_percentage(active_seconds: int, tracked_seconds: int) -> int:
    if tracked_seconds <= 0:
        return 0
    return int(round(active_seconds / tracked_seconds * 100))


@dataclass(frozen=True)
class ActivityEntry:
    """One Hubstaff daily activity row: a user on a project on a day."""

    user_id: int
    user_name: str
    project_id: Optional[int]
    project_name: Optional[str]
    day: date
    tracked_seconds: int
    active_seconds: int

    @property
    def activity_percentage(self) -> int:
        return activity_percentage(self.active_seconds, self.tracked_seconds)


@dataclass(frozen=True)
class UserActivity:
    user_id: int
    user_name: str
    time_worked: int
    activity_percentage: int
    projects: Sequence[str] = ()

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "timeWorked": self.time_worked,
            "timeWorkedDisplay": format_duration(self.time_worked),
            "activityPercentage": self.activity_percentage,
            "projects": list(self.projects),
            "projectName": ", ".join(self.projects) or None,
        }


@dataclass(frozen=True)
class DailyActivity:
    label: str
    total_time: int
    activities: Sequence[UserActivity]

    def to_dict(self) -> dict:
        return {
            "date": self.label,
            "totalTime": self.total_time,
            "activities": [a.to_dict() for a in self.activities],
        }


@dataclass(frozen=True)
class DayPoint:
    day: date
    time_worked: int
    activity_percentage: int


@dataclass(frozen=True)
class MonthlyMember:
    user_id: int
    user_name: str
    total_time: int
    days_worked: int
    activity_percentage: int
    daily: Sequence[DayPoint] = ()

    @property
    def average_daily(self) -> int:
        return self.total_time // self.days_worked if self.days_worked else 0

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "totalTime": self.total_time,
            "daysWorked": self.days_worked,
            "averageDaily": self.average_daily,
            "activityPercentage": self.activity_percentage,
            "daily": [
                {"date": p.day.isoformat(), "timeWorked": p.time_worked, "activityPercentage": p.activity_percentage}
                for p in self.daily
            ],
        }


@dataclass(frozen=True)
class MonthlyData:
    month: int
    year: int
    total_time: int
    total_days: int
    members: Sequence[MonthlyMember]

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "totalTime": self.total_time,
            "totalDays": self.total_days,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass(frozen=True)
class DepartmentMember:
    name: str
    time_worked: int
    activity_percentage: int
    projects: Sequence[str] = ()


@dataclass(frozen=True)
class DepartmentReport:
    day: date
    departments: List[str]
    department_data: Dict[str, List[DepartmentMember]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "departments": list(self.departments),
            "departmentData": {
                dept: [
                    {
                        "name": m.name,
                        "timeWorked": m.time_worked,
                        "activityPercentage": m.activity_percentage,
                        "projects": list(m.projects),
                    }
                    for m in members
                ]
                for dept, members in self.department_data.items()
            },
        }
