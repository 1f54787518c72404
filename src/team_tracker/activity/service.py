from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from datetime import MAXYEAR, MINYEAR, date
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from ..auth.policy import Capabilities
from ..common.datetime_utils import format_duration, parse_iso_date
from ..common.validators import optional_int, require_int
from ..core.constants import NO_DEPARTMENT
from ..core.enums import Capability
from ..core.exceptions import NotFoundError, ValidationError
from ..teams.model import TeamMember
from ..teams.repository import TeamRepository
from .model import (
    ActivityEntry,
    DailyActivity,
    DayPoint,
    DepartmentMember,
    DepartmentReport,
    MonthlyData,
    MonthlyMember,
    UserActivity,
    activity_percentage,
)

logger = logging.getLogger(__name__)

HR_CSV_HEADERS = ["Department", "Name", "Floor Time", "HS TIME", "HS-%", "Projects"]


class ActivitySource(Protocol):
    def daily_activities(
        self,
        start: date,
        stop: date,
        *,
        user_ids: Optional[Iterable[int]] = None,
        project_ids: Optional[Iterable[int]] = None,
    ) -> List[ActivityEntry]:
        raise NotImplementedError

    def members(self) -> Dict[int, str]:
        raise NotImplementedError

    def projects(self) -> Dict[int, str]:
        raise NotImplementedError


def weighted_activity(activities: Sequence[UserActivity]) -> int:
    """Time-weighted activity %, ignoring people whose activity is 0."""
    weighted = sum(a.activity_percentage * a.time_worked for a in activities)
    active_time = sum(a.time_worked for a in activities if a.activity_percentage > 0)
    if active_time <= 0:
        return 0
    return int(round(weighted / active_time))


def _key(name: Optional[str]) -> str:
    return (name or "").strip().lower()


class ActivityReportService:
    def __init__(self, source: ActivitySource, teams: TeamRepository):
        self._source = source
        self._teams = teams

    def _roster(self, team_id: Optional[int] = None) -> List[TeamMember]:
        return list(self._teams.list_members(team_id=team_id))

    def _name_map(self, roster: Sequence[TeamMember]) -> Dict[str, TeamMember]:
        """Hubstaff display name (lowercased) -> tracker member."""
        out: Dict[str, TeamMember] = {}
        for m in roster:
            out.setdefault(_key(m.name), m)
        for m in roster:
            if m.hubstaff_name:
                out[_key(m.hubstaff_name)] = m
        return out

    def _display_name(self, hubstaff_name: str, names: Dict[str, TeamMember]) -> str:
        member = names.get(_key(hubstaff_name))
        return member.name if member else hubstaff_name

    def _rollup(self, entries: Sequence[ActivityEntry], names: Dict[str, TeamMember]) -> List[UserActivity]:
        tracked: Dict[int, int] = defaultdict(int)
        active: Dict[int, int] = defaultdict(int)
        projects: Dict[int, set] = defaultdict(set)
        user_names: Dict[int, str] = {}

        for e in entries:
            tracked[e.user_id] += e.tracked_seconds
            active[e.user_id] += e.active_seconds
            if e.project_name and e.tracked_seconds > 0:
                projects[e.user_id].add(e.project_name)
            user_names[e.user_id] = self._display_name(e.user_name, names)

        rows = [
            UserActivity(
                user_id=uid,
                user_name=user_names[uid],
                time_worked=tracked[uid],
                activity_percentage=activity_percentage(active[uid], tracked[uid]),
                projects=tuple(sorted(projects[uid])),
            )
            for uid in user_names
        ]
        rows.sort(key=lambda a: (-a.time_worked, a.user_name.lower()))
        return rows

    def daily(self, caps: Capabilities, day: Any, *, user_id: Any = None) -> DailyActivity:
        caps.require(Capability.VIEW_ACTIVITY)
        d = parse_iso_date(str(day)) if not isinstance(day, date) else day
        uid = optional_int(user_id, "userId")

        entries = self._source.daily_activities(d, d, user_ids=[uid] if uid else None)
        activities = self._rollup(entries, self._name_map(self._roster()))
        return DailyActivity(label=d.isoformat(), total_time=sum(a.time_worked for a in activities), activities=activities)

    def custom_range(
        self,
        caps: Capabilities,
        start: Any,
        end: Any,
        *,
        user_id: Any = None,
        project_id: Any = None,
        team: Optional[str] = None,
    ) -> DailyActivity:
        caps.require(Capability.VIEW_ACTIVITY)
        start_d = parse_iso_date(str(start)) if not isinstance(start, date) else start
        end_d = parse_iso_date(str(end)) if not isinstance(end, date) else end
        if start_d > end_d:
            raise ValidationError("startDate must be on or before endDate")

        uid = optional_int(user_id, "userId")
        pid = optional_int(project_id, "projectId")

        roster = self._roster()
        names = self._name_map(roster)
        entries = self._source.daily_activities(
            start_d,
            end_d,
            user_ids=[uid] if uid else None,
            project_ids=[pid] if pid else None,
        )

        team_name = (team or "").strip()
        if team_name:
            allowed = self._team_names(team_name)
            entries = [e for e in entries if _key(self._display_name(e.user_name, names)) in allowed]

        activities = self._rollup(entries, names)
        return DailyActivity(
            label=f"{start_d.isoformat()} to {end_d.isoformat()}",
            total_time=sum(a.time_worked for a in activities),
            activities=activities,
        )

    def _team_names(self, team_name: str) -> set:
        match = next((t for t in self._teams.list_teams() if _key(t.name) == _key(team_name)), None)
        if match is None:
            raise NotFoundError(f"Unknown team: {team_name}")
        return {_key(m.name) for m in self._roster(match.team_id)}

    def monthly(self, caps: Capabilities, month: Any, year: Any, *, user_id: Any = None) -> MonthlyData:
        caps.require(Capability.VIEW_ACTIVITY)
        m = require_int(month, "month")
        y = require_int(year, "year")
        if not 1 <= m <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not MINYEAR <= y <= MAXYEAR:
            raise ValidationError(f"year must be between {MINYEAR} and {MAXYEAR}")
        uid = optional_int(user_id, "userId")

        first = date(y, m, 1)
        last = date(y, m, calendar.monthrange(y, m)[1])
        entries = self._source.daily_activities(first, last, user_ids=[uid] if uid else None)
        names = self._name_map(self._roster())

        per_user: Dict[int, Dict[date, List[ActivityEntry]]] = defaultdict(lambda: defaultdict(list))
        user_names: Dict[int, str] = {}
        for e in entries:
            per_user[e.user_id][e.day].append(e)
            user_names[e.user_id] = self._display_name(e.user_name, names)

        members: List[MonthlyMember] = []
        worked_dates: set = set()
        for uid_, days in per_user.items():
            points = []
            for d in sorted(days):
                tracked = sum(e.tracked_seconds for e in days[d])
                active = sum(e.active_seconds for e in days[d])
                if tracked > 0:
                    worked_dates.add(d)
                points.append(DayPoint(day=d, time_worked=tracked, activity_percentage=activity_percentage(active, tracked)))

            total = sum(p.time_worked for p in points)
            total_active = sum(e.active_seconds for es in days.values() for e in es)
            members.append(
                MonthlyMember(
                    user_id=uid_,
                    user_name=user_names[uid_],
                    total_time=total,
                    days_worked=sum(1 for p in points if p.time_worked > 0),
                    activity_percentage=activity_percentage(total_active, total),
                    daily=tuple(points),
                )
            )

        members.sort(key=lambda mm: (-mm.total_time, mm.user_name.lower()))
        return MonthlyData(
            month=m,
            year=y,
            total_time=sum(mm.total_time for mm in members),
            total_days=len(worked_dates),
            members=members,
        )

    def hr_daily(self, caps: Capabilities, day: Any) -> DepartmentReport:
        """Every roster member grouped by department, with that day's Hubstaff time (0 when none)."""
        caps.require(Capability.VIEW_ACTIVITY)
        d = parse_iso_date(str(day)) if not isinstance(day, date) else day

        roster = self._roster()
        names = self._name_map(roster)
        by_name = {_key(a.user_name): a for a in self._rollup(self._source.daily_activities(d, d), names)}

        data: Dict[str, List[DepartmentMember]] = defaultdict(list)
        seen: set = set()
        for m in roster:
            if _key(m.name) in seen:
                continue
            seen.add(_key(m.name))
            act = by_name.get(_key(m.name))
            data[m.department or NO_DEPARTMENT].append(
                DepartmentMember(
                    name=m.name,
                    time_worked=act.time_worked if act else 0,
                    activity_percentage=act.activity_percentage if act else 0,
                    projects=tuple(act.projects) if act else (),
                )
            )

        # Hubstaff users missing from the roster still show up.
        for key, act in by_name.items():
            if key not in seen:
                logger.info("Hubstaff user %r has no team member record", act.user_name)
                data[NO_DEPARTMENT].append(
                    DepartmentMember(
                        name=act.user_name,
                        time_worked=act.time_worked,
                        activity_percentage=act.activity_percentage,
                        projects=tuple(act.projects),
                    )
                )

        departments = sorted((k for k in data if k != NO_DEPARTMENT), key=str.lower)
        if NO_DEPARTMENT in data:
            departments.append(NO_DEPARTMENT)
        return DepartmentReport(day=d, departments=departments, department_data={k: data[k] for k in departments})

    def users(self, caps: Capabilities) -> List[dict]:
        caps.require(Capability.VIEW_ACTIVITY)
        names = self._name_map(self._roster())
        rows = [{"id": uid, "name": self._display_name(n, names)} for uid, n in self._source.members().items()]
        return sorted(rows, key=lambda r: r["name"].lower())

    def projects(self, caps: Capabilities) -> List[dict]:
        caps.require(Capability.VIEW_ACTIVITY)
        rows = [{"id": pid, "name": n} for pid, n in self._source.projects().items()]
        return sorted(rows, key=lambda r: r["name"].lower())

    def teams(self, caps: Capabilities) -> List[str]:
        caps.require(Capability.VIEW_ACTIVITY)
        return sorted((t.name for t in self._teams.list_teams()), key=str.lower)


def hr_daily_csv_rows(report: DepartmentReport) -> List[Dict[str, str]]:
    rows = []
    for dept in report.departments:
        for m in report.department_data.get(dept, []):
            rows.append(
                {
                    "Department": dept,
                    "Name": m.name,
                    "Floor Time": "",
                    "HS TIME": format_duration(m.time_worked) if m.time_worked > 0 else "0m",
                    "HS-%": f"{m.activity_percentage}%",
                    "Projects": " / ".join(m.projects) if m.projects else "N/A",
                }
            )
    return rows
