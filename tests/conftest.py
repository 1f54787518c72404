from __future__ import annotations

import dataclasses
import importlib
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from team_tracker import create_app
from team_tracker.activity.model import ActivityEntry
from team_tracker.auth.context import RequestContext
from team_tracker.auth.model import UserProfile
from team_tracker.auth.policy import AccessPolicy
from team_tracker.container import assemble_container
from team_tracker.core.enums import AccessMode, Role, TaskStatus
from team_tracker.notifications.mailer import SendResult
from team_tracker.notifications.model import Notification
from team_tracker.notifications.outbox import InlineOutbox
from team_tracker.tasks.model import Task
from team_tracker.teams.model import ProjectCoordinator, Team, TeamMember

TODAY = date(2026, 1, 10)
SETTINGS_MODULE = "team_tracker.config.testing"


class InMemoryUsers:
    def __init__(self, users):
        self._by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        return self._by_id.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self._by_id.values() if u.username == username), None)


class InMemoryTeams:
    def __init__(self, teams, members):
        self.teams = list(teams)
        self.members = {m.member_id: m for m in members}
        self.failing_ids: set[int] = set()

    def list_teams(self):
        return sorted(self.teams, key=lambda t: t.name)

    def list_members(self, *, team_id=None):
        rows = [m for m in self.members.values() if team_id is None or m.team_id == team_id]
        return sorted(rows, key=lambda m: (m.display_order, m.name))

    def update_member_order(self, *, member_id, display_order):
        if member_id in self.failing_ids:
            raise RuntimeError("db down")
        m = self.members.get(member_id)
        if not m:
            return False
        self.members[member_id] = dataclasses.replace(m, display_order=display_order)
        return True


class InMemoryPCs:
    def __init__(self, pcs):
        self.pcs = list(pcs)
        self.broken = False

    def list_all(self):
        return sorted(self.pcs, key=lambda p: p.name)

    def find_by_name(self, name):
        if self.broken:
            raise RuntimeError("lookup failed")
        return next((p for p in self.pcs if p.name.lower() == (name or "").lower()), None)


class InMemoryTasks:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Task] = {}

    def get(self, task_id):
        return self.rows.get(int(task_id))

    def _matches(self, t: Task, q) -> bool:
        if q.team_id is not None and t.team_id != q.team_id:
            return False
        if q.pc and t.pc != q.pc:
            return False
        if q.status and t.status.value != q.status:
            return False
        if q.statuses and t.status.value not in q.statuses:
            return False
        if q.view == "forecast" and t.status != TaskStatus.FORECAST:
            return False
        if q.view == "active" and t.status == TaskStatus.FORECAST:
            return False
        if q.search:
            haystack = " ".join(
                str(v or "") for v in (t.project_name, t.assigned_to, t.sub_phase, t.status.value, t.priority, t.comments)
            ).lower()
            if q.search.lower() not in haystack:
                return False
        return True

    def search(self, query):
        found = [t for t in self.rows.values() if self._matches(t, query)]
        found.sort(key=lambda t: (t.start_date or date.min, t.task_id), reverse=True)
        start = (query.page - 1) * query.page_size
        return found[start : start + query.page_size], len(found)

    def list_all(self, *, team_id=None):
        return [t for t in self.rows.values() if team_id is None or t.team_id == team_id]

    def insert(self, values):
        tid = self._next_id
        self._next_id += 1
        task = Task(task_id=tid, **values)
        self.rows[tid] = task
        return task

    def update(self, task_id, values):
        self.rows[int(task_id)] = dataclasses.replace(self.rows[int(task_id)], **values)
        return True

    def delete(self, task_id):
        return self.rows.pop(int(task_id), None) is not None


class InMemoryNotifications:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Notification] = {}
        self.broken = False

    def insert(self, item):
        if self.broken:
            raise RuntimeError("insert failed")
        nid = self._next_id
        self._next_id += 1
        n = Notification(
            notification_id=nid,
            pc_name=item.pc_name,
            task_id=item.task_id,
            project_name=item.project_name,
            task_name=item.task_name,
            action=item.action,
            changes=item.changes,
            is_read=False,
            created_at=datetime(2026, 1, 10, 9, 0) + timedelta(minutes=nid),
        )
        self.rows[nid] = n
        return n

    def search(self, query):
        out = []
        for n in self.rows.values():
            if n.pc_name != query.pc_name:
                continue
            if query.is_read is not None and n.is_read != query.is_read:
                continue
            if query.action is not None and n.action != query.action:
                continue
            if query.date_from and n.created_at.date() < query.date_from:
                continue
            if query.date_to and n.created_at.date() > query.date_to:
                continue
            if query.search:
                term = query.search.lower()
                if term not in n.project_name.lower() and term not in (n.task_name or "").lower():
                    continue
            out.append(n)
        out.sort(key=lambda n: n.created_at, reverse=True)
        start = (query.page - 1) * query.page_size
        return out[start : start + query.page_size], len(out)

    def count(self, *, pc_name=None, unread_only=False):
        return sum(
            1
            for n in self.rows.values()
            if (pc_name is None or n.pc_name == pc_name) and (not unread_only or not n.is_read)
        )

    def mark_read(self, *, pc_name, notification_id=None):
        touched = 0
        for nid, n in list(self.rows.items()):
            if n.pc_name == pc_name and (notification_id is None or nid == notification_id):
                self.rows[nid] = dataclasses.replace(n, is_read=True)
                touched += 1
        return touched

    def get(self, notification_id):
        return self.rows.get(int(notification_id))

    def delete(self, notification_id):
        return self.rows.pop(int(notification_id), None) is not None


class RecordingEmailSender:
    def __init__(self):
        self.sent: list[dict] = []
        self.result = SendResult(True)
        self.error: Optional[Exception] = None

    def send(self, *, to_email, to_name, subject, html, cc=()):
        if self.error is not None:
            raise self.error
        self.sent.append({"to_email": to_email, "to_name": to_name, "subject": subject, "html": html, "cc": list(cc)})
        return self.result


class FakeActivitySource:
    def __init__(self):
        self.entries: list[ActivityEntry] = []
        self.users = {101: "Asha Nair", 102: "Bindu K", 103: "Zed Outsider"}
        self.project_names = {7: "Website Revamp", 8: "Mobile App"}
        self.calls: list[tuple] = []

    def daily_activities(self, start, stop, *, user_ids=None, project_ids=None):
        self.calls.append((start, stop, user_ids, project_ids))
        return [
            e
            for e in self.entries
            if start <= e.day <= stop
            and (not user_ids or e.user_id in user_ids)
            and (not project_ids or e.project_id in project_ids)
        ]

    def members(self):
        return dict(self.users)

    def projects(self):
        return dict(self.project_names)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings():
    return importlib.import_module(SETTINGS_MODULE)


@pytest.fixture
def fakes():
    return SimpleNamespace(
        users=InMemoryUsers(
            [
                UserProfile(1, "Admin", "admin", generate_password_hash("admin-pass"), Role.SUPER_ADMIN, None, True),
                UserProfile(2, "Asha", "asha", generate_password_hash("asha-pass"), Role.MEMBER, 1, True),
                UserProfile(3, "Old", "old", generate_password_hash("old-pass"), Role.MEMBER, 1, False),
            ]
        ),
        teams=InMemoryTeams(
            [Team(1, "QA"), Team(2, "Dev")],
            [
                TeamMember(1, 1, "Asha", "Asha Nair", "QA", 1),
                TeamMember(2, 1, "Bindu", "Bindu K", "QA", 2),
                TeamMember(3, 2, "Milan", None, None, 1),
            ],
        ),
        pcs=InMemoryPCs([ProjectCoordinator(1, "Milda", "milda@example.com"), ProjectCoordinator(2, "Ravi", None)]),
        tasks=InMemoryTasks(),
        notifications=InMemoryNotifications(),
        email=RecordingEmailSender(),
        activity=FakeActivitySource(),
        outbox=InlineOutbox(),
    )


@pytest.fixture
def container(fakes, settings, today):
    return assemble_container(
        settings=settings,
        users_repo=fakes.users,
        teams_repo=fakes.teams,
        pcs_repo=fakes.pcs,
        tasks_repo=fakes.tasks,
        notifications_repo=fakes.notifications,
        activity_source=fakes.activity,
        email_sender=fakes.email,
        outbox=fakes.outbox,
        clock=lambda: today,
    )


@pytest.fixture
def app(container):
    return create_app(SETTINGS_MODULE, container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def caps():
    """caps(mode, role=None, team_id=None, ...) -> Capabilities."""
    policy = AccessPolicy()

    def _make(mode: AccessMode, role: Optional[Role] = None, **kwargs):
        if mode == AccessMode.USER:
            kwargs.setdefault("user_id", 99)
        return policy.evaluate(RequestContext(mode=mode, role=role, **kwargs))

    return _make
