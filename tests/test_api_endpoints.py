from __future__ import annotations

from datetime import date

import pytest

from team_tracker.activity.model import ActivityEntry
from team_tracker.core.enums import NotificationAction, TaskStatus
from team_tracker.core.exceptions import UpstreamError

BOM = b"\xef\xbb\xbf"


def _login(client, username="asha", password="asha-pass"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def _seed(fakes, **values):
    row = {"team_id": 1, "project_name": "Website Revamp", "status": TaskStatus.YET_TO_START}
    row.update(values)
    return fakes.tasks.insert(row)


def test_anonymous_requests_get_401_envelope(client):
    res = client.get("/api/tasks")
    assert res.status_code == 401
    assert res.get_json() == {"error": "Unauthorized - please log in"}


def test_me_reports_anonymous(client):
    body = client.get("/api/auth/me").get_json()
    assert body["authenticated"] is False
    assert body["capabilities"] == []


def test_login_and_logout(client):
    res = _login(client)
    assert res.status_code == 200
    body = res.get_json()
    assert body["authenticated"] is True
    assert body["mode"] == "user"
    assert body["team_id"] == 1
    assert "write_tasks" in body["capabilities"]
    assert "delete_tasks" not in body["capabilities"]

    assert client.post("/api/auth/logout").get_json() == {"success": True}
    assert client.get("/api/auth/me").get_json()["authenticated"] is False


def test_bad_login_is_401(client):
    res = _login(client, password="nope")
    assert res.status_code == 401
    assert res.get_json() == {"error": "Invalid username or password"}


def test_non_json_body_is_400(client):
    _login(client)
    res = client.post("/api/tasks/create", data="project_name=x", content_type="text/plain")
    assert res.status_code == 400
    assert res.get_json() == {"error": "Request body must be JSON"}


def test_create_update_and_delete_task(client, fakes):
    _login(client)

    res = client.post("/api/tasks/create", json={"project_name": "Website Revamp", "sub_phase": "Regression", "pc": "Milda"})
    assert res.status_code == 201
    task = res.get_json()["task"]
    assert task["team_id"] == 1
    assert task["effective_status"] == "Yet to Start"
    assert fakes.email.sent[0]["to_email"] == "milda@example.com"

    res = client.put("/api/tasks/update", json={"id": task["id"], "status": "In Progress", "end_date": "2026-01-05"})
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["task"]["effective_status"] == "Overdue"

    latest = max(fakes.notifications.rows.values(), key=lambda n: n.notification_id)
    assert latest.action == NotificationAction.UPDATED
    assert set(latest.changes) == {"status", "end_date"}

    listing = client.get("/api/tasks?view=active").get_json()
    assert listing["total"] == 1
    assert listing["tasks"][0]["id"] == task["id"]

    assert client.delete(f"/api/tasks/delete?id={task['id']}").get_json() == {"success": True}
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404


def test_create_split_task_returns_list(client):
    _login(client)
    res = client.post("/api/tasks/create", json=[{"project_name": "A"}, {"project_name": "A", "sub_phase": "Part 2"}])
    assert res.status_code == 201
    assert [t["sub_phase"] for t in res.get_json()["tasks"]] == [None, "Part 2"]


@pytest.mark.parametrize(
    "method, url, status, error",
    [
        ("delete", "/api/tasks/delete", 400, "Task ID is required"),
        ("get", "/api/tasks/999", 404, "Task not found"),
        ("get", "/api/nowhere", 404, "Not found"),
        ("get", "/api/tasks?view=archived", 400, "Invalid view: archived"),
    ],
)
def test_error_envelopes(client, method, url, status, error):
    _login(client)
    res = getattr(client, method)(url)
    assert res.status_code == status
    assert res.get_json() == {"error": error}


def test_member_cannot_edit_other_team(client, fakes):
    other = _seed(fakes, team_id=2)
    _login(client)
    res = client.put("/api/tasks/update", json={"id": other.task_id, "status": "Completed"})
    assert res.status_code == 403
    assert res.get_json() == {"error": "Unauthorized to edit this task"}


def test_manager_mode_needs_a_selected_team(client, fakes):
    _seed(fakes, team_id=2, project_name="Dev work")

    assert client.post("/api/auth/manager-login", json={"passkey": "wrong"}).status_code == 401
    body = client.post("/api/auth/manager-login", json={"passkey": "manager-pass"}).get_json()
    assert body["mode"] == "manager"

    assert client.get("/api/tasks").status_code == 400

    body = client.post("/api/auth/select-team", json={"team_id": 2}).get_json()
    assert body["selected_team_id"] == 2
    listing = client.get("/api/tasks").get_json()
    assert [t["project_name"] for t in listing["tasks"]] == ["Dev work"]


def test_pc_mode_reads_own_inbox_only(client, fakes):
    _login(client)
    client.post("/api/tasks/create", json={"project_name": "Website Revamp", "pc": "Milda"})
    client.post("/api/auth/logout")

    assert client.post("/api/auth/pc-login", json={"passkey": "pc-pass", "pc_name": "Nobody"}).status_code == 404
    body = client.post("/api/auth/pc-login", json={"passkey": "pc-pass", "pc_name": "milda"}).get_json()
    assert body["pc_name"] == "Milda"

    inbox = client.get("/api/notifications?is_read=false").get_json()
    assert inbox["total"] == 1
    assert inbox["unreadCount"] == 1
    assert inbox["notifications"][0]["action"] == "created"

    assert client.get("/api/notifications?pc_name=Ravi").status_code == 403
    assert client.post("/api/tasks/create", json={"project_name": "X"}).status_code == 403

    res = client.post("/api/notifications/mark-read", json={})
    assert res.get_json() == {"success": True, "updated": 1}
    assert client.get("/api/notifications").get_json()["unreadCount"] == 0


def test_select_team_needs_any_team(client):
    _login(client)
    assert client.post("/api/auth/select-team", json={"team_id": 2}).status_code == 403


def test_debug_route_hidden_outside_debug(client):
    _login(client, "admin", "admin-pass")
    assert client.get("/api/debug/notifications?pc_name=Milda").status_code == 404


def test_team_endpoints(client):
    _login(client)
    assert client.get("/api/teams").get_json() == {"teams": [{"id": 1, "name": "QA"}]}
    members = client.get("/api/team-members").get_json()["members"]
    assert [m["name"] for m in members] == ["Asha", "Bindu"]
    assert [p["name"] for p in client.get("/api/pcs").get_json()["pcs"]] == ["Milda", "Ravi"]

    res = client.put("/api/team-members/reorder", json={"members": [{"id": 1, "display_order": 3}]})
    assert res.status_code == 403


def test_reports_endpoints(client, fakes):
    _seed(fakes, assigned_to="Asha", sub_phase="Smoke", end_date=date(2026, 1, 2), status=TaskStatus.IN_PROGRESS)
    _seed(fakes, project_name="Mobile App", assigned_to="Bindu", status=TaskStatus.COMPLETED)
    _login(client)

    summary = client.get("/api/reports/summary?assignee=asha").get_json()
    assert summary["stats"] == {"total": 1, "completed": 0, "inProgress": 0, "overdue": 1}

    budget = client.get("/api/reports/budget?projects=Mobile App").get_json()["projects"]
    assert [(p["project_name"], p["task_count"]) for p in budget] == [("Mobile App", 1)]

    assert client.get("/api/reports/summary?start=2026-01-05&end=2026-01-01").status_code == 400

    res = client.get("/api/reports/tasks.csv")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert res.data.startswith(BOM)
    assert "qa_report_2026-01-10.csv" in res.headers["Content-Disposition"]
    lines = res.data[len(BOM):].decode("utf-8").splitlines()
    assert lines[0] == "Project Name,Phase,Status,Start Date,End Date,Assignee,Rejection Reason,Comments"
    assert "Overdue" in lines[1]

    tracker = client.get("/api/reports/tracker.csv")
    assert tracker.data.startswith(BOM + b"Project Name,Type,Priority")


def test_hubstaff_endpoints(client, fakes):
    day = date(2026, 1, 9)
    fakes.activity.entries = [ActivityEntry(101, "Asha Nair", 7, "Website Revamp", day, 7200, 3600)]
    _login(client)

    body = client.get("/api/hubstaff?date=2026-01-09").get_json()
    assert body["totalTime"] == 7200
    assert body["weightedActivity"] == 50
    assert body["activities"][0]["userName"] == "Asha"

    assert client.get("/api/hubstaff?startDate=2026-01-01").status_code == 400
    assert client.get("/api/hubstaff/monthly?month=1&year=2026").get_json()["totalDays"] == 1
    assert client.get("/api/hubstaff/monthly?month=1&year=0").status_code == 400
    assert client.get("/api/hubstaff/teams").get_json() == {"teams": ["Dev", "QA"]}

    hr = client.get("/api/hubstaff/hr-daily.csv?date=2026-01-09")
    assert hr.data.startswith(BOM + b"Department,Name,Floor Time,HS TIME,HS-%,Projects")


def test_hubstaff_failure_is_502(client, fakes, monkeypatch):
    def boom(*args, **kwargs):
        raise UpstreamError("Hubstaff request failed (503)")

    monkeypatch.setattr(fakes.activity, "daily_activities", boom)
    _login(client)
    res = client.get("/api/hubstaff?date=2026-01-09")
    assert res.status_code == 502
    assert res.get_json() == {"error": "Hubstaff request failed (503)"}


def test_non_text_credentials_are_client_errors(client):
    res = client.post("/api/auth/manager-login", json={"passkey": 1234})
    assert res.status_code == 401
    assert res.get_json() == {"error": "Invalid passkey"}

    assert client.post("/api/auth/login", json={"username": 7, "password": 7}).status_code == 401
    assert client.post("/api/auth/pc-login", json={"passkey": ["pc-pass"], "pc_name": "Milda"}).status_code == 400
