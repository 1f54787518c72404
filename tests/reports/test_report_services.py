from __future__ import annotations

from datetime import date

import pytest

from team_tracker.core.enums import TaskStatus
from team_tracker.core.exceptions import ValidationError
from team_tracker.reports.service import (
    QA_REPORT_CSV_HEADERS,
    TRACKER_CSV_HEADERS,
    ReportFilters,
    qa_report_csv_rows,
    tracker_csv_rows,
)
from team_tracker.tasks.model import Task

TASKS = [
    Task(
        1, 1, "Website Revamp", TaskStatus.IN_PROGRESS,
        assigned_to="Asha", assigned_to2="Bindu",
        start_date=date(2026, 1, 5), end_date=date(2026, 1, 12),
        days_allotted=2.0, time_taken="12:00:00", activity_percentage=80,
    ),
    Task(
        2, 1, "Website Revamp", TaskStatus.COMPLETED,
        assigned_to="Bindu", start_date=date(2026, 1, 1), end_date=date(2026, 1, 4),
        days_allotted=1.0, time_taken="04:00:00", activity_percentage=60,
    ),
    Task(
        3, 1, "Mobile App", TaskStatus.IN_PROGRESS,
        sub_phase="Smoke", assigned_to="Asha", start_date=date(2026, 1, 2), end_date=date(2026, 1, 8),
        days_allotted=1.0, time_taken="08:00:00", activity_percentage=50, comments="late build",
    ),
    Task(4, 1, "Mobile App", TaskStatus.REJECTED, deviation_reason="Out of scope"),
]


@pytest.fixture
def reports(container):
    return container.task_report_service


def _ids(tasks):
    return [t.task_id for t in tasks]


def test_summary_counts(reports, today):
    summary = reports.summary(TASKS, ReportFilters(), today).to_dict()

    assert summary["stats"] == {"total": 4, "completed": 1, "inProgress": 1, "overdue": 1}
    assert summary["byStatus"] == {"In Progress": 1, "Completed": 1, "Overdue": 1, "Rejected": 1}
    assert summary["byAssignee"]["Asha"] == {"total": 2, "completed": 0, "inProgress": 1}
    assert summary["byAssignee"]["Unassigned"]["total"] == 1
    assert summary["taskIds"] == [1, 2, 3, 4]


@pytest.mark.parametrize(
    "filters, expected",
    [
        (ReportFilters(project=" website revamp "), [1, 2]),
        (ReportFilters(assignee="Bindu K"), [1, 2]),
        (ReportFilters(assignee="ash"), [1, 3]),
        (ReportFilters(start=date(2026, 1, 6), end=date(2026, 1, 7)), [1, 3]),
        (ReportFilters(project="Mobile App", assignee="Asha Nair"), [3]),
    ],
)
def test_filters(reports, filters, expected):
    assert _ids(reports.filter(TASKS, filters)) == expected


def test_filters_reject_inverted_range():
    with pytest.raises(ValidationError):
        ReportFilters(start=date(2026, 1, 7), end=date(2026, 1, 6))


def test_budget_rollup_groups_by_project(container):
    rows = [r.to_dict() for r in container.budget_service.rollup(TASKS)]

    assert [r["project_name"] for r in rows] == ["Website Revamp", "Mobile App"]
    web = rows[0]
    assert web["task_count"] == 2
    assert web["days_allotted"] == 3.0
    assert web["time_taken"] == "16:00:00"
    assert web["days_taken"] == 2.0
    assert web["deviation"] == 1.0
    assert web["activity_percentage"] == 70
    assert web["resources"] == "Asha, Bindu"


def test_budget_rollup_for_named_projects(container):
    rows = [r.to_dict() for r in container.budget_service.rollup(TASKS, projects=[" mobile app ", "Unknown"])]

    assert [r["project_name"] for r in rows] == ["mobile app", "Unknown"]
    assert rows[0]["task_count"] == 2
    assert rows[0]["deviation"] == 0.0
    assert rows[0]["activity_percentage"] == 25
    assert rows[0]["resources"] == "Asha"
    assert rows[1] == {
        "project_name": "Unknown",
        "task_count": 0,
        "days_allotted": 0,
        "time_taken": "00:00:00",
        "days_taken": 0.0,
        "deviation": 0.0,
        "activity_percentage": 0,
        "resources": None,
    }


def test_csv_rows(today):
    tracker = tracker_csv_rows(TASKS[:1])
    assert list(tracker[0]) == TRACKER_CSV_HEADERS
    assert tracker[0]["Assignees"] == "Asha Bindu"
    assert tracker[0]["Start Date"] == "2026-01-05"
    assert tracker[0]["Actual End"] == ""

    qa = qa_report_csv_rows(TASKS[2:], today)
    assert list(qa[0]) == QA_REPORT_CSV_HEADERS
    assert qa[0]["Status"] == "Overdue"
    assert qa[1]["Rejection Reason"] == "Out of scope"
