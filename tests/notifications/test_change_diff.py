from __future__ import annotations

from datetime import date

from team_tracker.core.enums import TaskStatus
from team_tracker.notifications.diff import compute_changes, normalize


PREVIOUS = {
    "id": 5,
    "status": "In Progress",
    "assigned_to": "Asha",
    "assigned_to2": None,
    "pc": "Milda",
    "start_date": "2026-01-01",
    "end_date": "2026-01-05T00:00:00Z",
    "priority": "High",
    "sub_phase": "Regression",
    "project_name": "Website Revamp",
    "bug_count": 3,
    "comments": None,
    "current_updates": "",
    "days_allotted": 2,
}


def test_fields_absent_from_the_update_are_never_reported():
    changes = compute_changes(PREVIOUS, {"priority": "Low"})
    assert set(changes) == {"priority"}


def test_same_status_is_not_a_change():
    assert "status" not in compute_changes(PREVIOUS, {"status": "In Progress"})


def test_timestamp_and_date_compare_equal():
    assert "end_date" not in compute_changes(PREVIOUS, {"end_date": "2026-01-05"})


def test_null_and_empty_string_compare_equal():
    assert "comments" not in compute_changes(PREVIOUS, {"comments": ""})
    assert "current_updates" not in compute_changes(PREVIOUS, {"current_updates": None})


def test_changed_value_keeps_original_values():
    changes = compute_changes(PREVIOUS, {"assigned_to": "Bindu"})
    assert changes == {"assigned_to": {"old": "Asha", "new": "Bindu"}}


def test_original_values_are_kept_even_when_normalization_applies():
    changes = compute_changes(PREVIOUS, {"end_date": "2026-01-07T10:30:00Z"})
    assert changes["end_date"] == {"old": "2026-01-05T00:00:00Z", "new": "2026-01-07T10:30:00Z"}


def test_untracked_fields_are_ignored():
    assert compute_changes(PREVIOUS, {"days_allotted": 10}) == {}


def test_whitespace_and_number_formatting_do_not_count():
    assert compute_changes(PREVIOUS, {"priority": "  High ", "bug_count": "3"}) == {}


def test_text_containing_t_is_not_truncated():
    previous = dict(PREVIOUS, comments="Testing started on staging")
    changes = compute_changes(previous, {"comments": "Testing started on production"})
    assert "comments" in changes


def test_typed_values_normalize_like_their_text():
    assert normalize(TaskStatus.ON_HOLD) == "On Hold"
    assert normalize(date(2026, 1, 5)) == "2026-01-05"
    assert compute_changes({"status": TaskStatus.ON_HOLD}, {"status": "On Hold"}) == {}


def test_diff_is_pure_and_repeatable():
    updates = {"status": "Completed", "assigned_to": "Bindu", "comments": "done"}
    before = dict(PREVIOUS)
    first = compute_changes(PREVIOUS, updates)
    second = compute_changes(PREVIOUS, updates)
    assert first == second
    assert PREVIOUS == before
    assert list(first) == ["status", "assigned_to", "comments"]
