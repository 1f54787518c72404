from __future__ import annotations

from datetime import date

import pytest

from team_tracker.common.datetime_utils import format_duration, format_hms, parse_iso_date, parse_optional_date
from team_tracker.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "value",
    [
        "2026-01-09",
        " 2026-01-09 ",
        "2026-01-09T10:15:00",
        "2026-01-09T10:15:00.000Z",
        "2026-01-09T23:59:59+05:30",
        "2026-01-09 08:00:00",
    ],
)
def test_accepts_dates_and_iso_timestamps(value):
    assert parse_iso_date(value) == date(2026, 1, 9)


@pytest.mark.parametrize(
    "value",
    ["2026-01-05garbage", "2026-01-05 junk", "2026-13-01", "10/01/2026", "2026-1-5", "", "today"],
)
def test_rejects_anything_else(value):
    with pytest.raises(ValidationError, match="Invalid date"):
        parse_iso_date(value)


def test_optional_date():
    assert parse_optional_date(None) is None
    assert parse_optional_date("") is None
    assert parse_optional_date(date(2026, 1, 9)) == date(2026, 1, 9)
    with pytest.raises(ValidationError):
        parse_optional_date("2026-01-09xyz")


def test_duration_formats():
    assert format_duration(0) == "0m"
    assert format_duration(2700) == "45m"
    assert format_duration(25500) == "7h 05m"
    assert format_hms(3661) == "01:01:01"
