from __future__ import annotations

from datetime import datetime

import pytest

from volunteer_attendance.common.datetime_utils import month_bounds, parse_date_bound, to_iso
from volunteer_attendance.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "moment, start, end",
    [
        (datetime(2026, 3, 10, 9, 0), datetime(2026, 3, 1), datetime(2026, 3, 31, 23, 59, 59, 999000)),
        (datetime(2028, 2, 29, 23, 0), datetime(2028, 2, 1), datetime(2028, 2, 29, 23, 59, 59, 999000)),
        (datetime(2026, 12, 31, 23, 59), datetime(2026, 12, 1), datetime(2026, 12, 31, 23, 59, 59, 999000)),
    ],
)
def test_month_bounds(moment, start, end):
    assert month_bounds(moment) == (start, end)


def test_date_bounds_are_inclusive_whole_days():
    assert parse_date_bound("2026-03-10") == datetime(2026, 3, 10)
    assert parse_date_bound("2026-03-10", end_of_day=True) == datetime(2026, 3, 10, 23, 59, 59, 999000)
    # full ISO timestamps are accepted and truncated to the date
    assert parse_date_bound("2026-03-10T15:00:00.000Z") == datetime(2026, 3, 10)
    assert parse_date_bound(None) is None
    assert parse_date_bound("") is None


def test_bad_date_is_a_validation_error():
    with pytest.raises(ValidationError, match="Invalid date"):
        parse_date_bound("2026-13-01")


def test_to_iso_marks_utc():
    assert to_iso(datetime(2026, 3, 10, 9, 0, 0, 123456)) == "2026-03-10T09:00:00.123Z"
    assert to_iso(None) is None
