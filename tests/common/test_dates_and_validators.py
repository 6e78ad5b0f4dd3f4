from __future__ import annotations

from datetime import date, datetime

import pytest

from src.course_attendance.course_attendance.common.datetime_utils import (
    academic_year_bounds,
    academic_year_for,
    to_calendar_date,
)
from src.course_attendance.course_attendance.common.validators import (
    optional_date,
    require_academic_year,
    require_int,
)
from src.course_attendance.course_attendance.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "day,start_month,expected",
    [
        (date(2024, 7, 1), 7, "2024-25"),
        (date(2024, 6, 30), 7, "2023-24"),
        (date(2024, 1, 15), 1, "2024-25"),
        (date(1999, 12, 31), 7, "1999-00"),
    ],
)
def test_academic_year_for(day, start_month, expected):
    assert academic_year_for(day, start_month) == expected


def test_academic_year_bounds():
    assert academic_year_bounds("2023-24") == (date(2023, 7, 1), date(2024, 6, 30))
    assert academic_year_bounds("2024-25", 1) == (date(2024, 1, 1), date(2024, 12, 31))


def test_to_calendar_date_drops_time():
    assert to_calendar_date("2024-03-01T15:30:00") == date(2024, 3, 1)
    assert to_calendar_date("2024-03-01T23:30:00Z") == date(2024, 3, 1)
    assert to_calendar_date(datetime(2024, 3, 1, 8, 0)) == date(2024, 3, 1)
    assert to_calendar_date(" 2024-03-01 ") == date(2024, 3, 1)


def test_require_academic_year():
    assert require_academic_year(" 1999-00 ") == "1999-00"
    with pytest.raises(ValidationError):
        require_academic_year("2024-26")


def test_require_int():
    assert require_int("3", "finalCount", minimum=1) == 3
    for bad in (None, "", True, "1.5"):
        with pytest.raises(ValidationError):
            require_int(bad, "finalCount")


def test_optional_date():
    assert optional_date(None, "startDate") is None
    assert optional_date(" ", "startDate") is None
    with pytest.raises(ValidationError):
        optional_date("2024-13-01", "startDate")


def test_require_int_rejects_fractional_numbers():
    assert require_int(2.0, "finalCount") == 2
    with pytest.raises(ValidationError):
        require_int(2.9, "finalCount")
