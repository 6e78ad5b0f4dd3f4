from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

from ..core.constants import DEFAULT_ACADEMIC_YEAR_START_MONTH


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_calendar_date(value: Union[str, date, datetime]) -> date:
    """Normalize a date, datetime or ISO string to a calendar day.

    Time-of-day is dropped, so ``2024-03-01T15:30:00`` and ``2024-03-01``
    name the same day.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return parse_iso_date(text)


def academic_year_for(day: date, start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH) -> str:
    """Label of the academic year containing ``day``, e.g. ``2024-25``."""
    first = day.year if day.month >= start_month else day.year - 1
    return f"{first}-{str(first + 1)[-2:]}"


def academic_year_bounds(label: str, start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH) -> tuple[date, date]:
    """First and last calendar day of an academic year label."""
    first = int(label.split("-", 1)[0])
    start = date(first, start_month, 1)
    end = date(first + 1, start_month, 1) - timedelta(days=1)
    return start, end


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
