from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import to_calendar_date

_ACADEMIC_YEAR_RE = re.compile(r"^\d{4}-\d{2}$")


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_int(value: Any, field_name: str, *, minimum: Optional[int] = None) -> int:
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum}")
    return number


def require_academic_year(value: Any, field_name: str = "academicYear") -> str:
    text = require_non_empty(value, field_name)
    if not _ACADEMIC_YEAR_RE.match(text):
        raise ValidationError(f"{field_name} must look like 2024-25")
    first, second = text.split("-")
    if str(int(first) + 1)[-2:] != second:
        raise ValidationError(f"{field_name} must span consecutive years")
    return text


def require_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, date):
        return to_calendar_date(value)
    text = require_non_empty(value, field_name)
    try:
        return to_calendar_date(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)")


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_date(value, field_name)
