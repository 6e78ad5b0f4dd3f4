from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student enrolled in one course/semester.

    Attendance logs and summaries reference a student by ``student_id`` only.
    """

    student_id: int
    roll_number: str
    full_name: str
    course_id: str
    sem_id: str
    section: Optional[str] = None
    specializations: tuple[str, ...] = field(default_factory=tuple)
    email: Optional[str] = None
    phone_number: Optional[str] = None
    academic_year: Optional[str] = None


def roll_number_sort_key(roll_number: str) -> tuple:
    """Order roll numbers like ``BCA-2K21-7`` by intake year then number.

    Roll numbers that do not follow the ``PREFIX-2KYY-N`` shape sort after the
    well-formed ones, by their raw text.
    """

    parts = (roll_number or "").split("-")
    if len(parts) >= 3:
        year_part = parts[1][2:4]
        if year_part.isdigit() and parts[2].isdigit():
            return (0, int(year_part), int(parts[2]), roll_number)
    return (1, 0, 0, roll_number or "")
