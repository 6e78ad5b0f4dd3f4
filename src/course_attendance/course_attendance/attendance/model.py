from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

from ..eligibility.calculator import summary_percentage


@dataclass(frozen=True)
class Entry:
    """One dated presence/absence mark for a student in one subject."""

    day: date
    present: bool


@dataclass(frozen=True)
class AttendanceLog:
    """All entries of one (student, subject) pair, in insertion order.

    Several entries may share a day (the same class marked twice); they are
    kept until a merge collapses them.
    """

    student_id: int
    subject_code: str
    entries: tuple[Entry, ...] = field(default_factory=tuple)
    log_id: Optional[int] = None

    def entries_on(self, day: date) -> list[Entry]:
        return [e for e in self.entries if e.day == day]

    def between(self, start: Optional[date] = None, end: Optional[date] = None) -> list[Entry]:
        return [
            e
            for e in self.entries
            if (start is None or e.day >= start) and (end is None or e.day <= end)
        ]


@dataclass(frozen=True)
class SummaryKey:
    student_id: int
    course_id: str
    sem_id: str
    subject_code: str
    academic_year: str


@dataclass(frozen=True)
class AttendanceSummary:
    """Rolling counters for one student/course/semester/subject/academic year."""

    key: SummaryKey
    total_classes: int
    attended_classes: int
    attendance_percentage: float
    last_updated: datetime
    summary_id: Optional[int] = None
    version: int = 0

    @classmethod
    def first(cls, key: SummaryKey, *, present: bool, now: datetime) -> "AttendanceSummary":
        attended = 1 if present else 0
        return cls(
            key=key,
            total_classes=1,
            attended_classes=attended,
            attendance_percentage=summary_percentage(attended, 1),
            last_updated=now,
        )

    def adjusted(self, *, total_delta: int, attended_delta: int, now: datetime) -> "AttendanceSummary":
        """Apply count deltas, clamping both counters at zero."""

        total = max(0, self.total_classes + total_delta)
        attended = min(total, max(0, self.attended_classes + attended_delta))
        return replace(
            self,
            total_classes=total,
            attended_classes=attended,
            attendance_percentage=summary_percentage(attended, total),
            last_updated=now,
        )


@dataclass(frozen=True)
class StudentAttendanceRow:
    """Read-model for course reports (one student, one subject)."""

    student_id: int
    student_name: str
    roll_number: str
    course_id: str
    sem_id: str
    specializations: tuple[str, ...]
    section: str
    subject_code: str
    academic_year: Optional[str]
    classes_attended: int
    total_classes: int
    attendance_percentage: int
