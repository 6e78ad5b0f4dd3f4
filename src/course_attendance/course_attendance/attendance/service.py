from __future__ import annotations

from datetime import date
from collections.abc import Iterable
from typing import Any, Optional, Sequence

from ..common.datetime_utils import academic_year_for
from ..common.validators import (
    optional_date,
    optional_text,
    require_academic_year,
    require_date,
    require_int,
    require_non_empty,
)
from ..core.constants import DEFAULT_ACADEMIC_YEAR_START_MONTH
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.model import Subject
from ..database.unit_of_work import UnitOfWork, UnitOfWorkFactory
from ..students.filters import StudentFilter
from ..students.model import Student
from .model import AttendanceSummary, Entry, SummaryKey
from .reconciliation import DeleteDay, DeleteResult, MergeDay, MergeResult, ReconciliationEngine
from .writer import AttendanceWriter, MarkEntry, SubmitAttendance, SubmitResult


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "present", "p"}
    return bool(value)


def _as_student_id(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("studentId must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_entries(raw: Any) -> list[MarkEntry]:
    if raw is None:
        raise ValidationError("entries is required")
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise ValidationError("entries must be a list")

    marks: list[MarkEntry] = []
    for item in raw:
        if isinstance(item, MarkEntry):
            marks.append(item)
        elif isinstance(item, dict):
            marks.append(
                MarkEntry(
                    student_id=_as_student_id(item.get("studentId", item.get("student_id"))),
                    present=_as_bool(item.get("present", False)),
                )
            )
        else:
            raise ValidationError("entries must contain {studentId, present} objects")
    return marks


class AttendanceService:
    """Operation surface of the attendance core.

    Each mutating call validates its input first, then runs inside exactly one
    unit of work: every change commits together or none does.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        writer: Optional[AttendanceWriter] = None,
        reconciliation: Optional[ReconciliationEngine] = None,
        academic_year_start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH,
    ):
        self._uow_factory = uow_factory
        self._writer = writer or AttendanceWriter()
        self._reconciliation = reconciliation or ReconciliationEngine()
        self._start_month = int(academic_year_start_month)

    def _academic_year(self, day: date, requested: Any = None) -> str:
        derived = academic_year_for(day, self._start_month)
        if requested is None or (isinstance(requested, str) and not requested.strip()):
            return derived
        label = require_academic_year(requested)
        if label != derived:
            raise ValidationError(f"academicYear {label} does not contain {day.isoformat()} (expected {derived})")
        return label

    @staticmethod
    def _resolve_course_id(uow: UnitOfWork, course_id: Any, course_name: Any) -> str:
        cid = optional_text(course_id)
        if cid is not None:
            return cid
        name = optional_text(course_name)
        course = uow.courses.get_by_name(name)
        if course is None:
            raise NotFoundError(f"Course not found: {name}")
        return course.course_id

    def submit_attendance(
        self,
        *,
        subject_code: Any,
        date: Any,
        sem_id: Any,
        entries: Any,
        course_id: Any = None,
        course_name: Any = None,
        academic_year: Any = None,
        specialization: Any = None,
        section: Any = None,
    ) -> SubmitResult:
        if optional_text(course_id) is None and optional_text(course_name) is None:
            raise ValidationError("courseId or courseName is required")
        sem = require_non_empty(sem_id, "semId")
        subject = require_non_empty(subject_code, "subjectCode")
        day = require_date(date)
        marks = _parse_entries(entries)
        year = self._academic_year(day, academic_year)
        student_filter = StudentFilter.of(specialization=specialization, section=section)

        with self._uow_factory() as uow:
            command = SubmitAttendance(
                subject_code=subject,
                day=day,
                course_id=self._resolve_course_id(uow, course_id, course_name),
                sem_id=sem,
                academic_year=year,
                entries=marks,
                student_filter=student_filter,
            )
            result = self._writer.submit(uow, command)
            uow.commit()
        return result

    def delete_attendance_for_date(
        self,
        *,
        course_id: Any,
        sem_id: Any,
        subject_code: Any,
        date: Any,
        specialization: Any = None,
        section: Any = None,
    ) -> DeleteResult:
        day = require_date(date)
        command = DeleteDay(
            course_id=require_non_empty(course_id, "courseId"),
            sem_id=require_non_empty(sem_id, "semId"),
            subject_code=require_non_empty(subject_code, "subjectCode"),
            day=day,
            academic_year=self._academic_year(day),
            student_filter=StudentFilter.of(specialization=specialization, section=section),
        )

        with self._uow_factory() as uow:
            result = self._reconciliation.delete_day(uow, command)
            uow.commit()
        return result

    def merge_attendance_for_date(
        self,
        *,
        course_id: Any,
        sem_id: Any,
        subject_code: Any,
        date: Any,
        final_count: Any,
        specialization: Any = None,
        section: Any = None,
    ) -> MergeResult:
        day = require_date(date)
        command = MergeDay(
            course_id=require_non_empty(course_id, "courseId"),
            sem_id=require_non_empty(sem_id, "semId"),
            subject_code=require_non_empty(subject_code, "subjectCode"),
            day=day,
            academic_year=self._academic_year(day),
            final_count=require_int(final_count, "finalCount", minimum=1),
            student_filter=StudentFilter.of(specialization=specialization, section=section),
        )

        with self._uow_factory() as uow:
            result = self._reconciliation.merge_day(uow, command)
            uow.commit()
        return result

    def get_summary(
        self,
        *,
        student_id: Any,
        course_id: Any,
        sem_id: Any,
        subject_code: Any,
        academic_year: Any,
    ) -> AttendanceSummary:
        key = SummaryKey(
            student_id=require_int(student_id, "studentId"),
            course_id=require_non_empty(course_id, "courseId"),
            sem_id=require_non_empty(sem_id, "semId"),
            subject_code=require_non_empty(subject_code, "subjectCode"),
            academic_year=require_academic_year(academic_year),
        )
        with self._uow_factory() as uow:
            summary = uow.summaries.get(key)
        if summary is None:
            raise NotFoundError("No attendance summary for this student and subject")
        return summary

    def get_detail(
        self,
        *,
        student_id: Any,
        subject_code: Any,
        start_date: Any = None,
        end_date: Any = None,
    ) -> list[Entry]:
        """Entries of one student in one subject, oldest first.

        An unknown student is a ``NotFoundError``; a known student without
        marks yields an empty list.
        """

        sid = require_int(student_id, "studentId")
        subject = require_non_empty(subject_code, "subjectCode")
        start = optional_date(start_date, "startDate")
        end = optional_date(end_date, "endDate")

        with self._uow_factory() as uow:
            if uow.students.get_by_id(sid) is None:
                raise NotFoundError("Student not found")
            log = uow.logs.get(sid, subject)

        if log is None:
            return []
        return sorted(log.between(start, end), key=lambda e: e.day)

    def list_students(
        self,
        *,
        sem_id: Any,
        course_id: Any = None,
        course_name: Any = None,
        specialization: Any = None,
        section: Any = None,
    ) -> Sequence[Student]:
        if optional_text(course_id) is None and optional_text(course_name) is None:
            raise ValidationError("courseId or courseName is required")
        sem = require_non_empty(sem_id, "semId")
        student_filter = StudentFilter.of(specialization=specialization, section=section)

        with self._uow_factory() as uow:
            cid = self._resolve_course_id(uow, course_id, course_name)
            return uow.students.find_matching(cid, sem, student_filter)

    def list_subjects(self, *, course_name: Any, sem_id: Any, specialization: Any = None) -> Sequence[Subject]:
        name = require_non_empty(course_name, "courseName")
        sem = require_non_empty(sem_id, "semId")

        with self._uow_factory() as uow:
            course = uow.courses.get_by_name(name)
            if course is None:
                raise NotFoundError(f"Course not found: {name}")
            return uow.courses.list_subjects(
                course_id=course.course_id,
                sem_id=sem,
                specialization=optional_text(specialization),
            )
