from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from ..attendance.model import AttendanceSummary, StudentAttendanceRow
from ..common.datetime_utils import academic_year_bounds
from ..common.validators import optional_date, optional_text, require_academic_year, require_non_empty
from ..core.constants import DEFAULT_ACADEMIC_YEAR_START_MONTH, DEFAULT_ATTENDANCE_THRESHOLD
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.model import Subject
from ..database.unit_of_work import UnitOfWorkFactory
from ..eligibility.calculator import percentage
from ..students.filters import StudentFilter

DEBARRED = "DEBARRED"
ELIGIBLE = "ELIGIBLE"


@dataclass(frozen=True)
class CourseReport:
    rows: list[StudentAttendanceRow]
    filters: dict

    @property
    def total_students(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SubjectStanding:
    subject_code: str
    subject_name: str
    attended: int
    total: int
    percentage: int
    status: str


@dataclass(frozen=True)
class StudentStanding:
    student_id: int
    student_name: str
    roll_number: str
    subjects: tuple[SubjectStanding, ...]

    @property
    def debarred_subjects(self) -> list[str]:
        return [s.subject_code for s in self.subjects if s.status == DEBARRED]


@dataclass(frozen=True)
class SemesterReport:
    """Every subject of a course semester against every matching student."""

    course_name: str
    subjects: list[Subject]
    rows: list[StudentStanding]
    debar_percentage: float
    filters: dict

    @property
    def total_students(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class CourseSemesterCoverage:
    course_id: str
    sem_id: str
    total_subjects: int
    unmarked_subjects: int


@dataclass(frozen=True)
class UnmarkedReport:
    unmarked: list[Subject]
    total_subjects: int
    subjects_with_attendance: int
    by_course: list[CourseSemesterCoverage]

    @property
    def subjects_without_attendance(self) -> int:
        return len(self.unmarked)

    @property
    def completion_percentage(self) -> int:
        return percentage(self.subjects_with_attendance, self.total_subjects)


def _debar_limit(value: Any, default: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        limit = float(value)
    except (TypeError, ValueError):
        raise ValidationError("debarPercentage must be a number")
    if limit < 0 or limit > 100:
        raise ValidationError("debarPercentage must be between 0 and 100")
    return limit


class AttendanceReportService:
    """Read-only views over the record and summary stores."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        academic_year_start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH,
        debar_percentage: float = DEFAULT_ATTENDANCE_THRESHOLD,
    ):
        self._uow_factory = uow_factory
        self._start_month = int(academic_year_start_month)
        self._debar_percentage = float(debar_percentage)

    def _window(self, academic_year: Any, start_date: Any, end_date: Any):
        year = require_academic_year(academic_year) if optional_text(academic_year) else None
        start = optional_date(start_date, "startDate")
        end = optional_date(end_date, "endDate")
        if year is not None and start is None and end is None:
            start, end = academic_year_bounds(year, self._start_month)
        return year, start, end

    def course_report(
        self,
        *,
        course_id: Any,
        sem_id: Any,
        subject_code: Any,
        academic_year: Any = None,
        specialization: Any = None,
        section: Any = None,
        start_date: Any = None,
        end_date: Any = None,
    ) -> CourseReport:
        cid = require_non_empty(course_id, "courseId")
        sem = require_non_empty(sem_id, "semId")
        subject = require_non_empty(subject_code, "subjectCode")
        year, start, end = self._window(academic_year, start_date, end_date)
        student_filter = StudentFilter.of(specialization=specialization, section=section)

        rows: list[StudentAttendanceRow] = []
        with self._uow_factory() as uow:
            students = uow.students.find_matching(cid, sem, student_filter)
            if not students:
                raise NotFoundError("No students found for this course, semester and filters")

            for student in students:
                log = uow.logs.get(student.student_id, subject)
                entries = log.between(start, end) if log is not None else []
                attended = sum(1 for e in entries if e.present)
                total = len(entries)
                rows.append(
                    StudentAttendanceRow(
                        student_id=student.student_id,
                        student_name=student.full_name,
                        roll_number=student.roll_number,
                        course_id=student.course_id,
                        sem_id=student.sem_id,
                        specializations=student.specializations,
                        section=student.section or "",
                        subject_code=subject,
                        academic_year=year,
                        classes_attended=attended,
                        total_classes=total,
                        attendance_percentage=percentage(attended, total),
                    )
                )

        return CourseReport(
            rows=rows,
            filters={
                "courseId": cid,
                "semId": sem,
                "subjectCode": subject,
                "academicYear": year,
                "specialization": student_filter.specialization,
                "section": student_filter.section,
                "startDate": start.isoformat() if isinstance(start, date) else None,
                "endDate": end.isoformat() if isinstance(end, date) else None,
            },
        )

    def course_semester_report(
        self,
        *,
        course_id: Any,
        sem_id: Any,
        debar_percentage: Any = None,
        academic_year: Any = None,
        specialization: Any = None,
        section: Any = None,
        start_date: Any = None,
        end_date: Any = None,
    ) -> SemesterReport:
        """Per student and subject: present, total, percentage and status.

        A subject is DEBARRED when its whole-number percentage is below
        ``debar_percentage`` (the configured threshold when omitted). A
        specialization narrows both the students and the subjects.
        """

        cid = require_non_empty(course_id, "courseId")
        sem = require_non_empty(sem_id, "semId")
        limit = _debar_limit(debar_percentage, self._debar_percentage)
        year, start, end = self._window(academic_year, start_date, end_date)
        student_filter = StudentFilter.of(specialization=specialization, section=section)

        rows: list[StudentStanding] = []
        with self._uow_factory() as uow:
            students = uow.students.find_matching(cid, sem, student_filter)
            if not students:
                raise NotFoundError("No students found for this course, semester and filters")
            subjects = list(
                uow.courses.list_subjects(course_id=cid, sem_id=sem, specialization=student_filter.specialization)
            )
            if not subjects:
                raise NotFoundError("No subjects found for this course and semester")
            course = uow.courses.get_by_id(cid)

            for student in students:
                standings: list[SubjectStanding] = []
                for subject in subjects:
                    log = uow.logs.get(student.student_id, subject.subject_code)
                    entries = log.between(start, end) if log is not None else []
                    attended = sum(1 for e in entries if e.present)
                    percent = percentage(attended, len(entries))
                    standings.append(
                        SubjectStanding(
                            subject_code=subject.subject_code,
                            subject_name=subject.subject_name,
                            attended=attended,
                            total=len(entries),
                            percentage=percent,
                            status=DEBARRED if percent < limit else ELIGIBLE,
                        )
                    )
                rows.append(
                    StudentStanding(
                        student_id=student.student_id,
                        student_name=student.full_name,
                        roll_number=student.roll_number,
                        subjects=tuple(standings),
                    )
                )

        return SemesterReport(
            course_name=course.course_name if course is not None else "Unknown Course",
            subjects=subjects,
            rows=rows,
            debar_percentage=limit,
            filters={
                "courseId": cid,
                "semId": sem,
                "academicYear": year,
                "specialization": student_filter.specialization,
                "section": student_filter.section,
                "startDate": start.isoformat() if isinstance(start, date) else None,
                "endDate": end.isoformat() if isinstance(end, date) else None,
            },
        )

    def list_summaries(
        self,
        *,
        course_id: Any,
        sem_id: Any,
        subject_code: Any,
        academic_year: Any = None,
    ) -> Sequence[AttendanceSummary]:
        year = require_academic_year(academic_year) if optional_text(academic_year) else None
        with self._uow_factory() as uow:
            return uow.summaries.list_for(
                course_id=require_non_empty(course_id, "courseId"),
                sem_id=require_non_empty(sem_id, "semId"),
                subject_code=require_non_empty(subject_code, "subjectCode"),
                academic_year=year,
            )

    def unmarked_report(self, *, course_id: Any = None, sem_id: Any = None) -> UnmarkedReport:
        """Subjects never marked, with coverage overall and per course semester."""

        with self._uow_factory() as uow:
            subjects = uow.courses.list_subjects(course_id=optional_text(course_id), sem_id=optional_text(sem_id))
            if not subjects:
                raise NotFoundError("No subjects found")
            marked = uow.logs.subject_codes_with_logs()

        coverage: dict[tuple[str, str], list[int]] = {}
        unmarked: list[Subject] = []
        for s in subjects:
            counts = coverage.setdefault((s.course_id, s.sem_id), [0, 0])
            counts[0] += 1
            if s.subject_code not in marked:
                counts[1] += 1
                unmarked.append(s)

        return UnmarkedReport(
            unmarked=unmarked,
            total_subjects=len(subjects),
            subjects_with_attendance=len(subjects) - len(unmarked),
            by_course=[
                CourseSemesterCoverage(course_id=c, sem_id=sem, total_subjects=total, unmarked_subjects=missing)
                for (c, sem), (total, missing) in coverage.items()
            ],
        )

    def unmarked_subjects(self, *, course_id: Any = None, sem_id: Any = None) -> list[Subject]:
        """Subjects that have never had attendance marked."""
        return self.unmarked_report(course_id=course_id, sem_id=sem_id).unmarked
