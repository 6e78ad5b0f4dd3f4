from __future__ import annotations

from dataclasses import replace
from typing import Optional

from src.course_attendance.course_attendance.attendance.model import AttendanceLog, AttendanceSummary, Entry, SummaryKey
from src.course_attendance.course_attendance.core.exceptions import ConcurrencyError, TransactionError
from src.course_attendance.course_attendance.courses.model import Course, Subject
from src.course_attendance.course_attendance.students.filters import StudentFilter
from src.course_attendance.course_attendance.students.model import Student, roll_number_sort_key


class InMemoryStore:
    """Committed state shared by every unit of work of one test."""

    def __init__(self):
        self.students: dict[int, Student] = {}
        self.courses: dict[str, Course] = {}
        self.subjects: list[Subject] = []
        self.logs: dict[tuple[int, str], AttendanceLog] = {}
        self.summaries: dict[SummaryKey, AttendanceSummary] = {}
        self.next_id = 1
        self.commits = 0
        self.rollbacks = 0
        # Raise TransactionError on the n-th summary save (1-based) of a unit of work
        self.fail_summary_save_at: Optional[int] = None

    def add_student(self, student: Student) -> Student:
        self.students[student.student_id] = student
        return student

    def log(self, student_id: int, subject_code: str) -> Optional[AttendanceLog]:
        return self.logs.get((student_id, subject_code))

    def summary(self, key: SummaryKey) -> Optional[AttendanceSummary]:
        return self.summaries.get(key)


class InMemoryStudents:
    def __init__(self, students: dict[int, Student]):
        self._students = students

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._students.get(int(student_id))

    def exists(self, student_id: int, student_filter: StudentFilter) -> bool:
        student = self._students.get(int(student_id))
        return student is not None and student_filter.matches(student)

    def find_matching(self, course_id: str, sem_id: str, student_filter: StudentFilter):
        found = [
            s
            for s in self._students.values()
            if s.course_id == course_id and s.sem_id == sem_id and student_filter.matches(s)
        ]
        found.sort(key=lambda s: roll_number_sort_key(s.roll_number))
        return found


class InMemoryCourses:
    def __init__(self, courses: dict[str, Course], subjects: list[Subject]):
        self._courses = courses
        self._subjects = subjects

    def get_by_id(self, course_id: str) -> Optional[Course]:
        return self._courses.get(course_id)

    def get_by_name(self, course_name: str) -> Optional[Course]:
        for c in self._courses.values():
            if c.course_name == course_name:
                return c
        return None

    def list_subjects(self, *, course_id=None, sem_id=None, specialization=None):
        return [
            s
            for s in self._subjects
            if (course_id is None or s.course_id == course_id)
            and (sem_id is None or s.sem_id == sem_id)
            and (specialization is None or s.specialization == specialization)
        ]


class InMemoryLogs:
    def __init__(self, logs: dict[tuple[int, str], AttendanceLog]):
        self._logs = logs

    def get(self, student_id: int, subject_code: str, *, for_update: bool = False) -> Optional[AttendanceLog]:
        return self._logs.get((int(student_id), subject_code))

    def append(self, student_id: int, subject_code: str, entry: Entry) -> None:
        key = (int(student_id), subject_code)
        log = self._logs.get(key) or AttendanceLog(student_id=int(student_id), subject_code=subject_code)
        self._logs[key] = replace(log, entries=log.entries + (entry,))

    def replace_entries(self, log: AttendanceLog) -> None:
        assert log.entries, "empty logs must be deleted, not saved"
        self._logs[(log.student_id, log.subject_code)] = log

    def delete(self, student_id: int, subject_code: str) -> bool:
        return self._logs.pop((int(student_id), subject_code), None) is not None

    def subject_codes_with_logs(self) -> set[str]:
        return {subject for (_, subject) in self._logs}


class InMemorySummaries:
    def __init__(self, store: InMemoryStore, summaries: dict[SummaryKey, AttendanceSummary]):
        self._store = store
        self._summaries = summaries
        self.saves = 0

    def get(self, key: SummaryKey, *, for_update: bool = False) -> Optional[AttendanceSummary]:
        return self._summaries.get(key)

    def save(self, summary: AttendanceSummary) -> AttendanceSummary:
        self.saves += 1
        if self._store.fail_summary_save_at is not None and self.saves >= self._store.fail_summary_save_at:
            raise TransactionError("simulated storage failure")

        assert 0 <= summary.attended_classes <= summary.total_classes
        current = self._summaries.get(summary.key)
        if summary.summary_id is None:
            if current is not None:
                raise ConcurrencyError("duplicate summary")
            saved = replace(summary, summary_id=self._store.next_id, version=0)
            self._store.next_id += 1
        else:
            if current is None or current.version != summary.version:
                raise ConcurrencyError("stale summary")
            saved = replace(summary, version=summary.version + 1)
        self._summaries[summary.key] = saved
        return saved

    def delete(self, key: SummaryKey) -> bool:
        return self._summaries.pop(key, None) is not None

    def list_for(self, *, course_id, sem_id, subject_code, academic_year=None):
        return [
            s
            for s in self._summaries.values()
            if s.key.course_id == course_id
            and s.key.sem_id == sem_id
            and s.key.subject_code == subject_code
            and (academic_year is None or s.key.academic_year == academic_year)
        ]


class InMemoryUnitOfWork:
    """Works on a copy of the store; ``commit`` publishes the copy."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._committed = False

    def __enter__(self) -> "InMemoryUnitOfWork":
        self._logs = dict(self._store.logs)
        self._summaries = dict(self._store.summaries)
        self.students = InMemoryStudents(self._store.students)
        self.courses = InMemoryCourses(self._store.courses, self._store.subjects)
        self.logs = InMemoryLogs(self._logs)
        self.summaries = InMemorySummaries(self._store, self._summaries)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._committed:
            self.rollback()

    def commit(self) -> None:
        self._store.logs = self._logs
        self._store.summaries = self._summaries
        self._store.commits += 1
        self._committed = True

    def rollback(self) -> None:
        self._store.rollbacks += 1


def make_student(student_id: int, roll_number: str, *, course_id="BCA", sem_id="1", section="A", specializations=(), email=None):
    return Student(
        student_id=student_id,
        roll_number=roll_number,
        full_name=f"Student {student_id}",
        course_id=course_id,
        sem_id=sem_id,
        section=section,
        specializations=tuple(specializations),
        email=email,
    )
