from __future__ import annotations

from datetime import datetime

import pytest

from src.course_attendance.course_attendance.attendance.reconciliation import ReconciliationEngine
from src.course_attendance.course_attendance.attendance.service import AttendanceService
from src.course_attendance.course_attendance.attendance.writer import AttendanceWriter
from src.course_attendance.course_attendance.courses.model import Course, Subject
from tests.fakes import InMemoryStore, InMemoryUnitOfWork, make_student


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 9, 30, 0)


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.courses["BCA"] = Course(course_id="BCA", course_name="Bachelor of Computer Applications", no_of_sem=6)
    s.subjects.extend(
        [
            Subject(subject_code="CS101", subject_name="Programming", course_id="BCA", sem_id="1", semester_type="odd", year="1"),
            Subject(subject_code="CS102", subject_name="Digital Logic", course_id="BCA", sem_id="1", semester_type="odd", year="1"),
        ]
    )
    s.add_student(make_student(1, "BCA-2K23-2", section="A", specializations=("AI",), email="s1@example.edu"))
    s.add_student(make_student(2, "BCA-2K23-10", section="B", email="s2@example.edu"))
    s.add_student(make_student(3, "BCA-2K23-1", section="A"))
    s.add_student(make_student(9, "MCA-2K23-1", course_id="MCA"))
    return s


@pytest.fixture
def uow_factory(store):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def service(uow_factory, fixed_now) -> AttendanceService:
    clock = lambda: fixed_now  # noqa: E731
    return AttendanceService(
        uow_factory,
        writer=AttendanceWriter(clock=clock),
        reconciliation=ReconciliationEngine(clock=clock),
    )
