from __future__ import annotations

import pytest

from src.course_attendance.course_attendance.core.exceptions import ValidationError
from src.course_attendance.course_attendance.notifications.notifier import LoggingNotifier, LowAttendanceNotice
from src.course_attendance.course_attendance.notifications.service import LowAttendanceService


class RecordingNotifier:
    def __init__(self, fail_for: tuple[str, ...] = ()):
        self.sent: list[LowAttendanceNotice] = []
        self._fail_for = fail_for

    def send(self, notice: LowAttendanceNotice) -> None:
        if notice.email in self._fail_for:
            raise RuntimeError("mail server unavailable")
        self.sent.append(notice)


def _record(student_id, attended, total, subject="Programming"):
    return {"studentId": student_id, "classesAttended": attended, "totalClasses": total, "subject": subject}


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def low_attendance(uow_factory, notifier):
    return LowAttendanceService(uow_factory, notifier, default_threshold=75)


def test_notifies_students_below_threshold(low_attendance, notifier):
    result = low_attendance.notify(records=[_record(1, 6, 10), _record(2, 9, 10), _record(3, 1, 10)])

    # student 3 has no email on file
    assert (result.sent, result.failed, result.total_processed) == (1, 1, 2)
    notice = notifier.sent[0]
    assert notice.email == "s1@example.edu"
    assert notice.percentage == 60.0
    assert notice.gap == 15.0
    assert notice.classes_needed == 6
    assert "Programming" in notice.subject_line
    assert "6 out of 10" in notice.body()


def test_nobody_below_threshold(low_attendance, notifier):
    result = low_attendance.notify(records=[_record(1, 8, 10)], threshold="75")

    assert (result.sent, result.failed, result.total_processed) == (0, 0, 0)
    assert notifier.sent == []


def test_zero_total_is_not_reported(low_attendance):
    result = low_attendance.notify(records=[_record(1, 0, 0)])

    assert result.total_processed == 0


def test_delivery_failure_is_counted_per_student(uow_factory):
    notifier = RecordingNotifier(fail_for=("s1@example.edu",))
    service = LowAttendanceService(uow_factory, notifier)

    result = service.notify(records=[_record(1, 1, 10), _record(2, 1, 10)])

    assert (result.sent, result.failed) == (1, 1)
    assert [n.email for n in notifier.sent] == ["s2@example.edu"]


def test_unreachable_full_attendance_is_a_failure_not_a_crash(low_attendance):
    result = low_attendance.notify(records=[_record(1, 9, 10)], threshold=100)

    assert (result.sent, result.failed) == (0, 1)


@pytest.mark.parametrize("threshold", [0, -5, 101, "abc"])
def test_rejects_bad_threshold(low_attendance, threshold):
    with pytest.raises(ValidationError):
        low_attendance.notify(records=[_record(1, 1, 10)], threshold=threshold)


@pytest.mark.parametrize("records", [None, [], [{"studentId": "x"}], ["nope"]])
def test_rejects_bad_records(low_attendance, records):
    with pytest.raises(ValidationError):
        low_attendance.notify(records=records)


def test_logging_notifier_writes_to_the_log(caplog):
    notice = LowAttendanceNotice(
        email="s1@example.edu",
        student_name="Student 1",
        roll_number="BCA-2K23-2",
        subject="Programming",
        percentage=60.0,
        threshold=75.0,
        gap=15.0,
        attended=6,
        total=10,
        classes_needed=6,
    )

    with caplog.at_level("INFO"):
        LoggingNotifier().send(notice)

    assert "s1@example.edu" in caplog.text
