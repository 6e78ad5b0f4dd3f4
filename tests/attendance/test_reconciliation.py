from __future__ import annotations

from datetime import date

import pytest

from src.course_attendance.course_attendance.attendance.model import AttendanceLog, Entry, SummaryKey
from src.course_attendance.course_attendance.attendance.reconciliation import (
    MergeDay,
    ReconciliationEngine,
    select_merge_entries,
)
from src.course_attendance.course_attendance.core.exceptions import NotFoundError, TransactionError, ValidationError
from tests.fakes import InMemoryUnitOfWork

DAY = date(2024, 3, 1)
OTHER_DAY = date(2024, 3, 2)


def _key(student_id: int, year: str = "2023-24") -> SummaryKey:
    return SummaryKey(student_id=student_id, course_id="BCA", sem_id="1", subject_code="CS101", academic_year=year)


def _mark(service, day, *marks):
    service.submit_attendance(
        course_id="BCA",
        sem_id="1",
        subject_code="CS101",
        date=day.isoformat(),
        entries=[{"studentId": sid, "present": present} for sid, present in marks],
    )


def _delete(service, day=DAY, **kw):
    return service.delete_attendance_for_date(course_id="BCA", sem_id="1", subject_code="CS101", date=day.isoformat(), **kw)


def _merge(service, final_count, day=DAY, **kw):
    return service.merge_attendance_for_date(
        course_id="BCA",
        sem_id="1",
        subject_code="CS101",
        date=day.isoformat(),
        final_count=final_count,
        **kw,
    )


# --- delete ---


def test_deleting_the_only_entry_removes_log_and_summary(service, store):
    _mark(service, DAY, (1, True))

    result = _delete(service)

    assert result.deleted_records == 1
    assert result.deleted_logs == 1
    assert result.deleted_summaries == 1
    assert result.updated_summaries == 0
    assert store.log(1, "CS101") is None
    assert store.summary(_key(1)) is None


def test_delete_removes_first_entry_of_the_day_and_adjusts_summary(service, store):
    _mark(service, DAY, (1, True))
    _mark(service, DAY, (1, False))
    _mark(service, OTHER_DAY, (1, True))

    result = _delete(service)

    assert result.updated_summaries == 1
    log = store.log(1, "CS101")
    assert [(e.day, e.present) for e in log.entries] == [(DAY, False), (OTHER_DAY, True)]
    summary = store.summary(_key(1))
    assert (summary.total_classes, summary.attended_classes) == (2, 1)
    assert summary.attendance_percentage == 50.0


def test_delete_skips_students_without_entries_that_day(service, store):
    _mark(service, DAY, (1, True))
    _mark(service, OTHER_DAY, (3, True))

    result = _delete(service)

    assert result.deleted_records == 1
    assert result.skipped == 2
    assert store.summary(_key(3)).total_classes == 1


def test_delete_respects_student_filter(service, store):
    _mark(service, DAY, (1, True), (2, True))

    result = _delete(service, section="B")

    assert result.deleted_records == 1
    assert store.log(1, "CS101") is not None
    assert store.log(2, "CS101") is None


def test_delete_without_entries_is_not_found_and_changes_nothing(service, store):
    _mark(service, OTHER_DAY, (1, True))

    with pytest.raises(NotFoundError):
        _delete(service)

    assert store.summary(_key(1)).total_classes == 1
    assert store.commits == 1


def test_delete_without_matching_students_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.delete_attendance_for_date(course_id="BCA", sem_id="5", subject_code="CS101", date="2024-03-01")


def test_delete_tolerates_missing_summary(service, store):
    store.logs[(1, "CS101")] = AttendanceLog(student_id=1, subject_code="CS101", entries=(Entry(DAY, True), Entry(OTHER_DAY, True)))

    result = _delete(service)

    assert result.deleted_records == 1
    assert result.updated_summaries == 0
    assert result.deleted_summaries == 0
    assert store.log(1, "CS101").entries == (Entry(OTHER_DAY, True),)
    assert store.summaries == {}


def test_delete_failure_rolls_back(service, store):
    _mark(service, DAY, (1, True), (3, True))
    _mark(service, DAY, (1, True), (3, True))
    before_logs, before_summaries = dict(store.logs), dict(store.summaries)
    store.fail_summary_save_at = 2

    with pytest.raises(TransactionError):
        _delete(service)

    assert store.logs == before_logs
    assert store.summaries == before_summaries


# --- merge ---


def test_merge_keeps_present_entry(service, store):
    _mark(service, DAY, (1, False))
    _mark(service, DAY, (1, True))
    _mark(service, DAY, (1, False))

    result = _merge(service, 1)

    assert result.processed_students == 1
    assert result.records_removed == 2
    assert (result.present_kept, result.absent_kept) == (1, 0)
    assert store.log(1, "CS101").entries == (Entry(DAY, True),)
    summary = store.summary(_key(1))
    assert (summary.total_classes, summary.attended_classes) == (1, 1)
    assert summary.attendance_percentage == 100.0


def test_merge_keeps_merged_entries_at_the_first_position_of_the_day(service, store):
    store.logs[(1, "CS101")] = AttendanceLog(
        student_id=1,
        subject_code="CS101",
        entries=(
            Entry(OTHER_DAY, False),
            Entry(DAY, False),
            Entry(date(2024, 3, 3), True),
            Entry(DAY, True),
            Entry(DAY, True),
        ),
    )

    _merge(service, 2)

    assert store.log(1, "CS101").entries == (
        Entry(OTHER_DAY, False),
        Entry(DAY, True),
        Entry(DAY, True),
        Entry(date(2024, 3, 3), True),
    )


def test_merge_skips_students_already_at_or_below_final_count(service, store):
    _mark(service, DAY, (1, True), (3, False))
    _mark(service, DAY, (1, False))

    result = _merge(service, 1)

    assert result.processed_students == 1
    assert result.skipped == 2
    assert result.updated_summaries == 1
    assert store.log(3, "CS101").entries == (Entry(DAY, False),)


def test_merge_with_nothing_to_collapse_still_succeeds(service, store):
    _mark(service, DAY, (1, True))

    result = _merge(service, 3)

    assert result.processed_students == 0
    assert store.summary(_key(1)).total_classes == 1


def test_merge_without_entries_is_not_found(service, store):
    _mark(service, OTHER_DAY, (1, True))

    with pytest.raises(NotFoundError):
        _merge(service, 1)


@pytest.mark.parametrize("final_count", [0, -1, "x", None])
def test_merge_rejects_bad_final_count(service, store, final_count):
    _mark(service, DAY, (1, True), (1, True))

    with pytest.raises(ValidationError):
        _merge(service, final_count)
    assert len(store.log(1, "CS101").entries) == 2


def test_engine_rejects_final_count_below_one(store, fixed_now):
    command = MergeDay(course_id="BCA", sem_id="1", subject_code="CS101", day=DAY, academic_year="2023-24", final_count=0)

    with InMemoryUnitOfWork(store) as uow:
        with pytest.raises(ValidationError):
            ReconciliationEngine(clock=lambda: fixed_now).merge_day(uow, command)


def test_merge_tolerates_missing_summary(service, store):
    store.logs[(1, "CS101")] = AttendanceLog(student_id=1, subject_code="CS101", entries=(Entry(DAY, True), Entry(DAY, False)))

    result = _merge(service, 1)

    assert result.processed_students == 1
    assert result.updated_summaries == 0
    assert store.summaries == {}


# --- selection ---


def test_selection_prefers_present_entries():
    entries = [Entry(DAY, False), Entry(DAY, True), Entry(DAY, False), Entry(DAY, True)]

    selection = select_merge_entries(entries, 1)

    assert selection.kept == (Entry(DAY, True),)
    assert selection.removed == 3
    assert selection.removed_present == 1


def test_selection_fills_with_absent_entries():
    entries = [Entry(DAY, False), Entry(DAY, True), Entry(DAY, False)]

    selection = select_merge_entries(entries, 2)

    assert selection.kept == (Entry(DAY, True), Entry(DAY, False))
    assert selection.kept_present == 1
    assert selection.removed == 1
    assert selection.removed_present == 0


def test_selection_of_all_absent():
    selection = select_merge_entries([Entry(DAY, False)] * 3, 2)

    assert selection.kept == (Entry(DAY, False), Entry(DAY, False))
    assert selection.removed_present == 0


@pytest.mark.parametrize("present,absent,final_count", [(0, 3, 1), (1, 3, 2), (3, 1, 2), (2, 2, 4), (4, 0, 3)])
def test_selection_keeps_as_many_present_as_allowed(present, absent, final_count):
    entries = [Entry(DAY, True)] * present + [Entry(DAY, False)] * absent

    selection = select_merge_entries(entries, final_count)

    assert len(selection.kept) == min(final_count, present + absent)
    assert selection.kept_present == min(present, final_count)


def test_merging_twice_changes_nothing_the_second_time(service, store):
    _mark(service, DAY, (1, False), (3, True))
    _mark(service, DAY, (1, True), (3, True))
    _mark(service, DAY, (1, False), (3, False))

    _merge(service, 2)
    logs, summaries = dict(store.logs), dict(store.summaries)
    second = _merge(service, 2)

    assert second.processed_students == 0
    assert store.logs == logs
    assert store.summaries == summaries


def test_merge_and_delete_only_touch_the_target_days_academic_year(service, store):
    june, july = date(2024, 6, 30), date(2024, 7, 1)
    _mark(service, june, (1, True))
    _mark(service, july, (1, True))
    _mark(service, july, (1, False))
    assert store.summary(_key(1, "2024-25")).total_classes == 2

    _merge(service, 1, day=july)

    merged = store.summary(_key(1, "2024-25"))
    assert (merged.attended_classes, merged.total_classes) == (1, 1)
    before = store.summary(_key(1, "2023-24"))
    assert (before.attended_classes, before.total_classes) == (1, 1)

    result = _delete(service, day=july)

    assert result.deleted_summaries == 1
    assert store.summary(_key(1, "2024-25")) is None
    assert store.log(1, "CS101").entries == (Entry(june, True),)
    kept = store.summary(_key(1, "2023-24"))
    assert (kept.attended_classes, kept.total_classes) == (1, 1)
