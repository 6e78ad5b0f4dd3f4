"""Corrective bulk operations on a single day of attendance.

``delete_day`` removes one mark per student for the day; ``merge_day``
collapses duplicate marks for the day down to ``final_count`` per student,
keeping as many "present" marks as possible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import MIN_MERGE_FINAL_COUNT
from ..core.exceptions import NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..students.filters import StudentFilter
from .model import AttendanceLog, Entry, SummaryKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteDay:
    course_id: str
    sem_id: str
    subject_code: str
    day: date
    academic_year: str
    student_filter: StudentFilter = field(default_factory=StudentFilter)


@dataclass(frozen=True)
class MergeDay:
    course_id: str
    sem_id: str
    subject_code: str
    day: date
    academic_year: str
    final_count: int
    student_filter: StudentFilter = field(default_factory=StudentFilter)


@dataclass(frozen=True)
class DeleteResult:
    deleted_records: int
    deleted_logs: int
    updated_summaries: int
    deleted_summaries: int
    skipped: int


@dataclass(frozen=True)
class MergeResult:
    processed_students: int
    updated_summaries: int
    deleted_summaries: int
    skipped: int
    records_removed: int
    present_kept: int
    absent_kept: int


@dataclass(frozen=True)
class MergeSelection:
    kept: tuple[Entry, ...]
    original_total: int
    original_present: int

    @property
    def kept_present(self) -> int:
        return sum(1 for e in self.kept if e.present)

    @property
    def removed(self) -> int:
        return self.original_total - len(self.kept)

    @property
    def removed_present(self) -> int:
        return self.original_present - self.kept_present


def select_merge_entries(day_entries: Sequence[Entry], final_count: int) -> MergeSelection:
    """Pick which of one day's entries survive a merge.

    Present entries are kept first, up to ``final_count``; absent entries
    fill the rest. Within each group the earliest-inserted entries win.
    """

    present = [e for e in day_entries if e.present]
    absent = [e for e in day_entries if not e.present]

    keep_present = min(len(present), final_count)
    keep_absent = final_count - keep_present
    if keep_absent > len(absent):
        keep_absent = len(absent)
        keep_present = final_count - keep_absent

    return MergeSelection(
        kept=tuple(present[:keep_present] + absent[:keep_absent]),
        original_total=len(day_entries),
        original_present=len(present),
    )


def _replace_day(entries: Sequence[Entry], day: date, kept: Sequence[Entry]) -> tuple[Entry, ...]:
    out: list[Entry] = []
    inserted = False
    for e in entries:
        if e.day != day:
            out.append(e)
        elif not inserted:
            out.extend(kept)
            inserted = True
    return tuple(out)


def _remove_first_on(entries: Sequence[Entry], day: date) -> tuple[tuple[Entry, ...], Entry]:
    for i, e in enumerate(entries):
        if e.day == day:
            return tuple(entries[:i]) + tuple(entries[i + 1 :]), e
    raise ValueError(f"no entry on {day}")


class ReconciliationEngine:
    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or now_local

    def _summary_key(self, command, student_id: int) -> SummaryKey:
        return SummaryKey(
            student_id=student_id,
            course_id=command.course_id,
            sem_id=command.sem_id,
            subject_code=command.subject_code,
            academic_year=command.academic_year,
        )

    def _students(self, uow: UnitOfWork, command):
        students = uow.students.find_matching(command.course_id, command.sem_id, command.student_filter)
        if not students:
            raise NotFoundError("No students found matching the criteria")
        return students

    def _store_log(self, uow: UnitOfWork, log: AttendanceLog, entries: tuple[Entry, ...]) -> bool:
        """Persist the new entry list; returns True when the log was deleted."""

        if entries:
            uow.logs.replace_entries(replace(log, entries=entries))
            return False
        uow.logs.delete(log.student_id, log.subject_code)
        return True

    def _apply_to_summary(
        self,
        uow: UnitOfWork,
        key: SummaryKey,
        *,
        total_delta: int,
        attended_delta: int,
        now: datetime,
    ) -> Optional[str]:
        """Returns "updated", "deleted" or None when no summary exists."""

        summary = uow.summaries.get(key, for_update=True)
        if summary is None:
            logger.debug("No summary for %s; record store changed without a summary", key)
            return None

        adjusted = summary.adjusted(total_delta=total_delta, attended_delta=attended_delta, now=now)
        if adjusted.total_classes == 0:
            uow.summaries.delete(key)
            return "deleted"
        uow.summaries.save(adjusted)
        return "updated"

    def delete_day(self, uow: UnitOfWork, command: DeleteDay) -> DeleteResult:
        now = self._clock()
        deleted_records = deleted_logs = updated = deleted_summaries = skipped = 0

        for student in self._students(uow, command):
            log = uow.logs.get(student.student_id, command.subject_code, for_update=True)
            if log is None or not log.entries_on(command.day):
                logger.debug("No entry for student %s on %s", student.student_id, command.day)
                skipped += 1
                continue

            remaining, removed = _remove_first_on(log.entries, command.day)
            if self._store_log(uow, log, remaining):
                deleted_logs += 1
            deleted_records += 1

            outcome = self._apply_to_summary(
                uow,
                self._summary_key(command, student.student_id),
                total_delta=-1,
                attended_delta=-1 if removed.present else 0,
                now=now,
            )
            if outcome == "updated":
                updated += 1
            elif outcome == "deleted":
                deleted_summaries += 1

        if deleted_records == 0:
            raise NotFoundError(f"No attendance records found for {command.subject_code} on {command.day.isoformat()}")

        logger.info(
            "Deleted %s record(s) of %s on %s (summaries updated=%s deleted=%s)",
            deleted_records,
            command.subject_code,
            command.day.isoformat(),
            updated,
            deleted_summaries,
        )
        return DeleteResult(
            deleted_records=deleted_records,
            deleted_logs=deleted_logs,
            updated_summaries=updated,
            deleted_summaries=deleted_summaries,
            skipped=skipped,
        )

    def merge_day(self, uow: UnitOfWork, command: MergeDay) -> MergeResult:
        if command.final_count < MIN_MERGE_FINAL_COUNT:
            raise ValidationError(f"finalCount must be at least {MIN_MERGE_FINAL_COUNT}")

        now = self._clock()
        processed = updated = deleted_summaries = skipped = 0
        removed_total = present_kept = absent_kept = 0
        found_any = False

        for student in self._students(uow, command):
            log = uow.logs.get(student.student_id, command.subject_code, for_update=True)
            day_entries = log.entries_on(command.day) if log is not None else []
            if not day_entries:
                skipped += 1
                continue

            found_any = True
            if len(day_entries) <= command.final_count:
                logger.debug(
                    "Student %s has %s entries on %s (<= %s), nothing to merge",
                    student.student_id,
                    len(day_entries),
                    command.day,
                    command.final_count,
                )
                skipped += 1
                continue

            selection = select_merge_entries(day_entries, command.final_count)
            self._store_log(uow, log, _replace_day(log.entries, command.day, selection.kept))
            processed += 1
            removed_total += selection.removed
            present_kept += selection.kept_present
            absent_kept += len(selection.kept) - selection.kept_present

            outcome = self._apply_to_summary(
                uow,
                self._summary_key(command, student.student_id),
                total_delta=-selection.removed,
                attended_delta=-selection.removed_present,
                now=now,
            )
            if outcome == "updated":
                updated += 1
            elif outcome == "deleted":
                deleted_summaries += 1

        if not found_any:
            raise NotFoundError(f"No attendance records found for {command.subject_code} on {command.day.isoformat()}")

        logger.info(
            "Merged %s on %s to %s per student: processed=%s removed=%s",
            command.subject_code,
            command.day.isoformat(),
            command.final_count,
            processed,
            removed_total,
        )
        return MergeResult(
            processed_students=processed,
            updated_summaries=updated,
            deleted_summaries=deleted_summaries,
            skipped=skipped,
            records_removed=removed_total,
            present_kept=present_kept,
            absent_kept=absent_kept,
        )
