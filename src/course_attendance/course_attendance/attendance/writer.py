from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..database.unit_of_work import UnitOfWork
from ..students.filters import StudentFilter
from .model import AttendanceSummary, Entry, SummaryKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkEntry:
    student_id: Optional[int]
    present: bool


@dataclass(frozen=True)
class SubmitAttendance:
    subject_code: str
    day: date
    course_id: str
    sem_id: str
    academic_year: str
    entries: Sequence[MarkEntry]
    student_filter: StudentFilter = field(default_factory=StudentFilter)


@dataclass(frozen=True)
class SubmitResult:
    accepted: int
    skipped: int
    created_summaries: int
    updated_summaries: int


class AttendanceWriter:
    """Appends presence marks and keeps the matching summaries in step.

    The caller owns the unit of work and decides when to commit; a failure on
    any entry leaves nothing behind once the unit of work rolls back.
    """

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or now_local

    def submit(self, uow: UnitOfWork, command: SubmitAttendance) -> SubmitResult:
        now = self._clock()
        accepted = skipped = created = updated = 0
        checked: dict[int, bool] = {}

        for mark in command.entries:
            if mark.student_id is None:
                skipped += 1
                continue

            student_id = int(mark.student_id)
            if student_id not in checked:
                checked[student_id] = uow.students.exists(student_id, command.student_filter)
            if not checked[student_id]:
                logger.debug("Student %s not found or outside filters, skipping", student_id)
                skipped += 1
                continue

            present = bool(mark.present)
            uow.logs.append(student_id, command.subject_code, Entry(day=command.day, present=present))

            key = SummaryKey(
                student_id=student_id,
                course_id=command.course_id,
                sem_id=command.sem_id,
                subject_code=command.subject_code,
                academic_year=command.academic_year,
            )
            summary = uow.summaries.get(key, for_update=True)
            if summary is None:
                uow.summaries.save(AttendanceSummary.first(key, present=present, now=now))
                created += 1
            else:
                uow.summaries.save(summary.adjusted(total_delta=1, attended_delta=1 if present else 0, now=now))
                updated += 1
            accepted += 1

        logger.info(
            "Marked %s on %s: accepted=%s skipped=%s",
            command.subject_code,
            command.day.isoformat(),
            accepted,
            skipped,
        )
        return SubmitResult(
            accepted=accepted,
            skipped=skipped,
            created_summaries=created,
            updated_summaries=updated,
        )
