from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceLog, AttendanceSummary, Entry, SummaryKey


class AttendanceLogRepository(Protocol):
    """Record store: one log of dated entries per (student, subject)."""

    def get(self, student_id: int, subject_code: str, *, for_update: bool = False) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def append(self, student_id: int, subject_code: str, entry: Entry) -> None:
        """Append one entry, creating the log on first mark."""

        raise NotImplementedError

    def replace_entries(self, log: AttendanceLog) -> None:
        """Persist ``log.entries`` as the complete, non-empty entry list."""

        raise NotImplementedError

    def delete(self, student_id: int, subject_code: str) -> bool:
        raise NotImplementedError

    def subject_codes_with_logs(self) -> set[str]:
        raise NotImplementedError


class AttendanceSummaryRepository(Protocol):
    """Summary store: denormalized counters keyed by ``SummaryKey``."""

    def get(self, key: SummaryKey, *, for_update: bool = False) -> Optional[AttendanceSummary]:
        raise NotImplementedError

    def save(self, summary: AttendanceSummary) -> AttendanceSummary:
        """Insert a new summary or update an existing one.

        Updates are guarded by ``version``; a stale version raises
        ``ConcurrencyError``.
        """

        raise NotImplementedError

    def delete(self, key: SummaryKey) -> bool:
        raise NotImplementedError

    def list_for(
        self,
        *,
        course_id: str,
        sem_id: str,
        subject_code: str,
        academic_year: Optional[str] = None,
    ) -> Sequence[AttendanceSummary]:
        raise NotImplementedError
