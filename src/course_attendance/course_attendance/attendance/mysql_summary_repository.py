from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConcurrencyError
from ..database.mysql_base import fetchall, fetchone
from .model import AttendanceSummary, SummaryKey
from .repository import AttendanceSummaryRepository

_SUMMARY_COLUMNS = """
    summary_id, student_id, course_id, sem_id, subject_code, academic_year,
    total_classes, attended_classes, attendance_percentage, last_updated, version
"""


def _to_summary(r: dict) -> AttendanceSummary:
    return AttendanceSummary(
        key=SummaryKey(
            student_id=int(r["student_id"]),
            course_id=str(r["course_id"]),
            sem_id=str(r["sem_id"]),
            subject_code=r["subject_code"],
            academic_year=r["academic_year"],
        ),
        total_classes=int(r["total_classes"]),
        attended_classes=int(r["attended_classes"]),
        attendance_percentage=float(r["attendance_percentage"]),
        last_updated=r["last_updated"],
        summary_id=int(r["summary_id"]),
        version=int(r["version"]),
    )


class MySQLAttendanceSummaryRepository(AttendanceSummaryRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, key: SummaryKey, *, for_update: bool = False) -> Optional[AttendanceSummary]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS}
            FROM attendance_summaries
            WHERE student_id=%s AND course_id=%s AND sem_id=%s AND subject_code=%s AND academic_year=%s{lock}
            """,
            (int(key.student_id), key.course_id, key.sem_id, key.subject_code, key.academic_year),
        )
        r = fetchone(self._cur)
        return _to_summary(r) if r else None

    def save(self, summary: AttendanceSummary) -> AttendanceSummary:
        key = summary.key
        if summary.summary_id is None:
            try:
                self._cur.execute(
                    """
                    INSERT INTO attendance_summaries(
                        student_id, course_id, sem_id, subject_code, academic_year,
                        total_classes, attended_classes, attendance_percentage, last_updated, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        int(key.student_id),
                        key.course_id,
                        key.sem_id,
                        key.subject_code,
                        key.academic_year,
                        summary.total_classes,
                        summary.attended_classes,
                        summary.attendance_percentage,
                        summary.last_updated,
                    ),
                )
            except IntegrityError as exc:
                if exc.errno == errorcode.ER_DUP_ENTRY:
                    raise ConcurrencyError(f"summary for {key} was created concurrently") from exc
                raise
            return replace(summary, summary_id=int(self._cur.lastrowid), version=0)

        self._cur.execute(
            """
            UPDATE attendance_summaries
            SET total_classes=%s, attended_classes=%s, attendance_percentage=%s,
                last_updated=%s, version=version + 1
            WHERE summary_id=%s AND version=%s
            """,
            (
                summary.total_classes,
                summary.attended_classes,
                summary.attendance_percentage,
                summary.last_updated,
                int(summary.summary_id),
                int(summary.version),
            ),
        )
        if self._cur.rowcount == 0:
            raise ConcurrencyError(f"summary {summary.summary_id} changed concurrently")
        return replace(summary, version=summary.version + 1)

    def delete(self, key: SummaryKey) -> bool:
        self._cur.execute(
            """
            DELETE FROM attendance_summaries
            WHERE student_id=%s AND course_id=%s AND sem_id=%s AND subject_code=%s AND academic_year=%s
            """,
            (int(key.student_id), key.course_id, key.sem_id, key.subject_code, key.academic_year),
        )
        return self._cur.rowcount > 0

    def list_for(
        self,
        *,
        course_id: str,
        sem_id: str,
        subject_code: str,
        academic_year: Optional[str] = None,
    ) -> Sequence[AttendanceSummary]:
        clauses = ["course_id=%s", "sem_id=%s", "subject_code=%s"]
        params: list[object] = [str(course_id), str(sem_id), subject_code]
        if academic_year is not None:
            clauses.append("academic_year=%s")
            params.append(academic_year)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS}
            FROM attendance_summaries
            WHERE {where}
            ORDER BY student_id ASC
            """,
            tuple(params),
        )
        return [_to_summary(r) for r in fetchall(self._cur)]
