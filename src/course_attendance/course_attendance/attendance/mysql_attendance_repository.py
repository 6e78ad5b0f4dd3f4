from __future__ import annotations

from typing import Optional

from ..database.mysql_base import fetchall, fetchone
from .model import AttendanceLog, Entry
from .repository import AttendanceLogRepository


class MySQLAttendanceLogRepository(AttendanceLogRepository):
    """Logs live in ``attendance_logs``; entries in ``attendance_entries``
    ordered by ``position`` (insertion order, not date order)."""

    def __init__(self, cur):
        self._cur = cur

    def get(self, student_id: int, subject_code: str, *, for_update: bool = False) -> Optional[AttendanceLog]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"""
            SELECT log_id, student_id, subject_code
            FROM attendance_logs
            WHERE student_id=%s AND subject_code=%s{lock}
            """,
            (int(student_id), subject_code),
        )
        row = fetchone(self._cur)
        if not row:
            return None

        log_id = int(row["log_id"])
        self._cur.execute(
            f"""
            SELECT entry_date, present
            FROM attendance_entries
            WHERE log_id=%s
            ORDER BY position ASC, entry_id ASC{lock}
            """,
            (log_id,),
        )
        entries = tuple(Entry(day=r["entry_date"], present=bool(r["present"])) for r in fetchall(self._cur))
        return AttendanceLog(
            student_id=int(row["student_id"]),
            subject_code=row["subject_code"],
            entries=entries,
            log_id=log_id,
        )

    def _ensure_log(self, student_id: int, subject_code: str) -> int:
        self._cur.execute(
            """
            INSERT INTO attendance_logs(student_id, subject_code)
            VALUES(%s,%s)
            ON DUPLICATE KEY UPDATE log_id=LAST_INSERT_ID(log_id), updated_at=CURRENT_TIMESTAMP
            """,
            (int(student_id), subject_code),
        )
        return int(self._cur.lastrowid)

    def append(self, student_id: int, subject_code: str, entry: Entry) -> None:
        log_id = self._ensure_log(student_id, subject_code)
        self._cur.execute(
            "SELECT COALESCE(MAX(position), 0) AS last_position FROM attendance_entries WHERE log_id=%s",
            (log_id,),
        )
        row = fetchone(self._cur) or {}
        position = int(row.get("last_position") or 0) + 1
        self._cur.execute(
            """
            INSERT INTO attendance_entries(log_id, entry_date, present, position)
            VALUES(%s,%s,%s,%s)
            """,
            (log_id, entry.day, int(bool(entry.present)), position),
        )

    def replace_entries(self, log: AttendanceLog) -> None:
        if not log.entries:
            raise ValueError("an attendance log cannot be saved without entries")

        log_id = log.log_id or self._ensure_log(log.student_id, log.subject_code)
        self._cur.execute("DELETE FROM attendance_entries WHERE log_id=%s", (log_id,))
        self._cur.executemany(
            """
            INSERT INTO attendance_entries(log_id, entry_date, present, position)
            VALUES(%s,%s,%s,%s)
            """,
            [(log_id, e.day, int(bool(e.present)), i) for i, e in enumerate(log.entries, start=1)],
        )
        self._cur.execute(
            "UPDATE attendance_logs SET updated_at=CURRENT_TIMESTAMP WHERE log_id=%s",
            (log_id,),
        )

    def delete(self, student_id: int, subject_code: str) -> bool:
        # attendance_entries rows go with the log (ON DELETE CASCADE)
        self._cur.execute(
            "DELETE FROM attendance_logs WHERE student_id=%s AND subject_code=%s",
            (int(student_id), subject_code),
        )
        return self._cur.rowcount > 0

    def subject_codes_with_logs(self) -> set[str]:
        self._cur.execute("SELECT DISTINCT subject_code FROM attendance_logs")
        return {r["subject_code"] for r in fetchall(self._cur)}
