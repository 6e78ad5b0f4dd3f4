from __future__ import annotations

from typing import Optional, Sequence

from ..database.mysql_base import fetchall, fetchone
from .filters import StudentFilter
from .model import Student, roll_number_sort_key
from .repository import StudentRepository

_STUDENT_COLUMNS = """
    s.student_id, s.roll_number, s.full_name, s.course_id, s.sem_id, s.section,
    s.email, s.phone_number, s.academic_year,
    GROUP_CONCAT(sp.specialization ORDER BY sp.specialization SEPARATOR '|') AS specializations
"""


def _to_student(row: dict) -> Student:
    raw = row.get("specializations") or ""
    return Student(
        student_id=int(row["student_id"]),
        roll_number=row["roll_number"],
        full_name=row["full_name"],
        course_id=str(row["course_id"]),
        sem_id=str(row["sem_id"]),
        section=row.get("section"),
        specializations=tuple(s for s in raw.split("|") if s),
        email=row.get("email"),
        phone_number=row.get("phone_number"),
        academic_year=row.get("academic_year"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, student_id: int) -> Optional[Student]:
        self._cur.execute(
            f"""
            SELECT {_STUDENT_COLUMNS}
            FROM students s
            LEFT JOIN student_specializations sp ON sp.student_id = s.student_id
            WHERE s.student_id=%s
            GROUP BY s.student_id
            """,
            (int(student_id),),
        )
        row = fetchone(self._cur)
        return _to_student(row) if row else None

    def exists(self, student_id: int, student_filter: StudentFilter) -> bool:
        clauses, params = student_filter.sql_clauses("s")
        where = " AND ".join(["s.student_id=%s"] + clauses)
        self._cur.execute(
            f"SELECT 1 AS found FROM students s WHERE {where} LIMIT 1",
            tuple([int(student_id)] + params),
        )
        return fetchone(self._cur) is not None

    def find_matching(self, course_id: str, sem_id: str, student_filter: StudentFilter) -> Sequence[Student]:
        clauses, params = student_filter.sql_clauses("s")
        where = " AND ".join(["s.course_id=%s", "s.sem_id=%s"] + clauses)
        self._cur.execute(
            f"""
            SELECT {_STUDENT_COLUMNS}
            FROM students s
            LEFT JOIN student_specializations sp ON sp.student_id = s.student_id
            WHERE {where}
            GROUP BY s.student_id
            """,
            tuple([str(course_id), str(sem_id)] + params),
        )
        students = [_to_student(r) for r in fetchall(self._cur)]
        students.sort(key=lambda s: roll_number_sort_key(s.roll_number))
        return students
