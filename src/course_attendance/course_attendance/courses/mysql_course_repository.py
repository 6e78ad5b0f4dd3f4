from __future__ import annotations

from typing import Optional, Sequence

from ..database.mysql_base import fetchall, fetchone
from .model import Course, Subject
from .repository import CourseRepository


def _to_course(row: dict) -> Course:
    return Course(
        course_id=str(row["course_id"]),
        course_name=row["course_name"],
        no_of_sem=int(row["no_of_sem"]),
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, course_id: str) -> Optional[Course]:
        self._cur.execute(
            "SELECT course_id, course_name, no_of_sem FROM courses WHERE course_id=%s",
            (str(course_id),),
        )
        row = fetchone(self._cur)
        return _to_course(row) if row else None

    def get_by_name(self, course_name: str) -> Optional[Course]:
        self._cur.execute(
            "SELECT course_id, course_name, no_of_sem FROM courses WHERE course_name=%s",
            (course_name,),
        )
        row = fetchone(self._cur)
        return _to_course(row) if row else None

    def list_subjects(
        self,
        *,
        course_id: Optional[str] = None,
        sem_id: Optional[str] = None,
        specialization: Optional[str] = None,
    ) -> Sequence[Subject]:
        clauses = ["1=1"]
        params: list[object] = []

        if course_id is not None:
            clauses.append("course_id=%s")
            params.append(str(course_id))
        if sem_id is not None:
            clauses.append("sem_id=%s")
            params.append(str(sem_id))
        if specialization is not None:
            clauses.append("specialization=%s")
            params.append(specialization)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT subject_code, subject_name, course_id, sem_id, specialization, semester_type, year
            FROM subjects
            WHERE {where}
            ORDER BY course_id, sem_id, subject_code
            """,
            tuple(params),
        )
        return [
            Subject(
                subject_code=r["subject_code"],
                subject_name=r["subject_name"],
                course_id=str(r["course_id"]),
                sem_id=str(r["sem_id"]),
                specialization=r.get("specialization"),
                semester_type=r["semester_type"],
                year=str(r["year"]),
            )
            for r in fetchall(self._cur)
        ]
