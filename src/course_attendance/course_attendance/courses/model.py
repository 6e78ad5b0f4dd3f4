from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_id: str
    course_name: str
    no_of_sem: int


@dataclass(frozen=True)
class Subject:
    subject_code: str
    subject_name: str
    course_id: str
    sem_id: str
    semester_type: str
    year: str
    specialization: Optional[str] = None
