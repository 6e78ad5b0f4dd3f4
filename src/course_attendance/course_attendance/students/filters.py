from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.validators import optional_text
from .model import Student


@dataclass(frozen=True)
class StudentFilter:
    """Optional specialization/section constraints on a roster lookup.

    Blank strings are treated as "no constraint", so a form posting
    ``section=""`` matches every section.
    """

    specialization: Optional[str] = None
    section: Optional[str] = None

    @classmethod
    def of(cls, *, specialization=None, section=None) -> "StudentFilter":
        return cls(specialization=optional_text(specialization), section=optional_text(section))

    @property
    def is_empty(self) -> bool:
        return self.specialization is None and self.section is None

    def matches(self, student: Student) -> bool:
        if self.specialization is not None and self.specialization not in student.specializations:
            return False
        if self.section is not None and student.section != self.section:
            return False
        return True

    def sql_clauses(self, alias: str = "s") -> tuple[list[str], list[object]]:
        clauses: list[str] = []
        params: list[object] = []
        if self.specialization is not None:
            clauses.append(
                f"EXISTS (SELECT 1 FROM student_specializations sp "
                f"WHERE sp.student_id={alias}.student_id AND sp.specialization=%s)"
            )
            params.append(self.specialization)
        if self.section is not None:
            clauses.append(f"{alias}.section=%s")
            params.append(self.section)
        return clauses, params
