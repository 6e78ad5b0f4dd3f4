from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .filters import StudentFilter
from .model import Student


class StudentRepository(Protocol):
    """Roster provider.

    The attendance core only reads students; roster import lives outside it.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def exists(self, student_id: int, student_filter: StudentFilter) -> bool:
        raise NotImplementedError

    def find_matching(self, course_id: str, sem_id: str, student_filter: StudentFilter) -> Sequence[Student]:
        """Students of a course/semester, ordered by roll number."""

        raise NotImplementedError
