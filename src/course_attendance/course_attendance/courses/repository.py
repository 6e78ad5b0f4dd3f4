from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Subject


class CourseRepository(Protocol):
    """Course/Subject directory. Course ids are opaque keys to the attendance core."""

    def get_by_id(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError

    def get_by_name(self, course_name: str) -> Optional[Course]:
        raise NotImplementedError

    def list_subjects(
        self,
        *,
        course_id: Optional[str] = None,
        sem_id: Optional[str] = None,
        specialization: Optional[str] = None,
    ) -> Sequence[Subject]:
        raise NotImplementedError
