from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import optional_text
from ..core.exceptions import DomainError, ValidationError
from ..database.unit_of_work import UnitOfWorkFactory
from ..eligibility.calculator import evaluate, is_below
from .notifier import LowAttendanceNotice, Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceFigure:
    student_id: int
    attended: int
    total: int
    student_name: Optional[str] = None
    subject: Optional[str] = None


@dataclass(frozen=True)
class NotificationResult:
    sent: int
    failed: int
    total_processed: int


def _parse_figures(raw: Any) -> list[AttendanceFigure]:
    if not raw:
        raise ValidationError("attendanceSummary is required")

    figures: list[AttendanceFigure] = []
    for item in raw:
        if isinstance(item, AttendanceFigure):
            figures.append(item)
            continue
        try:
            figures.append(
                AttendanceFigure(
                    student_id=int(item.get("studentId", item.get("student_id"))),
                    attended=int(item.get("classesAttended", item.get("attended", 0))),
                    total=int(item.get("totalClasses", item.get("total", 0))),
                    student_name=item.get("studentName"),
                    subject=item.get("subject") or item.get("subjectCode"),
                )
            )
        except (AttributeError, TypeError, ValueError):
            raise ValidationError("attendanceSummary entries need studentId, classesAttended and totalClasses")
    return figures


class LowAttendanceService:
    """Finds students below a threshold and hands a notice per student to a ``Notifier``.

    A failure for one student (no email on file, delivery error) is counted
    and does not stop the others.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, notifier: Notifier, *, default_threshold: float = 75.0):
        self._uow_factory = uow_factory
        self._notifier = notifier
        self._default_threshold = float(default_threshold)

    def notify(self, *, records: Any, threshold: Any = None, subject_name: Any = None) -> NotificationResult:
        figures = _parse_figures(records)
        try:
            limit = float(threshold) if threshold not in (None, "") else self._default_threshold
        except (TypeError, ValueError):
            raise ValidationError("threshold must be a number")
        if limit <= 0 or limit > 100:
            raise ValidationError("threshold must be between 0 and 100")

        subject = optional_text(subject_name) or figures[0].subject or ""
        below = [f for f in figures if f.total > 0 and is_below(f.attended, f.total, limit)]
        if not below:
            return NotificationResult(sent=0, failed=0, total_processed=0)

        sent = failed = 0
        with self._uow_factory() as uow:
            for figure in below:
                student = uow.students.get_by_id(figure.student_id)
                if student is None or not student.email:
                    logger.info("No email found for student %s", figure.student_id)
                    failed += 1
                    continue

                try:
                    result = evaluate(figure.attended, figure.total, limit)
                    self._notifier.send(
                        LowAttendanceNotice(
                            email=student.email,
                            student_name=student.full_name,
                            roll_number=student.roll_number,
                            subject=figure.subject or subject,
                            percentage=result.percentage,
                            threshold=limit,
                            gap=result.gap,
                            attended=figure.attended,
                            total=figure.total,
                            classes_needed=result.classes_needed,
                        )
                    )
                    sent += 1
                except DomainError as exc:
                    logger.warning("Skipping notice for student %s: %s", figure.student_id, exc)
                    failed += 1
                except Exception:
                    logger.exception("Error sending notification to student %s", figure.student_id)
                    failed += 1

        return NotificationResult(sent=sent, failed=failed, total_processed=len(below))
