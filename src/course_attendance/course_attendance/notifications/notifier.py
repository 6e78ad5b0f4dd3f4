from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LowAttendanceNotice:
    """Everything a delivery channel needs to warn one student."""

    email: str
    student_name: str
    roll_number: str
    subject: str
    percentage: float
    threshold: float
    gap: float
    attended: int
    total: int
    classes_needed: int

    @property
    def subject_line(self) -> str:
        return f"IMPORTANT: Low Attendance Warning for {self.subject}"

    def body(self) -> str:
        return (
            f"Dear {self.student_name} (Roll No: {self.roll_number}),\n\n"
            f"Your attendance in {self.subject} is {self.percentage:.2f}% "
            f"({self.attended} out of {self.total} classes), below the required {self.threshold:g}%.\n"
            f"Gap to minimum requirement: {self.gap:.2f}%.\n"
            f"Classes you need to attend consecutively: {self.classes_needed}.\n"
        )


class Notifier(Protocol):
    """Delivery channel (mail, SMS, ...). Raises on delivery failure."""

    def send(self, notice: LowAttendanceNotice) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default channel: records the notice in the application log."""

    def __init__(self, name: Optional[str] = None):
        self._logger = logging.getLogger(name) if name else logger

    def send(self, notice: LowAttendanceNotice) -> None:
        self._logger.info(
            "Low attendance notice to %s <%s>: %s %.2f%% (needs %s classes)",
            notice.student_name,
            notice.email,
            notice.subject,
            notice.percentage,
            notice.classes_needed,
        )
