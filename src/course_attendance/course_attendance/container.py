from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.reconciliation import ReconciliationEngine
from .attendance.service import AttendanceService
from .attendance.writer import AttendanceWriter
from .core.constants import DEFAULT_ACADEMIC_YEAR_START_MONTH, DEFAULT_ATTENDANCE_THRESHOLD
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import UnitOfWorkFactory, mysql_unit_of_work_factory
from .notifications.notifier import LoggingNotifier, Notifier
from .notifications.service import LowAttendanceService
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    uow_factory: UnitOfWorkFactory

    attendance_service: AttendanceService
    report_service: AttendanceReportService
    low_attendance_service: LowAttendanceService


def build_services(
    uow_factory: UnitOfWorkFactory,
    *,
    notifier: Optional[Notifier] = None,
    threshold: float = DEFAULT_ATTENDANCE_THRESHOLD,
    academic_year_start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH,
) -> Container:
    attendance_service = AttendanceService(
        uow_factory,
        writer=AttendanceWriter(),
        reconciliation=ReconciliationEngine(),
        academic_year_start_month=academic_year_start_month,
    )
    report_service = AttendanceReportService(
        uow_factory,
        academic_year_start_month=academic_year_start_month,
        debar_percentage=threshold,
    )
    low_attendance_service = LowAttendanceService(
        uow_factory,
        notifier or LoggingNotifier(),
        default_threshold=threshold,
    )

    return Container(
        uow_factory=uow_factory,
        attendance_service=attendance_service,
        report_service=report_service,
        low_attendance_service=low_attendance_service,
    )


def build_container(
    *,
    db_config: dict,
    notifier: Optional[Notifier] = None,
    threshold: float = DEFAULT_ATTENDANCE_THRESHOLD,
    academic_year_start_month: int = DEFAULT_ACADEMIC_YEAR_START_MONTH,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        mysql_unit_of_work_factory(conn),
        notifier=notifier,
        threshold=threshold,
        academic_year_start_month=academic_year_start_month,
    )
