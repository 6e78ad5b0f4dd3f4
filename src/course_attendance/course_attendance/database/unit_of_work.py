from __future__ import annotations

import logging
from typing import Callable, Protocol

import mysql.connector

from ..attendance.mysql_attendance_repository import MySQLAttendanceLogRepository
from ..attendance.mysql_summary_repository import MySQLAttendanceSummaryRepository
from ..attendance.repository import AttendanceLogRepository, AttendanceSummaryRepository
from ..core.exceptions import TransactionError
from ..courses.mysql_course_repository import MySQLCourseRepository
from ..courses.repository import CourseRepository
from ..students.mysql_student_repository import MySQLStudentRepository
from ..students.repository import StudentRepository
from .connection import DatabaseConnection
from .mysql_base import storage_errors

logger = logging.getLogger(__name__)


class UnitOfWork(Protocol):
    """One atomic transaction over the record, summary and roster stores.

    Used as a context manager. Leaving the block without ``commit()`` (or
    with an exception) rolls everything back.
    """

    students: StudentRepository
    courses: CourseRepository
    logs: AttendanceLogRepository
    summaries: AttendanceSummaryRepository

    def __enter__(self) -> "UnitOfWork":
        raise NotImplementedError

    def __exit__(self, exc_type, exc, tb) -> None:
        raise NotImplementedError

    def commit(self) -> None:
        raise NotImplementedError

    def rollback(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], UnitOfWork]


class MySQLUnitOfWork:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._conn = None
        self._cur = None
        self._committed = False

    def __enter__(self) -> "MySQLUnitOfWork":
        try:
            with storage_errors("opening transaction"):
                self._conn = self._conn_factory.connect()
                self._conn.start_transaction()
                self._cur = self._conn.cursor(dictionary=True)
        except TransactionError:
            # __exit__ does not run when __enter__ raises
            self._close()
            raise

        self._committed = False
        self.students = MySQLStudentRepository(self._cur)
        self.courses = MySQLCourseRepository(self._cur)
        self.logs = MySQLAttendanceLogRepository(self._cur)
        self.summaries = MySQLAttendanceSummaryRepository(self._cur)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                if exc_type is not None:
                    logger.warning("Rolling back transaction after %s: %s", exc_type.__name__, exc)
                self.rollback()
        finally:
            self._close()

        if isinstance(exc, mysql.connector.Error):
            raise TransactionError(f"storage failure: {exc}") from exc

    def commit(self) -> None:
        with storage_errors("commit"):
            self._conn.commit()
        self._committed = True

    def rollback(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.rollback()
        except mysql.connector.Error:
            logger.exception("Rollback failed")

    def _close(self) -> None:
        cur, conn = self._cur, self._conn
        self._cur = self._conn = None
        try:
            if cur is not None:
                cur.close()
        finally:
            if conn is not None:
                conn.close()


def mysql_unit_of_work_factory(conn_factory: DatabaseConnection) -> UnitOfWorkFactory:
    def factory() -> MySQLUnitOfWork:
        return MySQLUnitOfWork(conn_factory)

    return factory
