"""Example: use the service layer directly (no Flask).

Prints the course report for one subject and, for every student below the
configured threshold, how many consecutive classes they still need.
"""

from config import load_settings

from src.course_attendance.course_attendance.container import build_container
from src.course_attendance.course_attendance.eligibility.calculator import evaluate


def main():
    settings = load_settings()
    container = build_container(db_config=settings.DB_CONFIG, threshold=settings.ATTENDANCE_THRESHOLD)
    report = container.report_service.course_report(course_id="BCA", sem_id="1", subject_code="CS101")
    for row in report.rows:
        print(f"{row.roll_number:<14} {row.classes_attended:>3}/{row.total_classes:<3} {row.attendance_percentage}%")
        if row.total_classes:
            result = evaluate(row.classes_attended, row.total_classes, settings.ATTENDANCE_THRESHOLD)
            if not result.eligible:
                print(f"    needs {result.classes_needed} more class(es), gap {result.gap}%")


if __name__ == "__main__":
    main()
