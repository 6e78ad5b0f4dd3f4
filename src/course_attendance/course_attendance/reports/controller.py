from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.responses import api_errors, json_body
from ..container import Container
from .service import CourseReport, SemesterReport

REPORT_FIELDS = [
    "rollNumber",
    "studentName",
    "section",
    "specializations",
    "subjectCode",
    "classesAttended",
    "totalClasses",
    "attendancePercentage",
]

SEMESTER_FIELDS = [
    "rollNumber",
    "studentName",
    "subjectCode",
    "subjectName",
    "present",
    "total",
    "percentage",
    "status",
]


def _row_json(r) -> dict:
    return {
        "studentId": r.student_id,
        "studentName": r.student_name,
        "rollNumber": r.roll_number,
        "courseId": r.course_id,
        "semId": r.sem_id,
        "specializations": list(r.specializations),
        "section": r.section,
        "subjectCode": r.subject_code,
        "academicYear": r.academic_year,
        "classesAttended": r.classes_attended,
        "totalClasses": r.total_classes,
        "attendancePercentage": r.attendance_percentage,
    }


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _build(params) -> CourseReport:
        return reports.course_report(
            course_id=params.get("courseId") or params.get("course"),
            sem_id=params.get("semId") or params.get("semester"),
            subject_code=params.get("subjectCode") or params.get("subject"),
            academic_year=params.get("academicYear"),
            specialization=params.get("specialization"),
            section=params.get("section"),
            start_date=params.get("startDate"),
            end_date=params.get("endDate"),
        )

    def _write_report_csv(*, report: CourseReport, filename: str):
        """Write report rows to a CSV download."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in report.rows:
            data = _row_json(row)
            data["specializations"] = ", ".join(row.specializations)
            writer.writerow(data)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/attendance/report", methods=["POST"], endpoint="attendance_report")
    @api_errors
    def course_report():
        report = _build(json_body())
        return jsonify(
            {
                "students": [_row_json(r) for r in report.rows],
                "totalStudents": report.total_students,
                "filters": report.filters,
            }
        ), 200

    @app.route("/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    @api_errors
    def course_report_csv():
        report = _build(request.args)
        f = report.filters
        filename = f"attendance_{f['courseId']}_{f['semId']}_{f['subjectCode']}.csv"
        return _write_report_csv(report=report, filename=filename)

    def _semester(params) -> SemesterReport:
        return reports.course_semester_report(
            course_id=params.get("courseId") or params.get("course"),
            sem_id=params.get("semId") or params.get("semester"),
            debar_percentage=params.get("debarPercentage"),
            academic_year=params.get("academicYear"),
            specialization=params.get("specialization"),
            section=params.get("section"),
            start_date=params.get("startDate"),
            end_date=params.get("endDate"),
        )

    @app.route("/reports/course-semester", methods=["POST"], endpoint="reports_course_semester")
    @api_errors
    def course_semester_report():
        report = _semester(json_body())
        return jsonify(
            {
                "courseName": report.course_name,
                "debarPercentage": report.debar_percentage,
                "subjects": [{"subjectCode": s.subject_code, "subjectName": s.subject_name} for s in report.subjects],
                "students": [
                    {
                        "studentId": row.student_id,
                        "studentName": row.student_name,
                        "rollNumber": row.roll_number,
                        "debarredSubjects": row.debarred_subjects,
                        "subjects": [
                            {
                                "subjectCode": s.subject_code,
                                "present": s.attended,
                                "total": s.total,
                                "percentage": s.percentage,
                                "status": s.status,
                            }
                            for s in row.subjects
                        ],
                    }
                    for row in report.rows
                ],
                "totalStudents": report.total_students,
                "filters": report.filters,
            }
        ), 200

    @app.route("/reports/course-semester.csv", methods=["GET"], endpoint="reports_course_semester_csv")
    @api_errors
    def course_semester_report_csv():
        report = _semester(request.args)
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=SEMESTER_FIELDS)
        writer.writeheader()
        for row in report.rows:
            for s in row.subjects:
                writer.writerow(
                    {
                        "rollNumber": row.roll_number,
                        "studentName": row.student_name,
                        "subjectCode": s.subject_code,
                        "subjectName": s.subject_name,
                        "present": s.attended,
                        "total": s.total,
                        "percentage": s.percentage,
                        "status": s.status,
                    }
                )

        f = report.filters
        filename = f"attendance_{f['courseId']}_{f['semId']}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/attendance/summaries", methods=["GET"], endpoint="attendance_summaries")
    @api_errors
    def summaries():
        rows = reports.list_summaries(
            course_id=request.args.get("courseId"),
            sem_id=request.args.get("semId"),
            subject_code=request.args.get("subjectCode"),
            academic_year=request.args.get("academicYear"),
        )
        return jsonify(
            [
                {
                    "studentId": s.key.student_id,
                    "academicYear": s.key.academic_year,
                    "totalClasses": s.total_classes,
                    "attendedClasses": s.attended_classes,
                    "attendancePercentage": s.attendance_percentage,
                    "lastUpdated": s.last_updated.isoformat(),
                }
                for s in rows
            ]
        ), 200

    @app.route("/reports/unmarked", methods=["GET"], endpoint="reports_unmarked")
    @api_errors
    def unmarked():
        report = reports.unmarked_report(
            course_id=request.args.get("courseId"),
            sem_id=request.args.get("semId"),
        )
        return jsonify(
            {
                "subjects": [
                    {
                        "courseId": s.course_id,
                        "semId": s.sem_id,
                        "subjectCode": s.subject_code,
                        "subjectName": s.subject_name,
                        "specialization": s.specialization,
                        "semesterType": s.semester_type,
                        "year": s.year,
                    }
                    for s in report.unmarked
                ],
                "totalUnmarked": report.subjects_without_attendance,
                "overallSummary": {
                    "totalSubjects": report.total_subjects,
                    "subjectsWithAttendance": report.subjects_with_attendance,
                    "subjectsWithoutAttendance": report.subjects_without_attendance,
                    "completionPercentage": report.completion_percentage,
                },
                "byCourse": [
                    {
                        "courseId": c.course_id,
                        "semId": c.sem_id,
                        "totalSubjects": c.total_subjects,
                        "unmarkedSubjects": c.unmarked_subjects,
                    }
                    for c in report.by_course
                ],
            }
        ), 200
