from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.responses import api_errors, json_body
from ..container import Container


def _student_json(s) -> dict:
    return {
        "studentId": s.student_id,
        "rollNumber": s.roll_number,
        "fullName": s.full_name,
        "courseId": s.course_id,
        "semId": s.sem_id,
        "section": s.section or "",
        "specializations": list(s.specializations),
        "email": s.email,
        "academicYear": s.academic_year,
    }


def _summary_json(summary) -> dict:
    return {
        "studentId": summary.key.student_id,
        "courseId": summary.key.course_id,
        "semId": summary.key.sem_id,
        "subjectCode": summary.key.subject_code,
        "academicYear": summary.key.academic_year,
        "totalClasses": summary.total_classes,
        "attendedClasses": summary.attended_classes,
        "attendancePercentage": summary.attendance_percentage,
        "lastUpdated": summary.last_updated.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/attendance/students", methods=["POST"], endpoint="attendance_students")
    @api_errors
    def students():
        data = json_body()
        rows = svc.list_students(
            course_id=data.get("courseId"),
            course_name=data.get("className") or data.get("courseName"),
            sem_id=data.get("semId") or data.get("semester_id"),
            specialization=data.get("specialization"),
            section=data.get("section"),
        )
        return jsonify([_student_json(s) for s in rows]), 200

    @app.route("/attendance/subjects", methods=["POST"], endpoint="attendance_subjects")
    @api_errors
    def subjects():
        data = json_body()
        rows = svc.list_subjects(
            course_name=data.get("course") or data.get("courseName"),
            sem_id=data.get("semester") or data.get("semId"),
            specialization=data.get("specialization"),
        )
        return jsonify(
            [
                {
                    "subjectCode": s.subject_code,
                    "subjectName": s.subject_name,
                    "courseId": s.course_id,
                    "semId": s.sem_id,
                    "specialization": s.specialization,
                    "semesterType": s.semester_type,
                    "year": s.year,
                }
                for s in rows
            ]
        ), 200

    @app.route("/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @api_errors
    def mark():
        data = json_body()
        result = svc.submit_attendance(
            course_id=data.get("courseId"),
            course_name=data.get("courseName"),
            sem_id=data.get("semId"),
            subject_code=data.get("subjectCode"),
            date=data.get("date"),
            academic_year=data.get("academicYear"),
            entries=data.get("entries", data.get("attendance")),
            specialization=data.get("specialization"),
            section=data.get("section"),
        )
        return jsonify(
            {
                "message": "Attendance submitted successfully",
                "accepted": result.accepted,
                "skipped": result.skipped,
                "createdSummaries": result.created_summaries,
                "updatedSummaries": result.updated_summaries,
            }
        ), 201

    @app.route("/attendance/delete", methods=["POST"], endpoint="attendance_delete")
    @api_errors
    def delete_day():
        data = json_body()
        result = svc.delete_attendance_for_date(
            course_id=data.get("courseId"),
            sem_id=data.get("semId"),
            subject_code=data.get("subjectCode"),
            date=data.get("date"),
            specialization=data.get("specialization"),
            section=data.get("section"),
        )
        return jsonify(
            {
                "message": "Attendance deleted successfully",
                "deletedRecords": result.deleted_records,
                "deletedLogs": result.deleted_logs,
                "updatedSummaries": result.updated_summaries,
                "deletedSummaries": result.deleted_summaries,
                "skipped": result.skipped,
            }
        ), 200

    @app.route("/attendance/merge", methods=["POST"], endpoint="attendance_merge")
    @api_errors
    def merge_day():
        data = json_body()
        result = svc.merge_attendance_for_date(
            course_id=data.get("courseId"),
            sem_id=data.get("semId"),
            subject_code=data.get("subjectCode"),
            date=data.get("date"),
            final_count=data.get("finalCount"),
            specialization=data.get("specialization"),
            section=data.get("section"),
        )
        return jsonify(
            {
                "message": "Attendance merged successfully",
                "processedStudents": result.processed_students,
                "updatedSummaries": result.updated_summaries,
                "deletedSummaries": result.deleted_summaries,
                "skipped": result.skipped,
                "mergeStatistics": {
                    "totalRecordsRemoved": result.records_removed,
                    "presentRecordsKept": result.present_kept,
                    "absentRecordsKept": result.absent_kept,
                },
            }
        ), 200

    @app.route("/attendance/summary/<int:student_id>/<subject_code>", methods=["GET"], endpoint="attendance_summary")
    @api_errors
    def summary(student_id: int, subject_code: str):
        found = svc.get_summary(
            student_id=student_id,
            subject_code=subject_code,
            course_id=request.args.get("courseId"),
            sem_id=request.args.get("semId"),
            academic_year=request.args.get("academicYear"),
        )
        return jsonify(_summary_json(found)), 200

    @app.route("/attendance/detail/<int:student_id>/<subject_code>", methods=["GET"], endpoint="attendance_detail")
    @api_errors
    def detail(student_id: int, subject_code: str):
        entries = svc.get_detail(
            student_id=student_id,
            subject_code=subject_code.strip(),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        return jsonify([{"date": e.day.isoformat(), "present": e.present} for e in entries]), 200

    @app.route("/attendance/notifications/low-attendance", methods=["POST"], endpoint="attendance_low_notifications")
    @api_errors
    def low_attendance():
        data = json_body()
        result = container.low_attendance_service.notify(
            records=data.get("attendanceSummary"),
            threshold=data.get("threshold"),
            subject_name=data.get("subjectName"),
        )
        message = "Notifications processed" if result.total_processed else "No students found below the threshold"
        return jsonify(
            {
                "message": message,
                "sentCount": result.sent,
                "failedCount": result.failed,
                "totalProcessed": result.total_processed,
            }
        ), 200
