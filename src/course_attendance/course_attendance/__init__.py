"""Course Attendance package.

This package is organized by feature modules (students, courses, attendance,
eligibility, reports, notifications) with a thin Flask controller layer over
service/repository layers. Every write goes through an explicit unit of work.
"""
