"""
Report adapters: per-domain filter registrations and summaries on top of the
generic reporting engine.
"""

from .attendance import attendance_filters, build_attendance_report, summarize_attendance
from .exams import build_exam_report, exam_filters, summarize_exams
from .finance import build_finance_report, invoice_filters, payment_filters, summarize_finance
from .students import (
    build_student_report,
    enrollment_filters,
    profile_filters,
    summarize_students,
)

__all__ = [
    "attendance_filters",
    "build_attendance_report",
    "summarize_attendance",
    "exam_filters",
    "build_exam_report",
    "summarize_exams",
    "payment_filters",
    "invoice_filters",
    "build_finance_report",
    "summarize_finance",
    "profile_filters",
    "enrollment_filters",
    "build_student_report",
    "summarize_students",
]
