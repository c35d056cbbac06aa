"""
Academy Pydantic Schemas

Typed report filters and the report objects built from them.
"""

from .filters import (
    AGE_GROUPS,
    GRADE_BANDS,
    AttendanceFilters,
    DateWindowFilters,
    ExamFilters,
    FinanceFilters,
    StudentFilters,
)
from .reports import (
    AttendanceReport,
    Demographics,
    EnrollmentStats,
    ExamDifficulty,
    ExamReport,
    FinanceOverview,
    FinanceReport,
    FinanceTrends,
    InvoiceAnalysis,
    MonthlyCount,
    MonthlyRevenue,
    PaymentAnalysis,
    PerformanceStats,
    RecentPayment,
    ReportWindow,
    StudentAttendanceRate,
    StudentAttendanceStats,
    StudentPerformance,
    StudentReport,
    SubjectAttendance,
    SubjectGrades,
    SubjectPerformance,
    WeeklyAttendance,
)

__all__ = [
    # Filters
    "AGE_GROUPS",
    "GRADE_BANDS",
    "DateWindowFilters",
    "AttendanceFilters",
    "ExamFilters",
    "FinanceFilters",
    "StudentFilters",
    # Reports
    "ReportWindow",
    "AttendanceReport",
    "StudentAttendanceRate",
    "ExamReport",
    "ExamDifficulty",
    "StudentPerformance",
    "SubjectPerformance",
    "FinanceReport",
    "FinanceOverview",
    "FinanceTrends",
    "InvoiceAnalysis",
    "MonthlyRevenue",
    "PaymentAnalysis",
    "RecentPayment",
    "StudentReport",
    "Demographics",
    "EnrollmentStats",
    "MonthlyCount",
    "PerformanceStats",
    "StudentAttendanceStats",
    "SubjectAttendance",
    "SubjectGrades",
    "WeeklyAttendance",
]
