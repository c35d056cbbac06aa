"""
Reports API Endpoints

Read-only statistics for the admin dashboard. Every filter travels in the
query string (camelCase names), so a report view can be bookmarked.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.database import get_db
from academy.core.schemas import (
    AttendanceFilters,
    AttendanceReport,
    ExamFilters,
    ExamReport,
    FinanceFilters,
    FinanceReport,
    StudentFilters,
    StudentReport,
)
from academy.core.validation import ConfigurationError
from academy.reporting.clock import Clock, get_clock
from academy.reporting.reports import (
    build_attendance_report,
    build_exam_report,
    build_finance_report,
    build_student_report,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Filter dependencies: unknown or malformed query values are dropped, never rejected
def attendance_filters(request: Request) -> AttendanceFilters:
    return AttendanceFilters.model_validate(dict(request.query_params))


def exam_filters(request: Request) -> ExamFilters:
    return ExamFilters.model_validate(dict(request.query_params))


def finance_filters(request: Request) -> FinanceFilters:
    return FinanceFilters.model_validate(dict(request.query_params))


def student_filters(request: Request) -> StudentFilters:
    return StudentFilters.model_validate(dict(request.query_params))


def _bad_configuration(report: str, error: ConfigurationError) -> HTTPException:
    logger.warning(f"Rejected {report} report request: {error}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("/attendance", response_model=AttendanceReport)
async def attendance_report(
    filters: AttendanceFilters = Depends(attendance_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AttendanceReport:
    """Attendance counts, rate and breakdowns by subject, day, teacher and student."""
    try:
        return await build_attendance_report(db, filters, clock)
    except ConfigurationError as e:
        raise _bad_configuration("attendance", e) from e


@router.get("/exams", response_model=ExamReport)
async def exam_report(
    filters: ExamFilters = Depends(exam_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ExamReport:
    """Score statistics, grade distribution and subject/student/exam performance."""
    try:
        return await build_exam_report(db, filters, clock)
    except ConfigurationError as e:
        raise _bad_configuration("exam", e) from e


@router.get("/finances", response_model=FinanceReport)
async def finance_report(
    filters: FinanceFilters = Depends(finance_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> FinanceReport:
    """Revenue overview, payment and invoice analysis, curriculum revenue and trends."""
    try:
        return await build_finance_report(db, filters, clock)
    except ConfigurationError as e:
        raise _bad_configuration("finance", e) from e


@router.get("/students", response_model=StudentReport)
async def student_report(
    filters: StudentFilters = Depends(student_filters),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> StudentReport:
    """Enrollment, attendance, performance and demographics of the selected students."""
    try:
        return await build_student_report(db, filters, clock)
    except ConfigurationError as e:
        raise _bad_configuration("student", e) from e
