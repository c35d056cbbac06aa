"""
Attendance Report

Attendance records filtered by academic year, curriculum, subject, teacher,
student, status and session date, summarized into status counts, the
attended rate (present + late), per-subject/day/teacher breakdowns and a
per-student ranking.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.models import (
    ATTENDANCE_STATUSES,
    ATTENDED_STATUSES,
    Attendance,
    ChildProfile,
    ClassSession,
    ProgramEnrollment,
    Subject,
)
from academy.core.schemas.reports import AttendanceReport, StudentAttendanceRate
from academy.reporting.aggregation import (
    UNKNOWN,
    breakdown_with_subcounts,
    count_by,
    group_by,
    rate,
    related,
    top_n,
)
from academy.reporting.date_ranges import resolve_window
from academy.reporting.filters import WINDOW, FilterComposer, filter_values, within_window

from .base import chronological, log_report, report_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academy.core.schemas.filters import AttendanceFilters
    from academy.reporting.clock import Clock

attendance_filters = FilterComposer("attendance")


@attendance_filters.register("academic_year_id")
def _by_academic_year(value: Any) -> Any:
    # Attendance has no year of its own; go through the student's enrollments
    return Attendance.child_profile.has(
        ChildProfile.program_enrollments.any(ProgramEnrollment.academic_year_id == value)
    )


@attendance_filters.register("curriculum_id")
def _by_curriculum(value: Any) -> Any:
    return or_(
        Attendance.session.has(ClassSession.subject.has(Subject.curriculum_id == value)),
        Attendance.child_profile.has(
            ChildProfile.program_enrollments.any(ProgramEnrollment.curriculum_id == value)
        ),
    )


@attendance_filters.register("subject_id")
def _by_subject(value: Any) -> Any:
    return Attendance.session.has(ClassSession.subject_id == value)


@attendance_filters.register("teacher_id")
def _by_teacher(value: Any) -> Any:
    return Attendance.session.has(ClassSession.teacher_profile_id == value)


@attendance_filters.register("student_id")
def _by_student(value: Any) -> Any:
    return Attendance.child_profile_id == value


@attendance_filters.register("status")
def _by_status(value: Any) -> Any:
    return Attendance.status == value


@attendance_filters.register(WINDOW)
def _by_session_date(value: Any) -> Any:
    return Attendance.session.has(within_window(ClassSession.start_time, value, datetimes=True))


# Fail-soft classifiers: a missing session/subject/teacher/student maps to "Unknown"
subject_name = related("session", "subject", "name")
teacher_name = related("session", "teacher_profile", "name")
student_name = related("child_profile", "full_name")
status_of = related("status")


def session_day(record: Attendance) -> str:
    start = related("session", "start_time", default=None)(record)
    return start.strftime("%Y-%m-%d") if start else UNKNOWN


def is_attended(record: Attendance) -> bool:
    return record.status in ATTENDED_STATUSES


def summarize_attendance(
    records: Sequence[Attendance], precision: int = settings.RATE_PRECISION
) -> AttendanceReport:
    """Aggregate already-filtered attendance records."""
    by_status = count_by(records, status_of)
    total = len(records)
    attended = sum(1 for record in records if is_attended(record))

    student_rates = []
    for student_id, student_records in group_by(records, related("child_profile_id")).items():
        present = sum(1 for record in student_records if is_attended(record))
        student_rates.append(
            StudentAttendanceRate(
                student_id=student_id if student_id != UNKNOWN else None,
                student_name=student_name(student_records[0]),
                total_sessions=len(student_records),
                present_sessions=present,
                attendance_rate=rate(present, len(student_records), precision),
            )
        )

    return AttendanceReport(
        total_attendances=total,
        present_count=by_status.get("present", 0),
        absent_count=by_status.get("absent", 0),
        late_count=by_status.get("late", 0),
        excused_count=by_status.get("excused", 0),
        attendance_rate=rate(attended, total, precision),
        subject_breakdown=breakdown_with_subcounts(
            records, subject_name, status_of, statuses=ATTENDANCE_STATUSES
        ),
        daily_breakdown=chronological(
            breakdown_with_subcounts(records, session_day, status_of, statuses=ATTENDANCE_STATUSES)
        ),
        teacher_breakdown=breakdown_with_subcounts(
            records, teacher_name, status_of, statuses=ATTENDANCE_STATUSES
        ),
        student_attendance_rates=top_n(student_rates, lambda row: row.attendance_rate),
    )


async def fetch_attendance(
    db: AsyncSession, values: dict[str, Any]
) -> Sequence[Attendance]:
    stmt = (
        select(Attendance)
        .options(
            selectinload(Attendance.session).selectinload(ClassSession.subject),
            selectinload(Attendance.session).selectinload(ClassSession.teacher_profile),
            selectinload(Attendance.child_profile),
        )
        .order_by(Attendance.created_at, Attendance.id)
    )
    result = await db.execute(attendance_filters.apply(stmt, values))
    return result.scalars().all()


async def build_attendance_report(
    db: AsyncSession, filters: AttendanceFilters, clock: Clock
) -> AttendanceReport:
    """Filter, fetch and summarize attendance records.

    Raises:
        ConfigurationError: If the custom date range is inverted
    """
    window = await resolve_window(db, filters, clock)
    records = await fetch_attendance(db, filter_values(filters, window))

    report = summarize_attendance(records)
    report.filters = filters.as_query_params()
    report.window = report_window(window)
    log_report("attendance", filters, len(records))
    return report
