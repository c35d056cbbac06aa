"""
Student Report

Enrollment, attendance, academic performance and demographics for the
student population selected by academic year, curriculum, gender and age
group. The date range narrows enrollments (by creation date), attendance
(by session date) and exam results (by exam date); demographics always
describe the whole selected population.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, select
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.models import (
    ATTENDANCE_STATUSES,
    ENROLLMENT_STATUSES,
    GENDERS,
    Attendance,
    ChildProfile,
    ClassSession,
    Exam,
    ExamResult,
    ProgramEnrollment,
)
from academy.core.schemas.filters import AGE_GROUPS
from academy.core.schemas.reports import (
    Demographics,
    EnrollmentStats,
    MonthlyCount,
    PerformanceStats,
    StudentAttendanceStats,
    StudentReport,
    SubjectAttendance,
    SubjectGrades,
    WeeklyAttendance,
)
from academy.reporting.aggregation import (
    UNKNOWN,
    breakdown_with_subcounts,
    count_by,
    distinct_count,
    grade_point_average,
    group_by,
    rate,
    related,
    top_n,
)
from academy.reporting.date_ranges import resolve_window
from academy.reporting.filters import WINDOW, FilterComposer, filter_values, within_window
from academy.reporting.money import growth_rate

from .attendance import attendance_filters, is_attended, subject_name, status_of
from .base import log_report, report_window
from .exams import exam_filters, grade_distribution, pass_rate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academy.core.schemas.filters import StudentFilters
    from academy.reporting.clock import Clock
    from academy.reporting.date_ranges import DateWindow

logger = logging.getLogger(__name__)

# ============================================================================
# Population filters
# ============================================================================

profile_filters = FilterComposer("student profiles")
enrollment_filters = FilterComposer("enrollments")


def years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def birth_date_bounds(age_group: str, today: date) -> tuple[date | None, date]:
    """(exclusive earliest, inclusive latest) birth date for an age group on `today`."""
    youngest, oldest = AGE_GROUPS[age_group]
    latest = years_before(today, youngest)
    earliest = years_before(today, oldest + 1) if oldest is not None else None
    return earliest, latest


def age_group_of(age: int | None) -> str:
    if age is None:
        return UNKNOWN
    for label, (youngest, oldest) in AGE_GROUPS.items():
        if age >= youngest and (oldest is None or age <= oldest):
            return label
    return UNKNOWN


@profile_filters.register("academic_year_id")
def _profile_academic_year(value: Any) -> Any:
    return ChildProfile.program_enrollments.any(ProgramEnrollment.academic_year_id == value)


@profile_filters.register("curriculum_id")
def _profile_curriculum(value: Any) -> Any:
    return ChildProfile.program_enrollments.any(ProgramEnrollment.curriculum_id == value)


@profile_filters.register("gender")
def _profile_gender(value: Any) -> Any:
    return ChildProfile.gender == value


@profile_filters.register("age_group")
def _profile_age_group(value: Any) -> Any:
    earliest, latest = value
    clauses = [ChildProfile.date_of_birth <= latest]
    if earliest is not None:
        clauses.append(ChildProfile.date_of_birth > earliest)
    return and_(*clauses)


def demographic_scope(relationship: Any, values: dict[str, Any]) -> list[Any]:
    """Gender/age predicates lifted onto a record's student relationship."""
    clauses = profile_filters.predicates(
        {"gender": values.get("gender"), "age_group": values.get("age_group")}
    )
    if not clauses:
        return []
    return [relationship.has(and_(*clauses))]


def population_scope(relationship: Any, values: dict[str, Any]) -> list[Any]:
    """All student filters lifted onto a record's student relationship."""
    clauses = profile_filters.predicates(values)
    if not clauses:
        return []
    return [relationship.has(and_(*clauses))]


@enrollment_filters.register("academic_year_id")
def _enrollment_academic_year(value: Any) -> Any:
    return ProgramEnrollment.academic_year_id == value


@enrollment_filters.register("curriculum_id")
def _enrollment_curriculum(value: Any) -> Any:
    return ProgramEnrollment.curriculum_id == value


@enrollment_filters.register(WINDOW)
def _enrollment_created(value: Any) -> Any:
    return within_window(ProgramEnrollment.created_at, value, datetimes=True, tz=UTC)


def student_values(filters: StudentFilters, window: DateWindow | None, today: date) -> dict:
    """Filter values with the age group replaced by its birth-date bounds."""
    values = filter_values(filters, window)
    if values.get("age_group"):
        values["age_group"] = birth_date_bounds(values["age_group"], today)
    return values


# ============================================================================
# Enrollment
# ============================================================================


def monthly_counts(
    records: Sequence[Any], date_key: Callable[[Any], date | datetime | None]
) -> list[MonthlyCount]:
    """Records per calendar month, oldest first; undated records are left out."""
    counts = count_by(
        (record for record in records if date_key(record) is not None),
        lambda record: f"{date_key(record):%Y-%m}",
    )
    return [
        MonthlyCount(
            month=month,
            label=datetime.strptime(month, "%Y-%m").strftime("%b %Y"),
            count=counts[month],
        )
        for month in sorted(counts)
    ]


def summarize_enrollment(
    enrollments: Sequence[ProgramEnrollment],
    previous_count: int | None = None,
    precision: int = settings.RATE_PRECISION,
) -> EnrollmentStats:
    by_status = dict.fromkeys(ENROLLMENT_STATUSES, 0)
    by_status.update(count_by(enrollments, related("status")))

    subject_enrollments = sum(len(enrollment.subject_enrollments) for enrollment in enrollments)
    students = distinct_count(enrollments, related("child_profile_id", default=None))

    return EnrollmentStats(
        total_enrollments=len(enrollments),
        by_status=by_status,
        by_curriculum=count_by(enrollments, related("curriculum", "name")),
        by_month=monthly_counts(enrollments, related("created_at", default=None)),
        previous_enrollments=previous_count,
        growth_rate=growth_rate(previous_count, len(enrollments), precision),
        total_subject_enrollments=subject_enrollments,
        avg_subjects_per_student=(
            round(subject_enrollments / students, precision) if students else 0.0
        ),
    )


# ============================================================================
# Attendance
# ============================================================================


def week_start(record: Attendance) -> date | None:
    start = related("session", "start_time", default=None)(record)
    if start is None:
        return None
    day = start.date()
    return day - timedelta(days=day.weekday())


def summarize_student_attendance(
    records: Sequence[Attendance],
    precision: int = settings.RATE_PRECISION,
    limit: int = settings.TOP_SUBJECTS_LIMIT,
) -> StudentAttendanceStats:
    by_status = dict.fromkeys(ATTENDANCE_STATUSES, 0)
    by_status.update(count_by(records, status_of))
    attended = sum(1 for record in records if is_attended(record))

    by_subject = []
    breakdown = breakdown_with_subcounts(
        records, subject_name, status_of, statuses=ATTENDANCE_STATUSES
    )
    for subject, cells in breakdown.items():
        by_subject.append(
            SubjectAttendance(
                subject=subject,
                total=cells["total"],
                present=cells["present"],
                absent=cells["absent"],
                late=cells["late"],
                excused=cells["excused"],
                attendance_rate=rate(cells["present"] + cells["late"], cells["total"], precision),
            )
        )

    weekly_trend = []
    weeks = group_by((record for record in records if week_start(record)), week_start)
    for week in sorted(weeks):
        week_records = weeks[week]
        weekly_trend.append(
            WeeklyAttendance(
                week_start=week,
                label=f"Week of {week:%b %d}",
                attendance_rate=rate(
                    sum(1 for record in week_records if is_attended(record)),
                    len(week_records),
                    precision,
                ),
            )
        )

    return StudentAttendanceStats(
        total_sessions=distinct_count(records, related("session_id", default=None)),
        total_attendance_records=len(records),
        attendance_rate=rate(attended, len(records), precision),
        by_status=by_status,
        by_subject=by_subject,
        highest_attendance_subjects=top_n(by_subject, lambda row: row.attendance_rate, n=limit),
        lowest_attendance_subjects=top_n(
            by_subject, lambda row: row.attendance_rate, n=limit, descending=False
        ),
        weekly_trend=weekly_trend,
    )


# ============================================================================
# Performance
# ============================================================================


def summarize_performance(
    results: Sequence[ExamResult],
    precision: int = settings.RATE_PRECISION,
    limit: int = settings.TOP_SUBJECTS_LIMIT,
) -> PerformanceStats:
    distribution = grade_distribution(results)

    by_subject = []
    for subject, subject_results in group_by(results, related("exam", "subject", "name")).items():
        grades = grade_distribution(subject_results)
        by_subject.append(
            SubjectGrades(
                subject=subject,
                grades=grades,
                average_gpa=grade_point_average(grades, precision),
                pass_rate=pass_rate(subject_results, precision),
            )
        )

    return PerformanceStats(
        total_results=len(results),
        overall_gpa=grade_point_average(distribution, precision),
        pass_rate=pass_rate(results, precision),
        grade_distribution=distribution,
        by_subject=by_subject,
        top_subjects=top_n(by_subject, lambda row: row.average_gpa, n=limit),
        subjects_needing_improvement=top_n(
            by_subject, lambda row: row.average_gpa, n=limit, descending=False
        ),
    )


# ============================================================================
# Demographics
# ============================================================================


def _matches(enrollment: ProgramEnrollment, values: dict[str, Any]) -> bool:
    year, curriculum = values.get("academic_year_id"), values.get("curriculum_id")
    return (year is None or enrollment.academic_year_id == year) and (
        curriculum is None or enrollment.curriculum_id == curriculum
    )


def summarize_demographics(
    profiles: Sequence[ChildProfile],
    today: date,
    values: dict[str, Any] | None = None,
    precision: int = settings.RATE_PRECISION,
) -> Demographics:
    """Gender, age group and curriculum make-up of a student population.

    A student enrolled in several curricula counts once in each of them.
    """
    values = values or {}
    total = len(profiles)

    gender = dict.fromkeys(GENDERS, 0)
    gender.update(count_by(profiles, related("gender")))

    age_groups = dict.fromkeys(AGE_GROUPS, 0)
    age_groups.update(count_by(profiles, lambda profile: age_group_of(profile.age_on(today))))

    by_curriculum: dict[str, int] = {}
    for profile in profiles:
        curricula = {
            related("curriculum", "name")(enrollment)
            for enrollment in profile.program_enrollments
            if _matches(enrollment, values)
        }
        for name in sorted(curricula):
            by_curriculum[name] = by_curriculum.get(name, 0) + 1

    largest = top_n(by_curriculum.items(), lambda item: item[1], n=1)

    return Demographics(
        total_students=total,
        gender=gender,
        gender_percentages={key: rate(count, total, precision) for key, count in gender.items()},
        age_groups=age_groups,
        by_curriculum=by_curriculum,
        largest_curriculum=largest[0][0] if largest else None,
    )


def summarize_students(
    profiles: Sequence[ChildProfile],
    enrollments: Sequence[ProgramEnrollment],
    attendances: Sequence[Attendance],
    results: Sequence[ExamResult],
    *,
    today: date,
    previous_enrollments: int | None = None,
    values: dict[str, Any] | None = None,
) -> StudentReport:
    """Aggregate the four sections of the student report."""
    return StudentReport(
        enrollment=summarize_enrollment(enrollments, previous_enrollments),
        attendance=summarize_student_attendance(attendances),
        performance=summarize_performance(results),
        demographics=summarize_demographics(profiles, today, values),
    )


# ============================================================================
# Queries
# ============================================================================


async def fetch_profiles(db: AsyncSession, values: dict[str, Any]) -> Sequence[ChildProfile]:
    stmt = (
        select(ChildProfile)
        .options(
            selectinload(ChildProfile.program_enrollments).selectinload(
                ProgramEnrollment.curriculum
            )
        )
        .order_by(ChildProfile.created_at, ChildProfile.id)
    )
    result = await db.execute(profile_filters.apply(stmt, values))
    return result.scalars().all()


async def fetch_enrollments(
    db: AsyncSession, values: dict[str, Any]
) -> Sequence[ProgramEnrollment]:
    stmt = (
        select(ProgramEnrollment)
        .options(
            selectinload(ProgramEnrollment.curriculum),
            selectinload(ProgramEnrollment.subject_enrollments),
        )
        .where(*demographic_scope(ProgramEnrollment.child_profile, values))
        .order_by(ProgramEnrollment.created_at, ProgramEnrollment.id)
    )
    result = await db.execute(enrollment_filters.apply(stmt, values))
    return result.scalars().all()


async def fetch_student_attendance(
    db: AsyncSession, values: dict[str, Any]
) -> Sequence[Attendance]:
    stmt = (
        select(Attendance)
        .options(selectinload(Attendance.session).selectinload(ClassSession.subject))
        .where(*population_scope(Attendance.child_profile, values))
        .order_by(Attendance.created_at, Attendance.id)
    )
    result = await db.execute(attendance_filters.apply(stmt, {WINDOW: values.get(WINDOW)}))
    return result.scalars().all()


async def fetch_student_results(db: AsyncSession, values: dict[str, Any]) -> Sequence[ExamResult]:
    stmt = (
        select(ExamResult)
        .options(selectinload(ExamResult.exam).selectinload(Exam.subject))
        .where(*population_scope(ExamResult.child_profile, values))
        .order_by(ExamResult.created_at, ExamResult.id)
    )
    result = await db.execute(exam_filters.apply(stmt, {WINDOW: values.get(WINDOW)}))
    return result.scalars().all()


async def build_student_report(
    db: AsyncSession, filters: StudentFilters, clock: Clock
) -> StudentReport:
    """Filter, fetch and summarize the student population.

    Raises:
        ConfigurationError: If the custom date range is inverted
    """
    today = clock.today()
    window = await resolve_window(db, filters, clock)
    values = student_values(filters, window, today)

    profiles = await fetch_profiles(db, values)
    enrollments = await fetch_enrollments(db, values)
    attendances = await fetch_student_attendance(db, values)
    results = await fetch_student_results(db, values)

    previous_enrollments = None
    if window is not None:
        previous_values = {**values, WINDOW: window.previous()}
        previous_enrollments = len(await fetch_enrollments(db, previous_values))
        logger.debug(f"Previous period {window.previous()}: {previous_enrollments} enrollment(s)")

    report = summarize_students(
        profiles,
        enrollments,
        attendances,
        results,
        today=today,
        previous_enrollments=previous_enrollments,
        values=values,
    )
    report.filters = filters.as_query_params()
    report.window = report_window(window)
    log_report("student", filters, len(profiles))
    return report
