"""
Exam Report

Exam results filtered by academic year, curriculum, subject, teacher,
student, exam, grade band and exam date; summarized into score statistics,
grade distribution, pass rate, per-subject and per-student performance
(with improvement trend) and per-exam difficulty.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, select
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.models import Exam, ExamResult, Subject
from academy.core.schemas.filters import GRADE_BANDS
from academy.core.schemas.reports import (
    ExamDifficulty,
    ExamReport,
    StudentPerformance,
    SubjectPerformance,
)
from academy.reporting.aggregation import (
    GRADE_BOUNDARIES,
    UNKNOWN,
    classify_difficulty,
    classify_trend,
    count_by,
    distinct_count,
    grade_band,
    group_by,
    is_passing,
    rate,
    related,
    score_summary,
    top_n,
)
from academy.reporting.date_ranges import resolve_window
from academy.reporting.filters import WINDOW, FilterComposer, filter_values, within_window

from .base import log_report, report_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academy.core.schemas.filters import ExamFilters
    from academy.reporting.clock import Clock


def band_limits() -> dict[str, tuple[float | None, float | None]]:
    """Grade band -> (inclusive lower bound, exclusive upper bound) score limits."""
    limits: dict[str, tuple[float | None, float | None]] = {}
    upper = None
    for band, lower in GRADE_BOUNDARIES:
        limits[band] = (lower, upper)
        upper = lower
    limits["F"] = (None, upper)
    return limits


_BAND_LIMITS = band_limits()

exam_filters = FilterComposer("exams")


@exam_filters.register("academic_year_id")
def _by_academic_year(value: Any) -> Any:
    return ExamResult.exam.has(Exam.academic_year_id == value)


@exam_filters.register("curriculum_id")
def _by_curriculum(value: Any) -> Any:
    return ExamResult.exam.has(Exam.subject.has(Subject.curriculum_id == value))


@exam_filters.register("subject_id")
def _by_subject(value: Any) -> Any:
    return ExamResult.exam.has(Exam.subject_id == value)


@exam_filters.register("teacher_id")
def _by_teacher(value: Any) -> Any:
    return ExamResult.exam.has(Exam.teacher_profile_id == value)


@exam_filters.register("student_id")
def _by_student(value: Any) -> Any:
    return ExamResult.child_profile_id == value


@exam_filters.register("exam_id")
def _by_exam(value: Any) -> Any:
    return ExamResult.exam_id == value


@exam_filters.register("grade")
def _by_grade(value: Any) -> Any:
    lower, upper = _BAND_LIMITS[value]
    clauses = []
    if lower is not None:
        clauses.append(ExamResult.score >= lower)
    if upper is not None:
        clauses.append(ExamResult.score < upper)
    return and_(*clauses)


@exam_filters.register(WINDOW)
def _by_exam_date(value: Any) -> Any:
    return ExamResult.exam.has(within_window(Exam.exam_date, value))


subject_name = related("exam", "subject", "name")
student_name = related("child_profile", "full_name")
exam_date_of = related("exam", "exam_date", default=None)


def _score(record: ExamResult) -> float:
    return float(record.score)


def _chronological_key(record: ExamResult) -> tuple[bool, date]:
    exam_date = exam_date_of(record)
    return (exam_date is None, exam_date or date.min)


def grade_distribution(records: Sequence[ExamResult]) -> dict[str, int]:
    """Count per grade band, listing every band A-F."""
    counts = count_by(records, lambda record: grade_band(_score(record)))
    return {band: counts.get(band, 0) for band in GRADE_BANDS}


def pass_rate(records: Sequence[ExamResult], precision: int = settings.RATE_PRECISION) -> float:
    passed = sum(1 for record in records if is_passing(_score(record), settings.PASS_MARK))
    return rate(passed, len(records), precision)


def summarize_exams(
    records: Sequence[ExamResult], precision: int = settings.RATE_PRECISION
) -> ExamReport:
    """Aggregate already-filtered exam results."""
    overall = score_summary(map(_score, records), precision)

    subject_performance = {}
    for subject, subject_records in group_by(records, subject_name).items():
        summary = score_summary(map(_score, subject_records), precision)
        subject_performance[subject] = SubjectPerformance(
            total_results=summary.count,
            average_score=summary.average,
            highest_score=summary.highest,
            lowest_score=summary.lowest,
            pass_rate=pass_rate(subject_records, precision),
        )

    student_performance = []
    for student_id, student_records in group_by(records, related("child_profile_id")).items():
        summary = score_summary(map(_score, student_records), precision)
        ordered = sorted(student_records, key=_chronological_key)
        student_performance.append(
            StudentPerformance(
                student_id=student_id if student_id != UNKNOWN else None,
                student_name=student_name(student_records[0]),
                total_exams=summary.count,
                average_score=summary.average,
                highest_score=summary.highest,
                lowest_score=summary.lowest,
                improvement_trend=classify_trend(
                    [_score(record) for record in ordered], settings.TREND_THRESHOLD
                ).value,
            )
        )

    exam_difficulty = []
    for exam_id, exam_records in group_by(records, related("exam_id", default=None)).items():
        first = exam_records[0]
        summary = score_summary(map(_score, exam_records), precision)
        exam_difficulty.append(
            ExamDifficulty(
                exam_id=exam_id,
                exam_title=related("exam", "title", default="Unknown Exam")(first),
                exam_date=exam_date_of(first),
                subject=subject_name(first),
                total_students=summary.count,
                average_score=summary.average,
                difficulty=classify_difficulty(summary.average).value,
                pass_rate=pass_rate(exam_records, precision),
            )
        )

    return ExamReport(
        total_results=len(records),
        total_exams=distinct_count(records, related("exam_id", default=None)),
        total_students=distinct_count(records, related("child_profile_id", default=None)),
        average_score=overall.average,
        highest_score=overall.highest,
        lowest_score=overall.lowest,
        grade_distribution=grade_distribution(records),
        pass_rate=pass_rate(records, precision),
        subject_performance=subject_performance,
        student_performance=top_n(student_performance, lambda row: row.average_score),
        exam_difficulty=exam_difficulty,
    )


async def fetch_exam_results(db: AsyncSession, values: dict[str, Any]) -> Sequence[ExamResult]:
    stmt = (
        select(ExamResult)
        .options(
            selectinload(ExamResult.exam).selectinload(Exam.subject),
            selectinload(ExamResult.child_profile),
        )
        .order_by(ExamResult.created_at, ExamResult.id)
    )
    result = await db.execute(exam_filters.apply(stmt, values))
    return result.scalars().all()


async def build_exam_report(db: AsyncSession, filters: ExamFilters, clock: Clock) -> ExamReport:
    """Filter, fetch and summarize exam results.

    Raises:
        ConfigurationError: If the custom date range is inverted
    """
    window = await resolve_window(db, filters, clock)
    records = await fetch_exam_results(db, filter_values(filters, window))

    report = summarize_exams(records)
    report.filters = filters.as_query_params()
    report.window = report_window(window)
    log_report("exam", filters, len(records))
    return report
