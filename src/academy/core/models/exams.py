"""
Exam Models

Exams and per-student results (score 0-100).
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .academics import AcademicYear, Subject
    from .people import ChildProfile, TeacherProfile

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

EXAM_TYPES = ("quiz", "midterm", "final", "assignment")


class Exam(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Assessment set for a subject in an academic year."""

    __tablename__ = "exams"
    __table_args__ = (
        CheckConstraint(
            "type IN ('quiz', 'midterm', 'final', 'assignment')", name="check_exam_type"
        ),
        Index("idx_exams_date", "exam_date"),
    )

    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    teacher_profile_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("teacher_profiles.id"), nullable=True
    )
    academic_year_id: Mapped[UUID] = mapped_column(
        ForeignKey("academic_years.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="quiz")

    # Relationships
    subject: Mapped[Subject] = relationship(back_populates="exams")
    teacher_profile: Mapped[TeacherProfile | None] = relationship()
    academic_year: Mapped[AcademicYear] = relationship(back_populates="exams")
    results: Mapped[list[ExamResult]] = relationship(
        back_populates="exam", cascade="all, delete-orphan"
    )


class ExamResult(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Score obtained by one student on one exam."""

    __tablename__ = "exam_results"
    __table_args__ = (
        UniqueConstraint("exam_id", "child_profile_id", name="uq_exam_result_exam_child"),
        CheckConstraint("score >= 0 AND score <= 100", name="check_score_range"),
    )

    exam_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("exams.id", ondelete="CASCADE"), nullable=True
    )
    child_profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("child_profiles.id", ondelete="CASCADE"), nullable=False
    )
    score: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    exam: Mapped[Exam | None] = relationship(back_populates="results")
    child_profile: Mapped[ChildProfile] = relationship(back_populates="exam_results")
