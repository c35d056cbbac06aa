"""
Academic Structure Models

Academic years, curricula and the subjects they group.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .exams import Exam
    from .people import TeacherProfile
    from .scheduling import ClassSession

from sqlalchemy import Column, Date, ForeignKey, Index, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

teacher_subjects = Table(
    "teacher_subjects",
    Base.metadata,
    Column("teacher_profile_id", ForeignKey("teacher_profiles.id"), primary_key=True),
    Column("subject_id", ForeignKey("subjects.id"), primary_key=True),
)


class AcademicYear(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """School year (e.g. '2024-2025').

    Exactly one row is expected to carry is_current=True; this is not
    enforced by the schema.
    """

    __tablename__ = "academic_years"
    __table_args__ = (Index("idx_academic_years_current", "is_current"),)

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_current: Mapped[bool] = mapped_column(default=False)

    exams: Mapped[list[Exam]] = relationship(back_populates="academic_year")


class Curriculum(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Programme of study grouping subjects (e.g. 'IGCSE')."""

    __tablename__ = "curricula"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)

    subjects: Mapped[list[Subject]] = relationship(
        back_populates="curriculum", cascade="all, delete-orphan"
    )


class Subject(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Subject taught within one curriculum."""

    __tablename__ = "subjects"
    __table_args__ = (Index("idx_subjects_curriculum", "curriculum_id"),)

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False)
    curriculum_id: Mapped[UUID] = mapped_column(ForeignKey("curricula.id"), nullable=False)
    level: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Relationships
    curriculum: Mapped[Curriculum] = relationship(back_populates="subjects")
    teachers: Mapped[list[TeacherProfile]] = relationship(
        secondary=teacher_subjects, back_populates="subjects"
    )
    sessions: Mapped[list[ClassSession]] = relationship(back_populates="subject")
    exams: Mapped[list[Exam]] = relationship(back_populates="subject")
