"""
Enrollment Models

A program enrollment registers a student in a curriculum for one academic
year; subject enrollments fan it out into individual subjects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .academics import AcademicYear, Curriculum, Subject
    from .people import ChildProfile

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

ENROLLMENT_STATUSES = ("active", "inactive", "completed", "withdrawn")


class ProgramEnrollment(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Student registration in a curriculum for an academic year."""

    __tablename__ = "program_enrollments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'completed', 'withdrawn')",
            name="check_enrollment_status",
        ),
        Index("idx_program_enrollments_child", "child_profile_id"),
        Index("idx_program_enrollments_year", "academic_year_id"),
    )

    child_profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("child_profiles.id", ondelete="CASCADE"), nullable=False
    )
    curriculum_id: Mapped[UUID] = mapped_column(ForeignKey("curricula.id"), nullable=False)
    academic_year_id: Mapped[UUID] = mapped_column(
        ForeignKey("academic_years.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="active")
    payment_plan_id: Mapped[UUID | None] = mapped_column(
        nullable=True, comment="Payment plan reference (plans live outside reporting)"
    )

    # Relationships
    child_profile: Mapped[ChildProfile] = relationship(back_populates="program_enrollments")
    curriculum: Mapped[Curriculum] = relationship()
    academic_year: Mapped[AcademicYear] = relationship()
    subject_enrollments: Mapped[list[SubjectEnrollment]] = relationship(
        back_populates="program_enrollment", cascade="all, delete-orphan"
    )


class SubjectEnrollment(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Student registration in one subject of a program enrollment."""

    __tablename__ = "subject_enrollments"
    __table_args__ = (UniqueConstraint("program_enrollment_id", "subject_id"),)

    program_enrollment_id: Mapped[UUID] = mapped_column(
        ForeignKey("program_enrollments.id", ondelete="CASCADE"), nullable=False
    )
    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)

    program_enrollment: Mapped[ProgramEnrollment] = relationship(
        back_populates="subject_enrollments"
    )
    subject: Mapped[Subject] = relationship()
