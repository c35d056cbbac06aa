"""
People Models

Student (child) profiles and teacher profiles.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .academics import Subject
    from .enrollments import ProgramEnrollment
    from .exams import ExamResult
    from .finance import Invoice, Payment
    from .scheduling import Attendance, ClassSession

from sqlalchemy import CheckConstraint, Date, Index, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .academics import teacher_subjects
from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

GENDERS = ("male", "female", "other")


class ChildProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Enrolled student."""

    __tablename__ = "child_profiles"
    __table_args__ = (
        CheckConstraint("gender IN ('male', 'female', 'other')", name="check_child_gender"),
        Index("idx_child_profiles_dob", "date_of_birth"),
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Relationships
    program_enrollments: Mapped[list[ProgramEnrollment]] = relationship(
        back_populates="child_profile", cascade="all, delete-orphan"
    )
    attendances: Mapped[list[Attendance]] = relationship(back_populates="child_profile")
    exam_results: Mapped[list[ExamResult]] = relationship(back_populates="child_profile")
    invoices: Mapped[list[Invoice]] = relationship(back_populates="child_profile")
    payments: Mapped[list[Payment]] = relationship(back_populates="child_profile")

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "Unknown Student"

    @property
    def initials(self) -> str:
        first = self.first_name[:1].upper() if self.first_name else "?"
        last = self.last_name[:1].upper() if self.last_name else "?"
        return first + last

    def age_on(self, day: date) -> int | None:
        """Age in whole years on the given day, or None without a birth date."""
        if self.date_of_birth is None:
            return None
        dob = self.date_of_birth
        had_birthday = (day.month, day.day) >= (dob.month, dob.day)
        return day.year - dob.year - (0 if had_birthday else 1)

    @property
    def age(self) -> int | None:
        return self.age_on(date.today())


class TeacherProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Teaching staff member."""

    __tablename__ = "teacher_profiles"

    user_id: Mapped[UUID | None] = mapped_column(nullable=True, comment="Owning user account")
    name: Mapped[str] = mapped_column(String(200), nullable=False, comment="Display name")
    specialization: Mapped[str | None] = mapped_column(String(150), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    qualification: Mapped[str | None] = mapped_column(String(150), nullable=True)
    experience_years: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    # Relationships
    subjects: Mapped[list[Subject]] = relationship(
        secondary=teacher_subjects, back_populates="teachers"
    )
    sessions: Mapped[list[ClassSession]] = relationship(back_populates="teacher_profile")
