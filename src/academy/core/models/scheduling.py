"""
Scheduling Models

Class sessions and per-student attendance records.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .academics import Subject
    from .people import ChildProfile, TeacherProfile

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

SESSION_TYPES = ("live", "recorded")
ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")
ATTENDED_STATUSES = ("present", "late")


class ClassSession(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A scheduled class occurrence.

    Times are stored as school-local wall clock (no timezone).
    """

    __tablename__ = "sessions"
    __table_args__ = (
        CheckConstraint("type IN ('live', 'recorded')", name="check_session_type"),
        Index("idx_sessions_start", "start_time"),
        Index("idx_sessions_subject", "subject_id"),
    )

    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    teacher_profile_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("teacher_profiles.id"), nullable=True
    )
    room_id: Mapped[UUID | None] = mapped_column(nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="live")
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    subject: Mapped[Subject] = relationship(back_populates="sessions")
    teacher_profile: Mapped[TeacherProfile | None] = relationship(back_populates="sessions")
    attendances: Mapped[list[Attendance]] = relationship(back_populates="session")


class Attendance(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Attendance of one student at one session."""

    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("session_id", "child_profile_id", name="uq_attendance_session_child"),
        CheckConstraint(
            "status IN ('present', 'absent', 'late', 'excused')", name="check_attendance_status"
        ),
    )

    session_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("sessions.id", ondelete="SET NULL"), nullable=True
    )
    child_profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("child_profiles.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    session: Mapped[ClassSession | None] = relationship(back_populates="attendances")
    child_profile: Mapped[ChildProfile] = relationship(back_populates="attendances")