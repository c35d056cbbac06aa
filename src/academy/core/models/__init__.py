"""
Academy SQLAlchemy Models

Read by the reporting engine; written by the administration app and the
demo seeder.
"""

from .academics import AcademicYear, Curriculum, Subject, teacher_subjects
from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .enrollments import ENROLLMENT_STATUSES, ProgramEnrollment, SubjectEnrollment
from .exams import EXAM_TYPES, Exam, ExamResult
from .finance import INVOICE_STATUSES, PAYMENT_METHODS, PAYMENT_STATUSES, Invoice, Payment
from .people import GENDERS, ChildProfile, TeacherProfile
from .scheduling import (
    ATTENDANCE_STATUSES,
    ATTENDED_STATUSES,
    SESSION_TYPES,
    Attendance,
    ClassSession,
)

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    # Academics
    "AcademicYear",
    "Curriculum",
    "Subject",
    "teacher_subjects",
    # People
    "ChildProfile",
    "TeacherProfile",
    "GENDERS",
    # Enrollments
    "ProgramEnrollment",
    "SubjectEnrollment",
    "ENROLLMENT_STATUSES",
    # Scheduling
    "ClassSession",
    "Attendance",
    "SESSION_TYPES",
    "ATTENDANCE_STATUSES",
    "ATTENDED_STATUSES",
    # Exams
    "Exam",
    "ExamResult",
    "EXAM_TYPES",
    # Finance
    "Invoice",
    "Payment",
    "INVOICE_STATUSES",
    "PAYMENT_STATUSES",
    "PAYMENT_METHODS",
]
