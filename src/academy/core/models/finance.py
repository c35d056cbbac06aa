"""
Finance Models

Invoices and the payments that settle them (partial payments allowed).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from .academics import AcademicYear, Curriculum
    from .enrollments import ProgramEnrollment
    from .people import ChildProfile

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, select
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

INVOICE_STATUSES = ("draft", "sent", "partially_paid", "paid", "overdue")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded", "overdue")
PAYMENT_METHODS = ("cash", "card", "bank_transfer", "mobile_money", "cheque")


class Invoice(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Amount billed to a student for a program enrollment."""

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'sent', 'partially_paid', 'paid', 'overdue')",
            name="check_invoice_status",
        ),
        Index("idx_invoices_date", "invoice_date"),
        Index("idx_invoices_child", "child_profile_id"),
    )

    invoice_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft")

    child_profile_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("child_profiles.id"), nullable=True
    )
    academic_year_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("academic_years.id"), nullable=True
    )
    curriculum_id: Mapped[UUID | None] = mapped_column(ForeignKey("curricula.id"), nullable=True)
    program_enrollment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("program_enrollments.id"), nullable=True
    )

    # Relationships
    child_profile: Mapped[ChildProfile | None] = relationship(back_populates="invoices")
    academic_year: Mapped[AcademicYear | None] = relationship()
    curriculum: Mapped[Curriculum | None] = relationship()
    program_enrollment: Mapped[ProgramEnrollment | None] = relationship()
    payments: Mapped[list[Payment]] = relationship(back_populates="invoice")

    @staticmethod
    async def next_invoice_number(db: AsyncSession, today: date) -> str:
        """Next number in the month's sequence, formatted INV-YYYYMM-NNNN."""
        prefix = f"INV-{today:%Y%m}-"
        result = await db.execute(
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.like(f"{prefix}%"))
            .order_by(Invoice.invoice_number.desc())
            .limit(1)
        )
        last = result.scalar_one_or_none()
        sequence = int(last[-4:]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"


class Payment(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Money received against an invoice."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded', 'overdue')",
            name="check_payment_status",
        ),
        Index("idx_payments_date", "payment_date"),
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    invoice_id: Mapped[UUID | None] = mapped_column(ForeignKey("invoices.id"), nullable=True)
    child_profile_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("child_profiles.id"), nullable=True
    )
    academic_year_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("academic_years.id"), nullable=True
    )
    curriculum_id: Mapped[UUID | None] = mapped_column(ForeignKey("curricula.id"), nullable=True)

    # Relationships
    invoice: Mapped[Invoice | None] = relationship(back_populates="payments")
    child_profile: Mapped[ChildProfile | None] = relationship(back_populates="payments")
    academic_year: Mapped[AcademicYear | None] = relationship()
    curriculum: Mapped[Curriculum | None] = relationship()
