"""
Finance Report

Payments and invoices filtered by academic year, curriculum, student,
invoice status, payment method and date. Revenue only counts completed
payments; invoice figures cover every invoice status.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.models import (
    INVOICE_STATUSES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    Invoice,
    Payment,
)
from academy.core.schemas.reports import (
    FinanceOverview,
    FinanceReport,
    FinanceTrends,
    InvoiceAnalysis,
    MonthlyRevenue,
    PaymentAnalysis,
    RecentPayment,
)
from academy.reporting.aggregation import count_by, group_by, related, top_n
from academy.reporting.date_ranges import resolve_window
from academy.reporting.filters import WINDOW, FilterComposer, filter_values, within_window
from academy.reporting.money import (
    ZERO,
    collection_rate,
    growth_rate,
    money_breakdown,
    money_total,
    monthly_series,
    payment_summary,
    to_money,
)

from .base import log_report, report_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academy.core.schemas.filters import FinanceFilters
    from academy.reporting.clock import Clock
    from academy.reporting.date_ranges import DateWindow

REVENUE_STATUS = "completed"

payment_filters = FilterComposer("payments")
invoice_filters = FilterComposer("invoices")


# ============================================================================
# Payment filters
# ============================================================================


@payment_filters.register("academic_year_id")
def _payment_academic_year(value: Any) -> Any:
    return Payment.academic_year_id == value


@payment_filters.register("curriculum_id")
def _payment_curriculum(value: Any) -> Any:
    return Payment.curriculum_id == value


@payment_filters.register("student_id")
def _payment_student(value: Any) -> Any:
    return Payment.child_profile_id == value


@payment_filters.register("invoice_status")
def _payment_invoice_status(value: Any) -> Any:
    return Payment.invoice.has(Invoice.status == value)


@payment_filters.register("payment_method")
def _payment_method(value: Any) -> Any:
    return Payment.payment_method == value


@payment_filters.register(WINDOW)
def _payment_date(value: Any) -> Any:
    return within_window(Payment.payment_date, value)


# ============================================================================
# Invoice filters
# ============================================================================


@invoice_filters.register("academic_year_id")
def _invoice_academic_year(value: Any) -> Any:
    return Invoice.academic_year_id == value


@invoice_filters.register("curriculum_id")
def _invoice_curriculum(value: Any) -> Any:
    return Invoice.curriculum_id == value


@invoice_filters.register("student_id")
def _invoice_student(value: Any) -> Any:
    return Invoice.child_profile_id == value


@invoice_filters.register("invoice_status")
def _invoice_status(value: Any) -> Any:
    return Invoice.status == value


@invoice_filters.register("payment_method")
def _invoice_payment_method(value: Any) -> Any:
    return Invoice.payments.any(Payment.payment_method == value)


@invoice_filters.register(WINDOW)
def _invoice_date(value: Any) -> Any:
    return within_window(Invoice.invoice_date, value)


# ============================================================================
# Summaries
# ============================================================================

curriculum_name = related("curriculum", "name")
method_of = related("payment_method")
status_of = related("status")


def is_revenue(payment: Payment) -> bool:
    return payment.status == REVENUE_STATUS


def _floats(table: dict[str, Decimal]) -> dict[str, float]:
    return {key: float(value) for key, value in table.items()}


def _monthly_revenue(payments: Sequence[Payment]) -> list[MonthlyRevenue]:
    return [
        MonthlyRevenue(
            month=bucket.month, label=bucket.label, total=float(bucket.total), count=bucket.count
        )
        for bucket in monthly_series(payments, related("payment_date", default=None))
    ]


def _recent_payment(payment: Payment) -> RecentPayment:
    return RecentPayment(
        id=payment.id,
        student=related("child_profile", "full_name")(payment),
        amount=float(to_money(payment.amount)),
        payment_method=method_of(payment),
        payment_date=payment.payment_date,
        academic_year=related("academic_year", "name")(payment),
        curriculum=curriculum_name(payment),
    )


def outstanding_amount(invoices: Sequence[Invoice]) -> Decimal:
    """Unpaid balance of non-draft invoices: amount less completed payments."""
    outstanding = ZERO
    for invoice in invoices:
        if invoice.status in ("draft", "paid"):
            continue
        settled = money_total(payment for payment in invoice.payments if is_revenue(payment))
        outstanding += max(to_money(invoice.amount) - settled, ZERO)
    return to_money(outstanding)


def summarize_payments(payments: Sequence[Payment]) -> PaymentAnalysis:
    revenue = [payment for payment in payments if is_revenue(payment)]
    summary = payment_summary(revenue)

    by_method = {}
    for method, method_payments in group_by(revenue, method_of).items():
        by_method[method] = {
            "count": len(method_payments),
            "total": float(money_total(method_payments)),
        }

    by_status = dict.fromkeys(PAYMENT_STATUSES, 0)
    by_status.update(count_by(payments, status_of))

    return PaymentAnalysis(
        count=summary.count,
        total=float(summary.total),
        average=float(summary.average),
        minimum=float(summary.minimum),
        maximum=float(summary.maximum),
        by_method=by_method,
        by_status=by_status,
    )


def summarize_invoices(
    invoices: Sequence[Invoice], precision: int = settings.RATE_PRECISION
) -> InvoiceAnalysis:
    count_by_status = dict.fromkeys(INVOICE_STATUSES, 0)
    count_by_status.update(count_by(invoices, status_of))

    amount_by_status = dict.fromkeys(INVOICE_STATUSES, ZERO)
    for status, status_invoices in group_by(invoices, status_of).items():
        amount_by_status[status] = money_total(status_invoices)

    paid = count_by_status.get("paid", 0)
    return InvoiceAnalysis(
        total_invoices=len(invoices),
        paid_invoices=paid,
        collection_rate=collection_rate(paid, len(invoices), precision),
        total_invoiced=float(money_total(invoices)),
        outstanding_amount=float(outstanding_amount(invoices)),
        count_by_status=count_by_status,
        amount_by_status=_floats(amount_by_status),
    )


def summarize_finance(
    payments: Sequence[Payment],
    invoices: Sequence[Invoice],
    previous_payments: Sequence[Payment] | None = None,
    precision: int = settings.RATE_PRECISION,
    recent_limit: int = settings.RECENT_PAYMENTS_LIMIT,
) -> FinanceReport:
    """Aggregate already-filtered payments and invoices.

    `previous_payments` are the payments of the preceding period; pass None
    when there is no window to compare against.
    """
    revenue = [payment for payment in payments if is_revenue(payment)]
    summary = payment_summary(revenue)
    monthly = _monthly_revenue(revenue)
    recent = top_n(
        revenue, lambda payment: (payment.payment_date, payment.created_at), n=recent_limit
    )

    previous_total = None
    if previous_payments is not None:
        previous_total = money_total(
            payment for payment in previous_payments if is_revenue(payment)
        )

    curriculum_revenue = money_breakdown(
        revenue, curriculum_name, method_of, statuses=PAYMENT_METHODS
    )

    return FinanceReport(
        overview=FinanceOverview(
            total_revenue=float(summary.total),
            payment_count=summary.count,
            invoice_count=len(invoices),
            average_payment=float(summary.average),
            by_month=monthly,
            recent_payments=[_recent_payment(payment) for payment in recent],
        ),
        payments=summarize_payments(payments),
        invoices=summarize_invoices(invoices, precision),
        curriculum_revenue={
            curriculum: _floats(cells) for curriculum, cells in curriculum_revenue.items()
        },
        trends=FinanceTrends(
            monthly=monthly,
            current_total=float(summary.total),
            previous_total=float(previous_total) if previous_total is not None else None,
            growth_rate=growth_rate(previous_total, summary.total, precision),
        ),
    )


# ============================================================================
# Queries
# ============================================================================


async def fetch_payments(db: AsyncSession, values: dict[str, Any]) -> Sequence[Payment]:
    stmt = (
        select(Payment)
        .options(
            selectinload(Payment.child_profile),
            selectinload(Payment.academic_year),
            selectinload(Payment.curriculum),
        )
        .order_by(Payment.payment_date, Payment.created_at, Payment.id)
    )
    result = await db.execute(payment_filters.apply(stmt, values))
    return result.scalars().all()


async def fetch_invoices(db: AsyncSession, values: dict[str, Any]) -> Sequence[Invoice]:
    stmt = (
        select(Invoice)
        .options(selectinload(Invoice.payments))
        .order_by(Invoice.invoice_date, Invoice.created_at, Invoice.id)
    )
    result = await db.execute(invoice_filters.apply(stmt, values))
    return result.scalars().all()


async def fetch_previous_payments(
    db: AsyncSession, filters: FinanceFilters, window: DateWindow | None
) -> Sequence[Payment] | None:
    """Payments of the period right before `window`, or None without a window."""
    if window is None:
        return None
    return await fetch_payments(db, filter_values(filters, window.previous()))


async def build_finance_report(
    db: AsyncSession, filters: FinanceFilters, clock: Clock
) -> FinanceReport:
    """Filter, fetch and summarize payments and invoices.

    Raises:
        ConfigurationError: If the custom date range is inverted
    """
    window = await resolve_window(db, filters, clock)
    values = filter_values(filters, window)
    payments = await fetch_payments(db, values)
    invoices = await fetch_invoices(db, values)
    previous = await fetch_previous_payments(db, filters, window)

    report = summarize_finance(payments, invoices, previous)
    report.filters = filters.as_query_params()
    report.window = report_window(window)
    log_report("finance", filters, len(payments) + len(invoices))
    return report
