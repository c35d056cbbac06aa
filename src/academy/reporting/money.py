"""
Finance Aggregation

Money-specific rollups on top of the generic aggregation engine: revenue
totals, payment statistics, collection and growth rates, and calendar-month
time series.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from operator import attrgetter
from typing import Any, TypeVar

from .aggregation import breakdown_with_subcounts, rate

T = TypeVar("T")

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

_amount = attrgetter("amount")


@dataclass(frozen=True)
class PaymentSummary:
    count: int
    total: Decimal
    average: Decimal
    minimum: Decimal
    maximum: Decimal


@dataclass(frozen=True)
class MonthlyBucket:
    month: str  # YYYY-MM
    label: str  # e.g. "Mar 2025"
    total: Decimal
    count: int


def to_money(value: Any) -> Decimal:
    """Quantize to cents; None counts as zero."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_total(records: Iterable[T], amount_key: Callable[[T], Any] = _amount) -> Decimal:
    return to_money(sum((to_money(amount_key(record)) for record in records), ZERO))


def payment_summary(
    records: Sequence[T], amount_key: Callable[[T], Any] = _amount
) -> PaymentSummary:
    """Count, total, mean, min and max amount; zeros for no records."""
    amounts = [to_money(amount_key(record)) for record in records]
    if not amounts:
        return PaymentSummary(count=0, total=ZERO, average=ZERO, minimum=ZERO, maximum=ZERO)

    total = sum(amounts, ZERO)
    return PaymentSummary(
        count=len(amounts),
        total=to_money(total),
        average=to_money(total / len(amounts)),
        minimum=min(amounts),
        maximum=max(amounts),
    )


def collection_rate(paid_invoices: int, total_invoices: int, precision: int = 2) -> float:
    """Share of invoices fully paid, as a percentage."""
    return rate(paid_invoices, total_invoices, precision)


def growth_rate(previous_total: Any, current_total: Any, precision: int = 2) -> float:
    """Period-over-period change in percent; 0.0 when there is no previous total."""
    previous = float(previous_total or 0)
    if not previous:
        return 0.0
    return round((float(current_total or 0) - previous) / previous * 100, precision)


def monthly_series(
    records: Iterable[T],
    date_key: Callable[[T], date | datetime | None],
    amount_key: Callable[[T], Any] = _amount,
) -> list[MonthlyBucket]:
    """Sum amounts per calendar month, oldest month first.

    Records without a date are left out of the series.
    """
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for record in records:
        day = date_key(record)
        if day is None:
            continue
        month = f"{day:%Y-%m}"
        totals[month] = totals.get(month, ZERO) + to_money(amount_key(record))
        counts[month] = counts.get(month, 0) + 1

    return [
        MonthlyBucket(
            month=month,
            label=datetime.strptime(month, "%Y-%m").strftime("%b %Y"),
            total=to_money(totals[month]),
            count=counts[month],
        )
        for month in sorted(totals)
    ]


def money_breakdown(
    records: Iterable[T],
    group_key: Callable[[T], Any],
    status_key: Callable[[T], Any],
    statuses: Sequence[str] = (),
    amount_key: Callable[[T], Any] = _amount,
) -> dict[Any, dict[Any, Decimal]]:
    """breakdown_with_subcounts with money sums instead of record counts."""
    return breakdown_with_subcounts(
        records,
        group_key,
        status_key,
        statuses=statuses,
        weight=lambda record: to_money(amount_key(record)),
        zero=ZERO,
    )
