"""
Date Range Resolution

Turns a symbolic range name ('current_month', 'previous_term', ...) or an
explicit custom range into a concrete inclusive [start, end] window.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import TYPE_CHECKING, Any

from academy.core.validation import validate_date_window

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academy.core.schemas.filters import DateWindowFilters
    from academy.reporting.clock import Clock

logger = logging.getLogger(__name__)


class DateRangeName(str, Enum):
    CURRENT_TERM = "current_term"
    PREVIOUS_TERM = "previous_term"
    CURRENT_MONTH = "current_month"
    PREVIOUS_MONTH = "previous_month"
    CURRENT_YEAR = "current_year"
    PREVIOUS_YEAR = "previous_year"
    LAST_30_DAYS = "last_30_days"
    LAST_90_DAYS = "last_90_days"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar window."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date | datetime) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day <= self.end

    def datetime_bounds(self, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
        """Half-open datetime bounds [start 00:00, day after end 00:00)."""
        return (
            datetime.combine(self.start, time.min, tzinfo=tz),
            datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=tz),
        )

    def previous(self) -> DateWindow:
        """Window of the same span ending the day before this one starts."""
        previous_end = self.start - timedelta(days=1)
        return DateWindow(previous_end - (self.end - self.start), previous_end)


def month_window(day: date) -> DateWindow:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return DateWindow(day.replace(day=1), day.replace(day=last_day))


def year_window(year: int) -> DateWindow:
    return DateWindow(date(year, 1, 1), date(year, 12, 31))


def resolve_date_range(
    name: DateRangeName | None,
    *,
    today: date,
    current_term: Any = None,
    previous_term: Any = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> DateWindow | None:
    """Resolve a range name to a window.

    Explicit dates with no name behave as a custom range. A custom range
    with a missing bound, or a term that does not exist, yields None
    (no date constraint).

    Raises:
        ConfigurationError: If a custom range ends before it starts
    """
    if name is None and (date_from or date_to):
        name = DateRangeName.CUSTOM

    if name == DateRangeName.CUSTOM:
        if date_from is None or date_to is None:
            return None
        return DateWindow(*validate_date_window(date_from, date_to))

    if name in (DateRangeName.CURRENT_TERM, DateRangeName.PREVIOUS_TERM):
        term = current_term if name == DateRangeName.CURRENT_TERM else previous_term
        if term is None:
            return None
        return DateWindow(term.start_date, term.end_date)

    if name == DateRangeName.CURRENT_MONTH:
        return month_window(today)
    if name == DateRangeName.PREVIOUS_MONTH:
        return month_window(today.replace(day=1) - timedelta(days=1))
    if name == DateRangeName.CURRENT_YEAR:
        return year_window(today.year)
    if name == DateRangeName.PREVIOUS_YEAR:
        return year_window(today.year - 1)
    if name == DateRangeName.LAST_30_DAYS:
        return DateWindow(today - timedelta(days=30), today)
    if name == DateRangeName.LAST_90_DAYS:
        return DateWindow(today - timedelta(days=90), today)

    return None


async def resolve_window(
    db: AsyncSession, filters: DateWindowFilters, clock: Clock
) -> DateWindow | None:
    """Resolve the filters' date range, loading academic years only when needed."""
    from sqlalchemy import select

    from academy.core.models import AcademicYear

    today = clock.today()
    current_term = previous_term = None

    if filters.date_range == DateRangeName.CURRENT_TERM:
        result = await db.execute(
            select(AcademicYear).where(AcademicYear.is_current.is_(True)).limit(1)
        )
        current_term = result.scalar_one_or_none()
    elif filters.date_range == DateRangeName.PREVIOUS_TERM:
        result = await db.execute(
            select(AcademicYear)
            .where(AcademicYear.is_current.is_(False), AcademicYear.end_date < today)
            .order_by(AcademicYear.end_date.desc())
            .limit(1)
        )
        previous_term = result.scalar_one_or_none()

    window = resolve_date_range(
        filters.date_range,
        today=today,
        current_term=current_term,
        previous_term=previous_term,
        date_from=filters.date_from,
        date_to=filters.date_to,
    )
    logger.debug(f"Resolved date range {filters.date_range!r} to {window}")
    return window
