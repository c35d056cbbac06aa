"""
Clock abstraction.

Date-range resolution and age computation read "now" through a Clock so
reports can be built against a fixed day in tests.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date: ...

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock of the server (local time)."""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime | date):
        if not isinstance(instant, datetime):
            instant = datetime(instant.year, instant.month, instant.day)
        self._instant = instant

    def today(self) -> date:
        return self._instant.date()

    def now(self) -> datetime:
        return self._instant


def get_clock() -> Clock:
    """FastAPI dependency; override in tests to pin the date."""
    return SystemClock()
