"""
Helpers shared by the report builders.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from academy.core.schemas.reports import ReportWindow
from academy.reporting.aggregation import UNKNOWN

if TYPE_CHECKING:
    from academy.core.schemas.filters import DateWindowFilters
    from academy.reporting.date_ranges import DateWindow

logger = logging.getLogger(__name__)


def report_window(window: DateWindow | None) -> ReportWindow:
    if window is None:
        return ReportWindow()
    return ReportWindow(start=window.start, end=window.end)


def chronological(table: dict[str, Any]) -> dict[str, Any]:
    """Sort a date-keyed table by key, with the Unknown bucket last."""
    return dict(sorted(table.items(), key=lambda item: (item[0] == UNKNOWN, item[0])))


def log_report(kind: str, filters: DateWindowFilters, record_count: int) -> None:
    """Record report access, replacing the admin activity log entry."""
    logger.info(
        f"Generated {kind} report over {record_count} record(s) "
        f"with filters {filters.as_query_params()}"
    )
