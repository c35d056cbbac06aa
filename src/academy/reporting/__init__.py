"""
Reporting Engine

Filter composition, generic aggregation and finance rollups shared by the
attendance, exam, finance and student reports (see `academy.reporting.reports`).
"""

from .aggregation import (
    UNKNOWN,
    Difficulty,
    Trend,
    breakdown_with_subcounts,
    classify_difficulty,
    classify_trend,
    count_by,
    distinct_count,
    grade_band,
    grade_point_average,
    group_by,
    is_passing,
    rate,
    related,
    score_summary,
    top_n,
    total_count,
)
from .clock import Clock, FixedClock, SystemClock, get_clock
from .date_ranges import DateRangeName, DateWindow, resolve_date_range, resolve_window
from .filters import FilterComposer, filter_values, within_window
from .money import (
    collection_rate,
    growth_rate,
    money_breakdown,
    money_total,
    monthly_series,
    payment_summary,
)

__all__ = [
    "UNKNOWN",
    "Trend",
    "Difficulty",
    "total_count",
    "count_by",
    "distinct_count",
    "group_by",
    "rate",
    "breakdown_with_subcounts",
    "top_n",
    "score_summary",
    "classify_trend",
    "classify_difficulty",
    "grade_band",
    "grade_point_average",
    "is_passing",
    "related",
    "Clock",
    "SystemClock",
    "FixedClock",
    "get_clock",
    "DateRangeName",
    "DateWindow",
    "resolve_date_range",
    "resolve_window",
    "FilterComposer",
    "filter_values",
    "within_window",
    "collection_rate",
    "growth_rate",
    "money_breakdown",
    "money_total",
    "monthly_series",
    "payment_summary",
]
