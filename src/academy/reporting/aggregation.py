"""
Aggregation Engine

Report-agnostic building blocks shared by every report: counts, grouped
breakdowns, zero-guarded rates, stable rankings and trend labels.

All functions take plain iterables of records (ORM instances or any object
with attributes) plus classifier callables, so the same code serves
attendance, exam, finance and student reports.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")

UNKNOWN = "Unknown"

# Lower bound of each grade band, best first. F is everything below D.
GRADE_BOUNDARIES: tuple[tuple[str, float], ...] = (
    ("A", 90.0),
    ("B", 80.0),
    ("C", 70.0),
    ("D", 60.0),
)
GPA_POINTS = {"A": 4, "B": 3, "C": 2, "D": 1, "F": 0}
PASS_MARK = 60.0


class Trend(str, Enum):
    IMPROVING = "Improving"
    DECLINING = "Declining"
    STABLE = "Stable"
    INSUFFICIENT_DATA = "Insufficient data"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


@dataclass(frozen=True)
class ScoreSummary:
    count: int
    average: float
    highest: float
    lowest: float


# ============================================================================
# Classifiers
# ============================================================================


def related(*path: str, default: Any = UNKNOWN) -> Callable[[Any], Any]:
    """Build a classifier that follows an attribute path.

    Returns `default` when any hop is missing, so a record whose related
    entity was deleted lands in an "Unknown" bucket instead of failing the
    whole aggregation.

    Example:
        subject_name = related("session", "subject", "name")
    """

    def classify(record: Any) -> Any:
        value = record
        for name in path:
            value = getattr(value, name, None)
            if value is None:
                return default
        return value

    return classify


def grade_band(score: float | None) -> str:
    """Letter grade for a 0-100 score (A >= 90, B >= 80, C >= 70, D >= 60, else F)."""
    if score is None:
        return UNKNOWN
    for band, lower_bound in GRADE_BOUNDARIES:
        if score >= lower_bound:
            return band
    return "F"


def is_passing(score: float | None, pass_mark: float = PASS_MARK) -> bool:
    return score is not None and score >= pass_mark


# ============================================================================
# Counting
# ============================================================================


def total_count(records: Iterable[Any]) -> int:
    return sum(1 for _ in records)


def count_by(records: Iterable[T], classifier: Callable[[T], Hashable]) -> dict[Any, int]:
    """Count records per category, keeping categories in first-seen order."""
    counts: dict[Any, int] = {}
    for record in records:
        key = classifier(record)
        counts[key] = counts.get(key, 0) + 1
    return counts


def distinct_count(records: Iterable[T], key: Callable[[T], Hashable]) -> int:
    """Number of distinct non-null keys."""
    return len({value for value in map(key, records) if value is not None})


def group_by(records: Iterable[T], key: Callable[[T], Hashable]) -> dict[Any, list[T]]:
    """Group records by key, keeping groups and members in input order."""
    groups: dict[Any, list[T]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def rate(subset: float, total: float, precision: int = 2) -> float:
    """Percentage of subset over total, rounded; 0.0 when total is 0."""
    if not total:
        return 0.0
    return round(subset / total * 100, precision)


def breakdown_with_subcounts(
    records: Iterable[T],
    group_key: Callable[[T], Hashable],
    status_key: Callable[[T], Hashable],
    statuses: Sequence[str] = (),
    weight: Callable[[T], Any] | None = None,
    zero: Any = 0,
) -> dict[Any, dict[Any, Any]]:
    """Group records and tally each status inside each group.

    Every group entry carries a "total" plus one cell per status in
    `statuses` (defaulting to `zero`) and per extra status observed in the
    input, so the status cells of a group always add up to its total.

    Cells count records unless `weight` is given, in which case they sum
    `weight(record)` (e.g. payment amounts).
    """
    breakdown: dict[Any, dict[Any, Any]] = {}
    for record in records:
        group = group_key(record)
        entry = breakdown.get(group)
        if entry is None:
            entry = {"total": zero}
            entry.update(dict.fromkeys(statuses, zero))
            breakdown[group] = entry

        amount = 1 if weight is None else weight(record)
        status = status_key(record)
        entry["total"] += amount
        entry[status] = entry.get(status, zero) + amount
    return breakdown


# ============================================================================
# Ranking and summaries
# ============================================================================


def top_n(
    records: Iterable[T],
    sort_key: Callable[[T], Any],
    n: int | None = None,
    descending: bool = True,
) -> list[T]:
    """First n records ordered by sort_key.

    Python's sort is stable (also with reverse=True), so records with equal
    keys keep their input order.
    """
    ordered = sorted(records, key=sort_key, reverse=descending)
    return ordered if n is None else ordered[:n]


def score_summary(scores: Iterable[float], precision: int = 2) -> ScoreSummary:
    """Count, mean, max and min of scores; all zero for an empty input."""
    values = [float(score) for score in scores if score is not None]
    if not values:
        return ScoreSummary(count=0, average=0.0, highest=0.0, lowest=0.0)
    return ScoreSummary(
        count=len(values),
        average=round(sum(values) / len(values), precision),
        highest=max(values),
        lowest=min(values),
    )


def classify_trend(series: Sequence[float], threshold: float = 5.0) -> Trend:
    """Compare first and last points of a chronological series.

    A change above +threshold is improving, below -threshold declining,
    anything in between stable. Fewer than two points cannot be classified.
    """
    if len(series) < 2:
        return Trend.INSUFFICIENT_DATA

    difference = series[-1] - series[0]
    if difference > threshold:
        return Trend.IMPROVING
    if difference < -threshold:
        return Trend.DECLINING
    return Trend.STABLE


def classify_difficulty(average_score: float) -> Difficulty:
    if average_score >= 80:
        return Difficulty.EASY
    if average_score < 60:
        return Difficulty.HARD
    return Difficulty.MEDIUM


def grade_point_average(grade_counts: dict[str, int], precision: int = 2) -> float:
    """Weighted GPA (A=4 ... F=0) of a grade distribution; 0.0 when empty."""
    graded = sum(count for band, count in grade_counts.items() if band in GPA_POINTS)
    if not graded:
        return 0.0
    points = sum(
        GPA_POINTS[band] * count for band, count in grade_counts.items() if band in GPA_POINTS
    )
    return round(points / graded, precision)
