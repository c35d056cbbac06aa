"""
Filter Composition

A FilterComposer holds one predicate builder per filter name. Applying it to
a SELECT adds exactly one WHERE clause per non-empty filter value, combined
with AND. Reports register their builders with the `register` decorator:

    attendance_filters = FilterComposer("attendance")

    @attendance_filters.register("subject_id")
    def _by_subject(value):
        return Attendance.session.has(ClassSession.subject_id == value)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import tzinfo
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_

if TYPE_CHECKING:
    from pydantic import BaseModel
    from sqlalchemy import ColumnElement, Select

    from .date_ranges import DateWindow

logger = logging.getLogger(__name__)

PredicateBuilder = Callable[[Any], "ColumnElement[bool]"]

WINDOW = "window"


class FilterComposer:
    """Named filters translated into a conjunction of SQL predicates."""

    def __init__(self, name: str):
        self.name = name
        self._builders: dict[str, PredicateBuilder] = {}

    def register(self, filter_name: str) -> Callable[[PredicateBuilder], PredicateBuilder]:
        """Decorator registering the predicate builder for a filter name."""

        def decorator(builder: PredicateBuilder) -> PredicateBuilder:
            self._builders[filter_name] = builder
            return builder

        return decorator

    @property
    def filter_names(self) -> tuple[str, ...]:
        return tuple(self._builders)

    def predicates(self, values: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        """One predicate per registered filter with a non-empty value.

        Values with no registered builder are ignored.
        """
        clauses = []
        for filter_name, build in self._builders.items():
            value = values.get(filter_name)
            if value is None or value == "":
                continue
            clauses.append(build(value))
        return clauses

    def apply(self, stmt: Select[Any], values: Mapping[str, Any]) -> Select[Any]:
        clauses = self.predicates(values)
        logger.debug(f"{self.name} filters: {len(clauses)} active predicate(s)")
        if not clauses:
            return stmt
        return stmt.where(and_(*clauses))


def filter_values(filters: BaseModel, window: DateWindow | None = None) -> dict[str, Any]:
    """Flatten a filter model plus its resolved date window for a composer."""
    values = dict(filters)
    values[WINDOW] = window
    return values


def within_window(
    column: Any, window: DateWindow, *, datetimes: bool = False, tz: tzinfo | None = None
) -> Any:
    """Inclusive window predicate; datetime columns use [start, end + 1 day).

    Pass `tz` for timezone-aware columns such as `created_at`.
    """
    if datetimes:
        start, end = window.datetime_bounds(tz)
        return and_(column >= start, column < end)
    return column.between(window.start, window.end)
