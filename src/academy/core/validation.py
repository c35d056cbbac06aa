"""
Validation helpers for Academy reports.

Filter values that cannot be understood are dropped (treated as "no
constraint") rather than rejected. The only input rejected outright is a
contradictory date window.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID


class ValidationError(Exception):
    """Raised when user input fails validation."""

    pass


class ConfigurationError(ValidationError):
    """Raised when a report configuration is contradictory (e.g. end before start)."""

    pass


# ============================================================================
# Lenient coercion (used by filter schemas)
# ============================================================================


def blank_to_none(value: object) -> object:
    """Treat empty and whitespace-only strings as missing."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def coerce_uuid(value: object) -> UUID | None:
    """Parse a UUID, returning None for anything unparseable."""
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError:
        return None


def coerce_choice(value: object, choices: tuple[str, ...] | frozenset[str]) -> str | None:
    """Normalize to a known choice (case-insensitive), else None."""
    value = blank_to_none(value)
    if value is None:
        return None
    normalized = str(value).strip().lower()
    return normalized if normalized in choices else None


def coerce_date(value: object) -> date | None:
    """Parse an ISO date (YYYY-MM-DD), returning None if it does not parse."""
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


# ============================================================================
# Date window validation
# ============================================================================


def validate_date_window(start: date, end: date) -> tuple[date, date]:
    """
    Ensure an explicit date window is not inverted.

    Raises:
        ConfigurationError: If end falls before start
    """
    if end < start:
        raise ConfigurationError(
            f"Invalid date range: end date {end.isoformat()} is before "
            f"start date {start.isoformat()}"
        )
    return start, end
