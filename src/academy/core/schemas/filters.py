"""
Report Filter Schemas

One typed filter model per report kind. Field names serialize to stable
camelCase query-string keys so a report URL can be bookmarked and shared.

Every field is optional and lenient: blank strings, malformed ids and
unrecognized choices become None, meaning "no constraint".
"""

from datetime import date
from typing import Annotated, Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from academy.core.models import (
    ATTENDANCE_STATUSES,
    GENDERS,
    INVOICE_STATUSES,
    PAYMENT_METHODS,
)
from academy.core.validation import coerce_choice, coerce_date, coerce_uuid
from academy.reporting.date_ranges import DateRangeName

GRADE_BANDS = ("A", "B", "C", "D", "F")

# label -> (min age, max age inclusive; None = open-ended)
AGE_GROUPS: dict[str, tuple[int, int | None]] = {
    "under-5": (0, 4),
    "5-8": (5, 8),
    "9-12": (9, 12),
    "13-16": (13, 16),
    "17-plus": (17, None),
}


def _choice(choices: tuple[str, ...]) -> BeforeValidator:
    return BeforeValidator(lambda value: coerce_choice(value, choices))


def _grade(value: Any) -> str | None:
    grade = coerce_choice(value, tuple(band.lower() for band in GRADE_BANDS))
    return grade.upper() if grade else None


def _date_range(value: Any) -> DateRangeName | None:
    if isinstance(value, DateRangeName):
        return value
    name = coerce_choice(value, tuple(member.value for member in DateRangeName))
    return DateRangeName(name) if name else None


FilterId = Annotated[UUID | None, BeforeValidator(coerce_uuid)]
FilterDate = Annotated[date | None, BeforeValidator(coerce_date)]


class DateWindowFilters(BaseModel):
    """Date range shared by every report.

    `dateRange` names a symbolic window; explicit `dateFrom`/`dateTo`
    (also accepted as `startDate`/`endDate`) form a custom range.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    date_range: Annotated[DateRangeName | None, BeforeValidator(_date_range)] = None
    date_from: FilterDate = Field(
        default=None,
        validation_alias=AliasChoices("dateFrom", "startDate", "date_from"),
        serialization_alias="dateFrom",
    )
    date_to: FilterDate = Field(
        default=None,
        validation_alias=AliasChoices("dateTo", "endDate", "date_to"),
        serialization_alias="dateTo",
    )

    def as_query_params(self) -> dict[str, str]:
        """Non-empty filters keyed by their query-string names."""
        return {
            key: str(value)
            for key, value in self.model_dump(by_alias=True, exclude_none=True, mode="json").items()
        }


class AttendanceFilters(DateWindowFilters):
    academic_year_id: FilterId = None
    curriculum_id: FilterId = None
    subject_id: FilterId = None
    teacher_id: FilterId = None
    student_id: FilterId = None
    status: Annotated[str | None, _choice(ATTENDANCE_STATUSES)] = None


class ExamFilters(DateWindowFilters):
    academic_year_id: FilterId = None
    curriculum_id: FilterId = None
    subject_id: FilterId = None
    teacher_id: FilterId = None
    student_id: FilterId = None
    exam_id: FilterId = None
    grade: Annotated[str | None, BeforeValidator(_grade)] = None


class FinanceFilters(DateWindowFilters):
    academic_year_id: FilterId = None
    curriculum_id: FilterId = None
    student_id: FilterId = None
    invoice_status: Annotated[str | None, _choice(INVOICE_STATUSES)] = None
    payment_method: Annotated[str | None, _choice(PAYMENT_METHODS)] = None


class StudentFilters(DateWindowFilters):
    academic_year_id: FilterId = None
    curriculum_id: FilterId = None
    gender: Annotated[str | None, _choice(GENDERS)] = None
    age_group: Annotated[str | None, _choice(tuple(AGE_GROUPS))] = None
