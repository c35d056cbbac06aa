"""
Unit Tests for Report Filter Schemas

Filters are lenient: anything that cannot be understood means "no constraint".
"""

from datetime import date
from uuid import uuid4

from academy.core.schemas import (
    AttendanceFilters,
    ExamFilters,
    FinanceFilters,
    StudentFilters,
)
from academy.reporting.date_ranges import DateRangeName


class TestLenientCoercion:
    def test_blank_values_are_absent(self):
        filters = AttendanceFilters.model_validate(
            {"subjectId": "", "status": "  ", "dateRange": "", "dateFrom": ""}
        )

        assert filters.subject_id is None
        assert filters.status is None
        assert filters.date_range is None
        assert filters.date_from is None

    def test_malformed_values_are_absent(self):
        filters = AttendanceFilters.model_validate(
            {
                "subjectId": "not-a-uuid",
                "status": "sleeping",
                "dateRange": "next_decade",
                "dateTo": "31/02/2025",
            }
        )

        assert filters.subject_id is None
        assert filters.status is None
        assert filters.date_range is None
        assert filters.date_to is None

    def test_valid_values_are_parsed(self):
        subject_id = uuid4()
        filters = AttendanceFilters.model_validate(
            {"subjectId": str(subject_id), "status": "Present", "dateRange": "current_month"}
        )

        assert filters.subject_id == subject_id
        assert filters.status == "present"
        assert filters.date_range == DateRangeName.CURRENT_MONTH

    def test_unknown_keys_are_ignored(self):
        filters = ExamFilters.model_validate({"page": "3", "sort": "desc"})
        assert filters == ExamFilters()


class TestAliases:
    def test_start_and_end_date_aliases(self):
        filters = FinanceFilters.model_validate(
            {"startDate": "2025-01-01", "endDate": "2025-01-31"}
        )

        assert filters.date_from == date(2025, 1, 1)
        assert filters.date_to == date(2025, 1, 31)

    def test_snake_case_names_accepted(self):
        student_id = uuid4()
        filters = FinanceFilters(student_id=student_id, invoice_status="PAID")

        assert filters.student_id == student_id
        assert filters.invoice_status == "paid"

    def test_query_params_round_trip(self):
        year_id = uuid4()
        filters = StudentFilters.model_validate(
            {"academicYearId": str(year_id), "ageGroup": "9-12", "dateRange": "last_30_days"}
        )

        params = filters.as_query_params()

        assert params == {
            "academicYearId": str(year_id),
            "ageGroup": "9-12",
            "dateRange": "last_30_days",
        }
        assert StudentFilters.model_validate(params) == filters

    def test_dates_serialize_as_iso(self):
        filters = ExamFilters.model_validate({"dateFrom": "2025-01-01", "dateTo": "2025-02-01"})
        assert filters.as_query_params() == {"dateFrom": "2025-01-01", "dateTo": "2025-02-01"}


class TestChoices:
    def test_grade_is_uppercased(self):
        assert ExamFilters.model_validate({"grade": "b"}).grade == "B"
        assert ExamFilters.model_validate({"grade": "E"}).grade is None

    def test_payment_method(self):
        assert FinanceFilters.model_validate({"paymentMethod": "card"}).payment_method == "card"
        assert FinanceFilters.model_validate({"paymentMethod": "bitcoin"}).payment_method is None

    def test_gender_and_age_group(self):
        filters = StudentFilters.model_validate({"gender": "Female", "ageGroup": "17-plus"})

        assert filters.gender == "female"
        assert filters.age_group == "17-plus"
        assert StudentFilters.model_validate({"ageGroup": "90-100"}).age_group is None
