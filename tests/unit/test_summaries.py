"""
Unit Tests for Report Summaries

The summarize_* functions aggregate already-filtered records; they are
exercised here with plain objects standing in for ORM rows.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from academy.reporting.aggregation import UNKNOWN
from academy.reporting.reports.attendance import is_attended, summarize_attendance
from academy.reporting.reports.exams import band_limits, summarize_exams
from academy.reporting.reports.finance import outstanding_amount, summarize_finance
from academy.reporting.reports.students import (
    age_group_of,
    birth_date_bounds,
    summarize_demographics,
    summarize_enrollment,
    summarize_performance,
    summarize_student_attendance,
)

MONDAY = datetime(2025, 3, 3, 9)


def person(name, **fields):
    return SimpleNamespace(id=uuid4(), full_name=name, **fields)


def session(subject, teacher="Amina Mensah", start=MONDAY):
    return SimpleNamespace(
        subject=SimpleNamespace(name=subject),
        teacher_profile=SimpleNamespace(name=teacher),
        start_time=start,
    )


def attendance(student, status, class_session=None):
    return SimpleNamespace(
        id=uuid4(),
        child_profile=student,
        child_profile_id=student.id,
        session=class_session,
        session_id=id(class_session) if class_session else None,
        status=status,
    )


def result(student, score, subject="Mathematics", exam_date=date(2025, 1, 20), exam=None):
    exam = exam or SimpleNamespace(
        id=uuid4(),
        title=f"{subject} test",
        exam_date=exam_date,
        subject=SimpleNamespace(name=subject),
    )
    return SimpleNamespace(
        child_profile=student,
        child_profile_id=student.id,
        exam=exam,
        exam_id=exam.id,
        score=score,
    )


# ============================================================================
# Attendance
# ============================================================================


class TestAttendanceSummary:
    def test_present_and_late_count_as_attended(self):
        student = person("Alice Asante")

        assert is_attended(attendance(student, "present"))
        assert is_attended(attendance(student, "late"))
        assert not is_attended(attendance(student, "absent"))
        assert not is_attended(attendance(student, "excused"))

    def test_ten_record_scenario(self):
        """6 present + 2 late out of 10 is an 80% attendance rate."""
        student = person("Alice Asante")
        math = session("Mathematics")
        statuses = ["present"] * 6 + ["late"] * 2 + ["absent", "excused"]
        records = [attendance(student, status, math) for status in statuses]

        report = summarize_attendance(records)

        assert report.total_attendances == 10
        assert report.present_count == 6
        assert report.late_count == 2
        assert report.absent_count == 1
        assert report.excused_count == 1
        assert report.attendance_rate == 80.0

    def test_no_records(self):
        report = summarize_attendance([])

        assert report.total_attendances == 0
        assert report.attendance_rate == 0.0
        assert report.subject_breakdown == {}
        assert report.student_attendance_rates == []

    def test_breakdowns_sum_to_total(self):
        alice, ben = person("Alice"), person("Ben")
        math = session("Mathematics", start=datetime(2025, 3, 4, 9))
        physics = session("Physics", teacher="David Okafor", start=datetime(2025, 3, 3, 11))
        records = [
            attendance(alice, "present", math),
            attendance(ben, "absent", math),
            attendance(alice, "late", physics),
            attendance(ben, "present", None),
        ]

        report = summarize_attendance(records)

        for table in (report.subject_breakdown, report.daily_breakdown, report.teacher_breakdown):
            assert sum(cells["total"] for cells in table.values()) == 4
            for cells in table.values():
                statuses = ("present", "absent", "late", "excused")
                assert sum(cells[s] for s in statuses) == cells["total"]

        assert report.subject_breakdown[UNKNOWN]["present"] == 1
        assert report.teacher_breakdown["David Okafor"]["late"] == 1
        # chronological, unknown day last
        assert list(report.daily_breakdown) == ["2025-03-03", "2025-03-04", UNKNOWN]

    def test_student_ranking(self):
        alice, ben, cara = person("Alice"), person("Ben"), person("Cara")
        math = session("Mathematics")
        records = [
            attendance(alice, "absent", math),
            attendance(ben, "present", math),
            attendance(cara, "absent", math),
            attendance(alice, "present", math),
        ]

        report = summarize_attendance(records)

        ranked = [
            (row.student_name, row.attendance_rate) for row in report.student_attendance_rates
        ]
        assert ranked == [("Ben", 100.0), ("Alice", 50.0), ("Cara", 0.0)]


# ============================================================================
# Exams
# ============================================================================


class TestExamSummary:
    def test_band_limits_cover_the_score_range(self):
        assert band_limits() == {
            "A": (90.0, None),
            "B": (80.0, 90.0),
            "C": (70.0, 80.0),
            "D": (60.0, 70.0),
            "F": (None, 60.0),
        }

    def test_scores_and_distribution(self):
        alice, ben = person("Alice"), person("Ben")
        records = [
            result(alice, 95),
            result(ben, 55),
            result(alice, 85, exam_date=date(2025, 3, 5)),
            result(ben, 72, exam_date=date(2025, 3, 5)),
            result(alice, 65, subject="Physics"),
        ]

        report = summarize_exams(records)

        assert report.total_results == 5
        assert report.total_exams == 5
        assert report.total_students == 2
        assert report.average_score == 74.4
        assert report.highest_score == 95.0
        assert report.lowest_score == 55.0
        assert report.grade_distribution == {"A": 1, "B": 1, "C": 1, "D": 1, "F": 1}
        assert report.pass_rate == 80.0
        assert report.subject_performance["Physics"].total_results == 1
        assert report.subject_performance["Mathematics"].pass_rate == 75.0

    def test_student_trend_uses_exam_date_order(self):
        alice = person("Alice")
        records = [
            result(alice, 90, exam_date=date(2025, 3, 1)),
            result(alice, 60, exam_date=date(2025, 1, 1)),
        ]

        report = summarize_exams(records)

        assert report.student_performance[0].improvement_trend == "Improving"

    def test_single_result_trend(self):
        report = summarize_exams([result(person("Alice"), 70)])
        assert report.student_performance[0].improvement_trend == "Insufficient data"

    def test_students_ranked_by_average(self):
        alice, ben = person("Alice"), person("Ben")
        report = summarize_exams([result(alice, 60), result(ben, 90)])

        assert [row.student_name for row in report.student_performance] == ["Ben", "Alice"]

    def test_exam_difficulty(self):
        exam = SimpleNamespace(
            id=uuid4(),
            title="Algebra Final",
            exam_date=date(2025, 3, 5),
            subject=SimpleNamespace(name="Mathematics"),
        )
        records = [result(person(n), s, exam=exam) for n, s in [("A", 50), ("B", 55), ("C", 70)]]

        report = summarize_exams(records)

        (row,) = report.exam_difficulty
        assert row.exam_title == "Algebra Final"
        assert row.total_students == 3
        assert row.average_score == 58.33
        assert row.difficulty == "Hard"
        assert row.pass_rate == 33.33

    def test_deleted_exam_is_unknown(self):
        orphan = SimpleNamespace(
            child_profile=person("Alice"),
            child_profile_id=uuid4(),
            exam=None,
            exam_id=None,
            score=88,
        )

        report = summarize_exams([orphan])

        assert list(report.subject_performance) == [UNKNOWN]
        assert report.total_exams == 0
        assert report.exam_difficulty[0].exam_title == "Unknown Exam"

    def test_empty(self):
        report = summarize_exams([])

        assert report.average_score == 0.0
        assert report.pass_rate == 0.0
        assert report.grade_distribution == {"A": 0, "B": 0, "C": 0, "D": 0, "F": 0}


# ============================================================================
# Finance
# ============================================================================


def payment(amount, day, status="completed", method="card", curriculum="Cambridge IGCSE"):
    return SimpleNamespace(
        id=uuid4(),
        amount=Decimal(amount),
        payment_date=day,
        created_at=datetime(2025, 1, 1),
        status=status,
        payment_method=method,
        child_profile=SimpleNamespace(full_name="Alice Asante"),
        academic_year=SimpleNamespace(name="2024-2025"),
        curriculum=SimpleNamespace(name=curriculum) if curriculum else None,
    )


def invoice(amount, status, payments=()):
    return SimpleNamespace(amount=Decimal(amount), status=status, payments=list(payments))


class TestFinanceSummary:
    def test_revenue_counts_completed_payments_only(self):
        payments = [
            payment("1000", date(2025, 1, 10)),
            payment("400", date(2025, 2, 15), method="cash"),
            payment("100", date(2025, 3, 1), status="failed"),
        ]

        report = summarize_finance(payments, [])

        assert report.overview.total_revenue == 1400.0
        assert report.overview.payment_count == 2
        assert report.overview.average_payment == 700.0
        assert report.payments.by_status["failed"] == 1
        assert report.payments.by_status["refunded"] == 0
        assert report.payments.by_method == {
            "card": {"count": 1, "total": 1000.0},
            "cash": {"count": 1, "total": 400.0},
        }
        assert [month.month for month in report.overview.by_month] == ["2025-01", "2025-02"]

    def test_recent_payments_newest_first_and_limited(self):
        start = date(2025, 1, 1)
        payments = [payment("10", start + timedelta(days=n)) for n in range(15)]

        report = summarize_finance(payments, [], recent_limit=10)

        recent = report.overview.recent_payments
        assert len(recent) == 10
        assert recent[0].payment_date == date(2025, 1, 15)
        assert recent[-1].payment_date == date(2025, 1, 6)

    def test_invoice_analysis(self):
        paid_payment = payment("400", date(2025, 2, 15))
        invoices = [
            invoice("1000", "paid"),
            invoice("1000", "partially_paid", [paid_payment, payment("50", None, status="failed")]),
            invoice("800", "overdue"),
            invoice("500", "draft"),
        ]

        report = summarize_finance([], invoices)

        assert report.invoices.total_invoices == 4
        assert report.invoices.paid_invoices == 1
        assert report.invoices.collection_rate == 25.0
        assert report.invoices.total_invoiced == 3300.0
        assert report.invoices.outstanding_amount == 1400.0
        assert report.invoices.count_by_status["sent"] == 0
        assert report.invoices.amount_by_status["overdue"] == 800.0
        assert report.overview.invoice_count == 4

    def test_outstanding_never_negative(self):
        overpaid = invoice("100", "sent", [payment("150", date(2025, 1, 1))])
        assert outstanding_amount([overpaid]) == Decimal("0.00")

    def test_curriculum_revenue_by_method(self):
        payments = [
            payment("100", date(2025, 1, 1), method="card"),
            payment("50", date(2025, 1, 2), method="cash"),
            payment("70", date(2025, 1, 3), curriculum=None),
        ]

        report = summarize_finance(payments, [])

        igcse = report.curriculum_revenue["Cambridge IGCSE"]
        assert igcse["total"] == 150.0
        assert igcse["card"] == 100.0
        assert igcse["cheque"] == 0.0
        assert report.curriculum_revenue[UNKNOWN]["total"] == 70.0

    def test_trends(self):
        current = [payment("150", date(2025, 3, 1))]
        previous = [payment("100", date(2025, 2, 1)), payment("999", date(2025, 2, 2), "failed")]

        report = summarize_finance(current, [], previous)

        assert report.trends.current_total == 150.0
        assert report.trends.previous_total == 100.0
        assert report.trends.growth_rate == 50.0

    def test_trends_without_previous_period(self):
        report = summarize_finance([payment("150", date(2025, 3, 1))], [])

        assert report.trends.previous_total is None
        assert report.trends.growth_rate == 0.0


# ============================================================================
# Students
# ============================================================================


class TestAgeGroups:
    def test_labels(self):
        assert age_group_of(None) == UNKNOWN
        assert age_group_of(3) == "under-5"
        assert age_group_of(5) == "5-8"
        assert age_group_of(12) == "9-12"
        assert age_group_of(16) == "13-16"
        assert age_group_of(40) == "17-plus"

    def test_birth_date_bounds(self):
        today = date(2025, 3, 15)

        assert birth_date_bounds("9-12", today) == (date(2012, 3, 15), date(2016, 3, 15))
        assert birth_date_bounds("17-plus", today) == (None, date(2008, 3, 15))

    def test_leap_day_falls_back(self):
        earliest, latest = birth_date_bounds("5-8", date(2024, 2, 29))
        assert latest == date(2019, 2, 28)
        assert earliest == date(2015, 2, 28)


class TestEnrollmentSummary:
    def enrollment(self, status, curriculum, created, subjects=1, child=None):
        return SimpleNamespace(
            status=status,
            curriculum=SimpleNamespace(name=curriculum),
            created_at=created,
            subject_enrollments=[object()] * subjects,
            child_profile_id=child or uuid4(),
        )

    def test_counts(self):
        alice = uuid4()
        enrollments = [
            self.enrollment("active", "IGCSE", datetime(2025, 2, 1), 2, alice),
            self.enrollment("withdrawn", "BNC", datetime(2025, 3, 1), 1),
            self.enrollment("active", "IGCSE", datetime(2025, 3, 2), 3, alice),
        ]

        stats = summarize_enrollment(enrollments, previous_count=2)

        assert stats.total_enrollments == 3
        assert stats.by_status == {"active": 2, "inactive": 0, "completed": 0, "withdrawn": 1}
        assert stats.by_curriculum == {"IGCSE": 2, "BNC": 1}
        assert [(m.month, m.count) for m in stats.by_month] == [("2025-02", 1), ("2025-03", 2)]
        assert stats.previous_enrollments == 2
        assert stats.growth_rate == 50.0
        assert stats.total_subject_enrollments == 6
        assert stats.avg_subjects_per_student == 3.0

    def test_empty(self):
        stats = summarize_enrollment([])

        assert stats.total_enrollments == 0
        assert stats.growth_rate == 0.0
        assert stats.avg_subjects_per_student == 0.0


class TestStudentAttendanceSummary:
    def test_subjects_and_weeks(self):
        alice = person("Alice")
        week1 = session("Mathematics", start=datetime(2025, 3, 5, 9))  # Wednesday
        week2 = session("Mathematics", start=datetime(2025, 3, 10, 9))
        physics = session("Physics", start=datetime(2025, 3, 4, 11))
        records = [
            attendance(alice, "present", week1),
            attendance(alice, "absent", week2),
            attendance(alice, "present", physics),
            attendance(alice, "late", physics),
        ]

        stats = summarize_student_attendance(records, limit=1)

        assert stats.total_attendance_records == 4
        assert stats.total_sessions == 3
        assert stats.attendance_rate == 75.0
        assert stats.by_status == {"present": 2, "absent": 1, "late": 1, "excused": 0}
        assert [(row.subject, row.attendance_rate) for row in stats.by_subject] == [
            ("Mathematics", 50.0),
            ("Physics", 100.0),
        ]
        assert [row.subject for row in stats.highest_attendance_subjects] == ["Physics"]
        assert [row.subject for row in stats.lowest_attendance_subjects] == ["Mathematics"]
        assert [(w.week_start, w.attendance_rate) for w in stats.weekly_trend] == [
            (date(2025, 3, 3), 100.0),
            (date(2025, 3, 10), 0.0),
        ]
        assert stats.weekly_trend[0].label == "Week of Mar 03"


class TestPerformanceSummary:
    def test_gpa_by_subject(self):
        alice = person("Alice")
        records = [
            result(alice, 95),
            result(alice, 85),
            result(alice, 40, subject="Physics"),
            result(alice, 65, subject="Physics"),
        ]

        stats = summarize_performance(records)

        assert stats.total_results == 4
        assert stats.grade_distribution == {"A": 1, "B": 1, "C": 0, "D": 1, "F": 1}
        assert stats.overall_gpa == 2.0
        assert stats.pass_rate == 75.0
        math, physics = stats.by_subject
        assert (math.subject, math.average_gpa, math.pass_rate) == ("Mathematics", 3.5, 100.0)
        assert (physics.subject, physics.average_gpa, physics.pass_rate) == ("Physics", 0.5, 50.0)
        assert stats.top_subjects[0].subject == "Mathematics"
        assert stats.subjects_needing_improvement[0].subject == "Physics"


class TestDemographics:
    def profile(self, gender, dob, *curricula):
        enrollments = [
            SimpleNamespace(
                curriculum=SimpleNamespace(name=name), academic_year_id=None, curriculum_id=None
            )
            for name in curricula
        ]
        return SimpleNamespace(
            gender=gender,
            age_on=lambda day: None if dob is None else day.year - dob.year,
            program_enrollments=enrollments,
        )

    def test_population(self):
        today = date(2025, 6, 1)
        profiles = [
            self.profile("female", date(2015, 1, 1), "IGCSE"),
            self.profile("male", date(2018, 1, 1), "IGCSE", "BNC"),
            self.profile("female", date(2008, 1, 1), "BNC", "BNC"),
            self.profile(None, None),
        ]

        stats = summarize_demographics(profiles, today)

        assert stats.total_students == 4
        assert stats.gender == {"male": 1, "female": 2, "other": 0, UNKNOWN: 1}
        assert stats.gender_percentages["female"] == 50.0
        assert stats.age_groups == {
            "under-5": 0,
            "5-8": 1,
            "9-12": 1,
            "13-16": 0,
            "17-plus": 1,
            UNKNOWN: 1,
        }
        assert stats.by_curriculum == {"IGCSE": 2, "BNC": 2}
        assert stats.largest_curriculum == "IGCSE"

    def test_empty_population(self):
        stats = summarize_demographics([], date(2025, 1, 1))

        assert stats.total_students == 0
        assert stats.gender_percentages == {"male": 0.0, "female": 0.0, "other": 0.0}
        assert stats.largest_curriculum is None
