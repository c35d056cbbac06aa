"""
Demo Data Seeder

Generates a referentially consistent demo school: two academic years,
curricula with subjects, teachers, students, enrollments, a few weeks of
sessions with attendance, exams with results, and invoices with payments.

Used by scripts/seed_demo_data.py and by tests; reports never depend on it.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import delete

from academy.core.models import (
    AcademicYear,
    Attendance,
    Base,
    ChildProfile,
    ClassSession,
    Curriculum,
    Exam,
    ExamResult,
    Invoice,
    Payment,
    ProgramEnrollment,
    Subject,
    SubjectEnrollment,
    TeacherProfile,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# ============================================================================
# Distributions
# ============================================================================

INVOICE_STATUS_WEIGHTS = {
    "draft": 5,
    "sent": 15,
    "partially_paid": 25,
    "paid": 45,
    "overdue": 10,
}
ATTENDANCE_STATUS_WEIGHTS = {"present": 75, "late": 10, "absent": 10, "excused": 5}
ENROLLMENT_STATUS_WEIGHTS = {"active": 70, "completed": 10, "inactive": 10, "withdrawn": 10}
PAYMENT_METHOD_WEIGHTS = {
    "bank_transfer": 35,
    "card": 25,
    "mobile_money": 20,
    "cash": 15,
    "cheque": 5,
}
GENDER_WEIGHTS = {"female": 48, "male": 48, "other": 4}

# Free-text formats as typed by staff -> the two stored session types
LIVE_FORMATS = frozenset({"live", "in_person", "online", "hybrid", "virtual", "classroom"})
RECORDED_FORMATS = frozenset({"recorded", "video", "on_demand", "self_paced"})
RAW_SESSION_FORMATS = ("in_person", "Online", "hybrid", "live", "recorded", "video", "on-demand")

CURRICULA: dict[str, tuple[str, Decimal, tuple[str, ...]]] = {
    "IGCSE": (
        "Cambridge IGCSE",
        Decimal("1450.00"),
        ("Mathematics", "English Language", "Physics", "Chemistry", "Biology"),
    ),
    "BNC": (
        "British National Curriculum",
        Decimal("1200.00"),
        ("Mathematics", "English", "Science", "History", "Geography"),
    ),
    "ACC": (
        "American Common Core",
        Decimal("1300.00"),
        ("Algebra", "Language Arts", "Earth Science", "World History"),
    ),
}

TEACHERS = (
    ("Amina Mensah", "Mathematics"),
    ("David Okafor", "Sciences"),
    ("Sarah Whitfield", "Languages"),
    ("Kwame Boateng", "Humanities"),
    ("Lucia Fernandez", "Sciences"),
    ("Tom Harrington", "Mathematics"),
)

FIRST_NAMES = (
    "Ava", "Liam", "Zara", "Noah", "Maya", "Ethan", "Nia", "Omar", "Leah", "Kofi",
    "Isla", "Yusuf", "Chloe", "Arjun", "Ama", "Lucas", "Sofia", "Daniel", "Ife", "Mila",
)
LAST_NAMES = (
    "Asante", "Brown", "Chen", "Diallo", "Evans", "Fofana", "Garcia", "Hughes",
    "Ito", "Johnson", "Kamara", "Lopez", "Mensah", "Nkosi", "Owusu", "Patel",
)

SESSION_HOURS = (9, 11, 14)
SESSION_WEEKS = 8


# ============================================================================
# Helpers
# ============================================================================


def weighted_choice(table: Mapping[str, int], rng: random.Random) -> str:
    """Draw a key with probability proportional to its weight.

    Raises:
        ValueError: If the weights do not sum to a positive number
    """
    total = sum(table.values())
    if total <= 0:
        raise ValueError("Weighted choice needs at least one positive weight")

    pick = rng.uniform(0, total)
    cumulative = 0
    for key, weight in table.items():
        cumulative += weight
        if pick < cumulative:
            return key
    # pick == total (uniform is inclusive of the upper bound)
    return next(key for key, weight in reversed(table.items()) if weight > 0)


def normalize_session_type(value: str | None) -> str:
    """Map a free-text session format onto 'live' or 'recorded'.

    Unrecognized or empty formats count as live.
    """
    if not value:
        return "live"
    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    if normalized in RECORDED_FORMATS:
        return "recorded"
    if normalized not in LIVE_FORMATS:
        logger.debug(f"Unknown session format {value!r}, treating as live")
    return "live"


def academic_year_bounds(today: date, years_back: int = 0) -> tuple[date, date]:
    """September-to-July school year containing `today`, shifted back `years_back` years."""
    start_year = (today.year if today.month >= 9 else today.year - 1) - years_back
    return date(start_year, 9, 1), date(start_year + 1, 7, 31)


def random_birth_date(rng: random.Random, today: date, min_age: int, max_age: int) -> date:
    age_days = rng.randint(min_age * 365, max_age * 365 + 364)
    return today - timedelta(days=age_days)


def random_day(rng: random.Random, start: date, end: date) -> date:
    if end <= start:
        return start
    return start + timedelta(days=rng.randint(0, (end - start).days))


def _sample(rng: random.Random, items: Sequence, low: int, high: int) -> list:
    return rng.sample(list(items), min(len(items), rng.randint(low, high)))


# ============================================================================
# Seeding
# ============================================================================


async def reset_demo_data(db: AsyncSession) -> None:
    """Delete every row, children before parents."""
    for table in reversed(Base.metadata.sorted_tables):
        await db.execute(delete(table))
    await db.commit()
    logger.info("Demo data cleared")


async def seed_demo_data(
    db: AsyncSession,
    rng: random.Random | None = None,
    *,
    today: date | None = None,
    students: int = 40,
) -> dict[str, int]:
    """Create a demo school and commit it.

    Returns:
        Number of rows created per entity
    """
    rng = rng or random.Random()
    today = today or date.today()
    counts: dict[str, int] = {}

    # Academic years
    current_start, current_end = academic_year_bounds(today)
    previous_start, previous_end = academic_year_bounds(today, years_back=1)
    current_year = AcademicYear(
        name=f"{current_start.year}-{current_end.year}",
        start_date=current_start,
        end_date=current_end,
        is_current=True,
    )
    previous_year = AcademicYear(
        name=f"{previous_start.year}-{previous_end.year}",
        start_date=previous_start,
        end_date=previous_end,
        is_current=False,
    )
    db.add_all([previous_year, current_year])
    counts["academic_years"] = 2

    # Curricula, subjects and teachers
    teachers = [
        TeacherProfile(
            name=name,
            department=department,
            specialization=department,
            qualification=rng.choice(("BEd", "BSc", "MA", "MSc", "PGCE")),
            experience_years=rng.randint(1, 25),
        )
        for name, department in TEACHERS
    ]
    db.add_all(teachers)

    curricula: list[tuple[Curriculum, Decimal]] = []
    subjects_by_curriculum: dict[str, list[Subject]] = {}
    for code, (name, fee, subject_names) in CURRICULA.items():
        curriculum = Curriculum(name=name, code=code)
        subjects = []
        for index, subject_name in enumerate(subject_names):
            subject = Subject(
                name=subject_name,
                code=f"{code}-{index + 1:02d}",
                curriculum=curriculum,
                level=rng.choice(("Foundation", "Intermediate", "Advanced")),
            )
            subject.teachers = rng.sample(teachers, 2)
            subjects.append(subject)
        db.add(curriculum)
        curricula.append((curriculum, fee))
        subjects_by_curriculum[code] = subjects
    counts["curricula"] = len(curricula)
    counts["subjects"] = sum(len(subjects) for subjects in subjects_by_curriculum.values())
    counts["teachers"] = len(teachers)

    # Students and enrollments
    children = []
    enrollments = []
    enrolled_by_subject: dict[int, list[ChildProfile]] = {}
    for _ in range(students):
        child = ChildProfile(
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
            date_of_birth=random_birth_date(rng, today, 4, 18),
            gender=weighted_choice(GENDER_WEIGHTS, rng),
        )
        children.append(child)

        curriculum, fee = rng.choice(curricula)
        enrollment = ProgramEnrollment(
            child_profile=child,
            curriculum=curriculum,
            academic_year=current_year,
            status=weighted_choice(ENROLLMENT_STATUS_WEIGHTS, rng),
            created_at=datetime.combine(
                random_day(rng, current_start, min(today, current_end)), time(10)
            ).astimezone(),
        )
        for subject in _sample(rng, subjects_by_curriculum[curriculum.code], 2, 4):
            enrollment.subject_enrollments.append(SubjectEnrollment(subject=subject))
            enrolled_by_subject.setdefault(id(subject), []).append(child)
        enrollments.append((enrollment, fee))

        # Returning students also carry last year's (completed) enrollment
        if rng.random() < 0.4:
            enrollments.append(
                (
                    ProgramEnrollment(
                        child_profile=child,
                        curriculum=curriculum,
                        academic_year=previous_year,
                        status="completed",
                        created_at=datetime.combine(previous_start, time(10)).astimezone(),
                    ),
                    fee,
                )
            )
    db.add_all(children)
    db.add_all(enrollment for enrollment, _ in enrollments)
    counts["students"] = len(children)
    counts["enrollments"] = len(enrollments)
    counts["subject_enrollments"] = sum(
        len(enrollment.subject_enrollments) for enrollment, _ in enrollments
    )

    # Sessions and attendance over the last few weeks
    sessions = []
    attendances = []
    all_subjects = [subject for subjects in subjects_by_curriculum.values() for subject in subjects]
    for subject in all_subjects:
        for week in range(SESSION_WEEKS):
            day = today - timedelta(days=7 * (SESSION_WEEKS - week) - rng.randint(0, 4))
            start = datetime.combine(day, time(rng.choice(SESSION_HOURS)))
            session = ClassSession(
                subject=subject,
                teacher_profile=rng.choice(subject.teachers),
                start_time=start,
                end_time=start + timedelta(hours=1),
                type=normalize_session_type(rng.choice(RAW_SESSION_FORMATS)),
            )
            sessions.append(session)
            for child in enrolled_by_subject.get(id(subject), []):
                attendances.append(
                    Attendance(
                        session=session,
                        child_profile=child,
                        status=weighted_choice(ATTENDANCE_STATUS_WEIGHTS, rng),
                    )
                )
    db.add_all(sessions)
    db.add_all(attendances)
    counts["sessions"] = len(sessions)
    counts["attendances"] = len(attendances)

    # Exams and results
    exams = []
    results = []
    exam_period_start = max(current_start, today - timedelta(days=120))
    for subject in all_subjects:
        for exam_type in ("midterm", "final"):
            exam = Exam(
                subject=subject,
                teacher_profile=rng.choice(subject.teachers),
                academic_year=current_year,
                title=f"{subject.name} {exam_type.title()}",
                exam_date=random_day(rng, exam_period_start, today),
                type=exam_type,
            )
            exams.append(exam)
            for child in enrolled_by_subject.get(id(subject), []):
                results.append(
                    ExamResult(
                        exam=exam,
                        child_profile=child,
                        score=round(rng.uniform(35, 100), 2),
                    )
                )
    db.add_all(exams)
    db.add_all(results)
    counts["exams"] = len(exams)
    counts["exam_results"] = len(results)

    # Invoices and payments for the current year
    invoices = 0
    payments = 0
    for enrollment, fee in enrollments:
        if enrollment.academic_year is not current_year:
            continue
        status = weighted_choice(INVOICE_STATUS_WEIGHTS, rng)
        invoice_date = random_day(rng, current_start, today)
        invoice = Invoice(
            invoice_number=await Invoice.next_invoice_number(db, invoice_date),
            amount=fee,
            invoice_date=invoice_date,
            due_date=invoice_date + timedelta(days=30),
            status=status,
            child_profile=enrollment.child_profile,
            academic_year=current_year,
            curriculum=enrollment.curriculum,
            program_enrollment=enrollment,
        )
        db.add(invoice)
        invoices += 1

        if status in ("paid", "partially_paid"):
            share = Decimal("1") if status == "paid" else Decimal(rng.randint(30, 70)) / 100
            payment_date = random_day(rng, invoice_date, today)
            if status == "paid":
                invoice.paid_date = payment_date
            db.add(
                Payment(
                    invoice=invoice,
                    child_profile=enrollment.child_profile,
                    academic_year=current_year,
                    curriculum=enrollment.curriculum,
                    amount=(fee * share).quantize(Decimal("0.01")),
                    payment_date=payment_date,
                    due_date=invoice.due_date,
                    status="completed",
                    payment_method=weighted_choice(PAYMENT_METHOD_WEIGHTS, rng),
                    reference_number=f"PAY-{rng.randint(100000, 999999)}",
                )
            )
            payments += 1
        elif status == "overdue":
            db.add(
                Payment(
                    invoice=invoice,
                    child_profile=enrollment.child_profile,
                    academic_year=current_year,
                    curriculum=enrollment.curriculum,
                    amount=fee,
                    payment_date=random_day(rng, invoice_date, today),
                    due_date=invoice.due_date,
                    status="failed",
                    payment_method=weighted_choice(PAYMENT_METHOD_WEIGHTS, rng),
                    notes="Card declined",
                )
            )
            payments += 1
    counts["invoices"] = invoices
    counts["payments"] = payments

    await db.commit()
    logger.info(f"Seeded demo data: {counts}")
    return counts
