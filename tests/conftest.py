"""
Pytest Configuration and Fixtures

Shared fixtures: a per-test SQLite database and a small, hand-built school
whose report figures can be worked out on paper.
"""

import os

# The app-level engine is created at import time; keep it off PostgreSQL in tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import UTC, date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import configure_mappers

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
from academy.reporting.clock import FixedClock

# Ensure all mappers are configured
configure_mappers()

TODAY = date(2025, 3, 15)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to TODAY."""
    return FixedClock(TODAY)


@pytest.fixture
async def async_engine(tmp_path):
    """Create async engine for testing."""
    database_url = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


def _created(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 10, 0, tzinfo=UTC)


@pytest.fixture
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """Two years, two curricula, three subjects, four students.

    Attendance (7 records, one with its session deleted):
        s1 math 2025-03-03  alice present, ben late
        s2 math 2025-03-10  alice absent,  ben present
        s3 physics 2025-03-04  alice present
        s4 english 2025-02-10  cara excused
        (no session)  ben present

    Exam results: e1 math 2025-01-20 alice 95 / ben 55; e2 math 2025-03-05
    alice 85 / ben 72; e3 physics 2025-02-15 alice 65; e4 english
    2024-05-10 (previous year) cara 40.

    Invoices: alice 1000 paid (payment 1000 card), ben 1000 partially_paid
    (400 cash completed, 100 card failed), cara 800 overdue, alice 900 paid
    in the previous year (900 bank_transfer).
    """
    previous_year = AcademicYear(
        name="2023-2024", start_date=date(2023, 9, 1), end_date=date(2024, 7, 31)
    )
    current_year = AcademicYear(
        name="2024-2025", start_date=date(2024, 9, 1), end_date=date(2025, 7, 31), is_current=True
    )

    igcse = Curriculum(name="Cambridge IGCSE", code="IGCSE")
    bnc = Curriculum(name="British National Curriculum", code="BNC")
    math = Subject(name="Mathematics", code="IG-MATH", curriculum=igcse)
    physics = Subject(name="Physics", code="IG-PHY", curriculum=igcse)
    english = Subject(name="English", code="BN-ENG", curriculum=bnc)

    mensah = TeacherProfile(name="Amina Mensah", department="Mathematics")
    okafor = TeacherProfile(name="David Okafor", department="Sciences")

    alice = ChildProfile(
        first_name="Alice", last_name="Asante", date_of_birth=date(2015, 5, 1), gender="female"
    )
    ben = ChildProfile(
        first_name="Ben", last_name="Brown", date_of_birth=date(2018, 1, 10), gender="male"
    )
    cara = ChildProfile(
        first_name="Cara", last_name="Chen", date_of_birth=date(2008, 6, 1), gender="female"
    )
    dan = ChildProfile(first_name="Dan")

    alice_current = ProgramEnrollment(
        child_profile=alice,
        curriculum=igcse,
        academic_year=current_year,
        status="active",
        created_at=_created(2024, 9, 2),
        subject_enrollments=[SubjectEnrollment(subject=math), SubjectEnrollment(subject=physics)],
    )
    alice_previous = ProgramEnrollment(
        child_profile=alice,
        curriculum=igcse,
        academic_year=previous_year,
        status="completed",
        created_at=_created(2023, 9, 5),
    )
    ben_current = ProgramEnrollment(
        child_profile=ben,
        curriculum=igcse,
        academic_year=current_year,
        status="active",
        created_at=_created(2025, 2, 20),
        subject_enrollments=[SubjectEnrollment(subject=math)],
    )
    cara_current = ProgramEnrollment(
        child_profile=cara,
        curriculum=bnc,
        academic_year=current_year,
        status="withdrawn",
        created_at=_created(2025, 3, 1),
        subject_enrollments=[SubjectEnrollment(subject=english)],
    )

    s1 = ClassSession(
        subject=math,
        teacher_profile=mensah,
        start_time=datetime(2025, 3, 3, 9),
        end_time=datetime(2025, 3, 3, 10),
    )
    s2 = ClassSession(
        subject=math,
        teacher_profile=mensah,
        start_time=datetime(2025, 3, 10, 9),
        end_time=datetime(2025, 3, 10, 10),
    )
    s3 = ClassSession(
        subject=physics,
        teacher_profile=okafor,
        start_time=datetime(2025, 3, 4, 11),
        end_time=datetime(2025, 3, 4, 12),
        type="recorded",
    )
    s4 = ClassSession(
        subject=english,
        teacher_profile=mensah,
        start_time=datetime(2025, 2, 10, 14),
        end_time=datetime(2025, 2, 10, 15),
    )
    attendances = [
        Attendance(session=s1, child_profile=alice, status="present"),
        Attendance(session=s1, child_profile=ben, status="late"),
        Attendance(session=s2, child_profile=alice, status="absent"),
        Attendance(session=s2, child_profile=ben, status="present"),
        Attendance(session=s3, child_profile=alice, status="present"),
        Attendance(session=s4, child_profile=cara, status="excused"),
        Attendance(session=None, child_profile=ben, status="present"),
    ]

    e1 = Exam(
        subject=math,
        teacher_profile=mensah,
        academic_year=current_year,
        title="Mathematics Midterm",
        exam_date=date(2025, 1, 20),
        type="midterm",
    )
    e2 = Exam(
        subject=math,
        teacher_profile=mensah,
        academic_year=current_year,
        title="Mathematics Final",
        exam_date=date(2025, 3, 5),
        type="final",
    )
    e3 = Exam(
        subject=physics,
        teacher_profile=okafor,
        academic_year=current_year,
        title="Physics Quiz",
        exam_date=date(2025, 2, 15),
    )
    e4 = Exam(
        subject=english,
        teacher_profile=mensah,
        academic_year=previous_year,
        title="English Final",
        exam_date=date(2024, 5, 10),
        type="final",
    )
    results = [
        ExamResult(exam=e1, child_profile=alice, score=95),
        ExamResult(exam=e1, child_profile=ben, score=55),
        ExamResult(exam=e2, child_profile=alice, score=85),
        ExamResult(exam=e2, child_profile=ben, score=72),
        ExamResult(exam=e3, child_profile=alice, score=65),
        ExamResult(exam=e4, child_profile=cara, score=40),
    ]

    inv_alice = Invoice(
        invoice_number="INV-202501-0001",
        amount=Decimal("1000.00"),
        invoice_date=date(2025, 1, 5),
        paid_date=date(2025, 1, 10),
        status="paid",
        child_profile=alice,
        academic_year=current_year,
        curriculum=igcse,
        program_enrollment=alice_current,
    )
    inv_ben = Invoice(
        invoice_number="INV-202502-0001",
        amount=Decimal("1000.00"),
        invoice_date=date(2025, 2, 1),
        status="partially_paid",
        child_profile=ben,
        academic_year=current_year,
        curriculum=igcse,
        program_enrollment=ben_current,
    )
    inv_cara = Invoice(
        invoice_number="INV-202503-0001",
        amount=Decimal("800.00"),
        invoice_date=date(2025, 3, 1),
        status="overdue",
        child_profile=cara,
        academic_year=current_year,
        curriculum=bnc,
        program_enrollment=cara_current,
    )
    inv_alice_previous = Invoice(
        invoice_number="INV-202402-0001",
        amount=Decimal("900.00"),
        invoice_date=date(2024, 2, 1),
        paid_date=date(2024, 2, 3),
        status="paid",
        child_profile=alice,
        academic_year=previous_year,
        curriculum=igcse,
        program_enrollment=alice_previous,
    )

    def payment(invoice, amount, day, method, status="completed"):
        return Payment(
            invoice=invoice,
            child_profile=invoice.child_profile,
            academic_year=invoice.academic_year,
            curriculum=invoice.curriculum,
            amount=Decimal(amount),
            payment_date=day,
            status=status,
            payment_method=method,
        )

    payments = [
        payment(inv_alice, "1000.00", date(2025, 1, 10), "card"),
        payment(inv_ben, "400.00", date(2025, 2, 15), "cash"),
        payment(inv_ben, "100.00", date(2025, 3, 1), "card", status="failed"),
        payment(inv_alice_previous, "900.00", date(2024, 2, 3), "bank_transfer"),
    ]

    db_session.add_all(
        [previous_year, current_year, igcse, bnc, mensah, okafor, alice, ben, cara, dan]
    )
    db_session.add_all([alice_current, alice_previous, ben_current, cara_current])
    db_session.add_all([s1, s2, s3, s4, *attendances])
    db_session.add_all([e1, e2, e3, e4, *results])
    db_session.add_all([inv_alice, inv_ben, inv_cara, inv_alice_previous, *payments])
    await db_session.commit()

    data = SimpleNamespace(
        previous_year=previous_year,
        current_year=current_year,
        igcse=igcse,
        bnc=bnc,
        math=math,
        physics=physics,
        english=english,
        mensah=mensah,
        okafor=okafor,
        alice=alice,
        ben=ben,
        cara=cara,
        dan=dan,
        exams=SimpleNamespace(e1=e1, e2=e2, e3=e3, e4=e4),
    )
    # Reports must load everything themselves
    db_session.expunge_all()
    return data
