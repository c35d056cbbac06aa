"""
Report Pydantic Schemas

Structured metrics returned by the report builders and serialized by the
API. Breakdown tables are plain mappings keyed by the grouped dimension.
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class ReportWindow(BaseModel):
    """Resolved, inclusive date window (both None when unconstrained)."""

    start: date | None = None
    end: date | None = None


class ReportBase(BaseModel):
    filters: dict[str, str] = Field(default_factory=dict, description="Applied query filters")
    window: ReportWindow = Field(default_factory=ReportWindow)


# ============================================================================
# Attendance
# ============================================================================


class StudentAttendanceRate(BaseModel):
    student_id: UUID | None = None
    student_name: str
    total_sessions: int
    present_sessions: int
    attendance_rate: float


class AttendanceReport(ReportBase):
    total_attendances: int = 0
    present_count: int = 0
    absent_count: int = 0
    late_count: int = 0
    excused_count: int = 0
    attendance_rate: float = 0.0
    subject_breakdown: dict[str, dict[str, int]] = Field(default_factory=dict)
    daily_breakdown: dict[str, dict[str, int]] = Field(default_factory=dict)
    teacher_breakdown: dict[str, dict[str, int]] = Field(default_factory=dict)
    student_attendance_rates: list[StudentAttendanceRate] = Field(default_factory=list)


# ============================================================================
# Exams
# ============================================================================


class SubjectPerformance(BaseModel):
    total_results: int
    average_score: float
    highest_score: float
    lowest_score: float
    pass_rate: float


class StudentPerformance(BaseModel):
    student_id: UUID | None = None
    student_name: str
    total_exams: int
    average_score: float
    highest_score: float
    lowest_score: float
    improvement_trend: str


class ExamDifficulty(BaseModel):
    exam_id: UUID | None = None
    exam_title: str
    exam_date: date | None = None
    subject: str
    total_students: int
    average_score: float
    difficulty: str
    pass_rate: float


class ExamReport(ReportBase):
    total_results: int = 0
    total_exams: int = 0
    total_students: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    grade_distribution: dict[str, int] = Field(default_factory=dict)
    pass_rate: float = 0.0
    subject_performance: dict[str, SubjectPerformance] = Field(default_factory=dict)
    student_performance: list[StudentPerformance] = Field(default_factory=list)
    exam_difficulty: list[ExamDifficulty] = Field(default_factory=list)


# ============================================================================
# Finance
# ============================================================================


class MonthlyRevenue(BaseModel):
    month: str
    label: str
    total: float
    count: int


class RecentPayment(BaseModel):
    id: UUID
    student: str
    amount: float
    payment_method: str
    payment_date: date
    academic_year: str
    curriculum: str


class FinanceOverview(BaseModel):
    total_revenue: float = 0.0
    payment_count: int = 0
    invoice_count: int = 0
    average_payment: float = 0.0
    by_month: list[MonthlyRevenue] = Field(default_factory=list)
    recent_payments: list[RecentPayment] = Field(default_factory=list)


class PaymentAnalysis(BaseModel):
    count: int = 0
    total: float = 0.0
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    by_method: dict[str, dict[str, float]] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)


class InvoiceAnalysis(BaseModel):
    total_invoices: int = 0
    paid_invoices: int = 0
    collection_rate: float = 0.0
    total_invoiced: float = 0.0
    outstanding_amount: float = 0.0
    count_by_status: dict[str, int] = Field(default_factory=dict)
    amount_by_status: dict[str, float] = Field(default_factory=dict)


class FinanceTrends(BaseModel):
    monthly: list[MonthlyRevenue] = Field(default_factory=list)
    current_total: float = 0.0
    previous_total: float | None = None
    growth_rate: float = 0.0


class FinanceReport(ReportBase):
    overview: FinanceOverview = Field(default_factory=FinanceOverview)
    payments: PaymentAnalysis = Field(default_factory=PaymentAnalysis)
    invoices: InvoiceAnalysis = Field(default_factory=InvoiceAnalysis)
    curriculum_revenue: dict[str, dict[str, float]] = Field(default_factory=dict)
    trends: FinanceTrends = Field(default_factory=FinanceTrends)


# ============================================================================
# Students
# ============================================================================


class MonthlyCount(BaseModel):
    month: str
    label: str
    count: int


class EnrollmentStats(BaseModel):
    total_enrollments: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_curriculum: dict[str, int] = Field(default_factory=dict)
    by_month: list[MonthlyCount] = Field(default_factory=list)
    previous_enrollments: int | None = None
    growth_rate: float = 0.0
    total_subject_enrollments: int = 0
    avg_subjects_per_student: float = 0.0


class SubjectAttendance(BaseModel):
    subject: str
    total: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: float


class WeeklyAttendance(BaseModel):
    week_start: date
    label: str
    attendance_rate: float


class StudentAttendanceStats(BaseModel):
    total_sessions: int = 0
    total_attendance_records: int = 0
    attendance_rate: float = 0.0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_subject: list[SubjectAttendance] = Field(default_factory=list)
    highest_attendance_subjects: list[SubjectAttendance] = Field(default_factory=list)
    lowest_attendance_subjects: list[SubjectAttendance] = Field(default_factory=list)
    weekly_trend: list[WeeklyAttendance] = Field(default_factory=list)


class SubjectGrades(BaseModel):
    subject: str
    grades: dict[str, int]
    average_gpa: float
    pass_rate: float


class PerformanceStats(BaseModel):
    total_results: int = 0
    overall_gpa: float = 0.0
    pass_rate: float = 0.0
    grade_distribution: dict[str, int] = Field(default_factory=dict)
    by_subject: list[SubjectGrades] = Field(default_factory=list)
    top_subjects: list[SubjectGrades] = Field(default_factory=list)
    subjects_needing_improvement: list[SubjectGrades] = Field(default_factory=list)


class Demographics(BaseModel):
    total_students: int = 0
    gender: dict[str, int] = Field(default_factory=dict)
    gender_percentages: dict[str, float] = Field(default_factory=dict)
    age_groups: dict[str, int] = Field(default_factory=dict)
    by_curriculum: dict[str, int] = Field(default_factory=dict)
    largest_curriculum: str | None = None


class StudentReport(ReportBase):
    enrollment: EnrollmentStats = Field(default_factory=EnrollmentStats)
    attendance: StudentAttendanceStats = Field(default_factory=StudentAttendanceStats)
    performance: PerformanceStats = Field(default_factory=PerformanceStats)
    demographics: Demographics = Field(default_factory=Demographics)
