"""
Tutor analytics I/O models.
"""

import datetime as dt
from typing import List, Optional

from .common import APIModel
from .users import UserSummary


class ReportPeriod(APIModel):
    period: str
    start_date: dt.datetime
    end_date: dt.datetime


class OverviewSection(APIModel):
    total_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    no_show_sessions: int
    upcoming_sessions: int
    total_hours: float
    average_session_minutes: float
    total_earnings: float
    completion_rate: float


class TopStudent(APIModel):
    student: UserSummary
    completed_sessions: int
    total_sessions: int


class StudentsSection(APIModel):
    total_students: int
    new_students: int
    top_students: List[TopStudent]


class RatingsSection(APIModel):
    average_rating: float
    total_reviews: int
    five_star_reviews: int
    four_plus_reviews: int
    positive_percent: float


class SubjectBreakdown(APIModel):
    subject_id: Optional[str] = None
    subject_name: str
    sessions: int
    completed_sessions: int
    hours: float
    earnings: float


class DailyTrend(APIModel):
    date: dt.date
    sessions: int
    completed_sessions: int
    earnings: float


class TrendsSection(APIModel):
    daily: List[DailyTrend]


class Dashboard(APIModel):
    tutor_id: str
    period: ReportPeriod
    overview: OverviewSection
    students: StudentsSection
    ratings: RatingsSection
    subjects: List[SubjectBreakdown]
    trends: TrendsSection


class MonthlyEarnings(APIModel):
    month: str
    sessions: int
    session_earnings: float
    payment_count: int
    payments_received: float


class EarningsReport(APIModel):
    tutor_id: str
    period: ReportPeriod
    completed_sessions: int
    total_session_earnings: float
    total_payments_received: float
    monthly: List[MonthlyEarnings]


class StudentProgress(APIModel):
    student: UserSummary
    total_sessions: int
    completed_sessions: int
    total_hours: float
    average_rating_given: Optional[float] = None
    last_session_at: Optional[dt.datetime] = None


class StudentProgressList(APIModel):
    tutor_id: str
    students: List[StudentProgress]
