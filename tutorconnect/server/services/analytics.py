"""
Tutor analytics aggregation.

Reports are computed in Python over already-loaded rows so the same code runs
against SQLite and PostgreSQL. The router loads a tutor's sessions, reviews and
payments and hands them to the builders here.

Money for a session is its price (hourly rate times booked hours); only
``completed`` sessions count towards hours and earnings.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from tutorconnect.core.database.entities.payments import Payment, PaymentState
from tutorconnect.core.database.entities.reviews import ReviewerType, SessionReview
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, TutoringSession
from tutorconnect.core.models.io.analytics import (
    DailyTrend,
    MonthlyEarnings,
    OverviewSection,
    RatingsSection,
    StudentProgress,
    StudentsSection,
    SubjectBreakdown,
    TopStudent,
)
from tutorconnect.core.models.io.users import UserSummary

from .bookings import session_amount

PERIOD_DAYS = {"week": 7, "month": 30, "quarter": 90, "year": 365}
DEFAULT_PERIOD = "month"
TREND_DAYS = 30
TOP_STUDENTS = 10
NO_SUBJECT = "General"


@dataclass(frozen=True)
class ReportWindow:
    """Half-open ``[start, end)`` interval a report covers."""

    period: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def resolve_window(
    period: Optional[str], start_date: Optional[date], end_date: Optional[date], now: datetime
) -> ReportWindow:
    """
    Reporting interval for a named period or an explicit date range.

    An explicit range wins over ``period`` and includes both end dates. A named
    period ends now and reaches back a fixed number of days.

    Raises:
        ValueError: When the range is reversed or the period is unknown
    """
    if start_date is not None or end_date is not None:
        first = start_date or (end_date - timedelta(days=PERIOD_DAYS[DEFAULT_PERIOD]))  # type: ignore[operator]
        last = end_date or now.date()
        if last < first:
            raise ValueError("endDate must not be before startDate")
        return ReportWindow(
            period="custom",
            start=datetime.combine(first, time.min),
            end=datetime.combine(last + timedelta(days=1), time.min),
        )

    name = period or DEFAULT_PERIOD
    if name not in PERIOD_DAYS:
        raise ValueError("Period must be week, month, quarter, or year")
    return ReportWindow(period=name, start=now - timedelta(days=PERIOD_DAYS[name]), end=now)


def _hours(bookings: Iterable[TutoringSession]) -> float:
    return sum(b.duration_minutes for b in bookings) / 60


def _completed(bookings: Iterable[TutoringSession]) -> List[TutoringSession]:
    return [b for b in bookings if b.status == SessionStatus.COMPLETED.value]


def _earnings(bookings: Iterable[TutoringSession]) -> float:
    return round(sum(session_amount(b) for b in _completed(bookings)), 2)


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def build_overview(bookings: Sequence[TutoringSession], now: datetime) -> OverviewSection:
    completed = _completed(bookings)
    minutes = [b.duration_minutes for b in completed]
    return OverviewSection(
        total_sessions=len(bookings),
        completed_sessions=len(completed),
        cancelled_sessions=sum(1 for b in bookings if b.status == SessionStatus.CANCELLED.value),
        no_show_sessions=sum(1 for b in bookings if b.status == SessionStatus.NO_SHOW.value),
        upcoming_sessions=sum(
            1 for b in bookings if b.status == SessionStatus.SCHEDULED.value and b.scheduled_start > now
        ),
        total_hours=round(_hours(completed), 2),
        average_session_minutes=round(sum(minutes) / len(minutes), 2) if minutes else 0.0,
        total_earnings=_earnings(bookings),
        completion_rate=_percent(len(completed), len(bookings)),
    )


def build_students(
    in_window: Sequence[TutoringSession],
    all_bookings: Sequence[TutoringSession],
    window: ReportWindow,
    students: Dict[str, UserSummary],
) -> StudentsSection:
    """Distinct students in the window; "new" ones had their first session with the tutor inside it."""
    first_seen: Dict[str, datetime] = {}
    for booking in all_bookings:
        seen = first_seen.get(booking.student_id)
        if seen is None or booking.scheduled_start < seen:
            first_seen[booking.student_id] = booking.scheduled_start

    totals: Dict[str, int] = defaultdict(int)
    completed: Dict[str, int] = defaultdict(int)
    for booking in in_window:
        totals[booking.student_id] += 1
        if booking.status == SessionStatus.COMPLETED.value:
            completed[booking.student_id] += 1

    ranked = sorted(totals, key=lambda sid: (-completed[sid], -totals[sid], sid))
    top = [
        TopStudent(student=students[sid], completed_sessions=completed[sid], total_sessions=totals[sid])
        for sid in ranked
        if sid in students
    ][:TOP_STUDENTS]
    return StudentsSection(
        total_students=len(totals),
        new_students=sum(1 for sid in totals if window.contains(first_seen[sid])),
        top_students=top,
    )


def build_ratings(reviews: Sequence[SessionReview]) -> RatingsSection:
    """Summary of student reviews; other reviews are ignored."""
    ratings = [r.rating for r in reviews if r.reviewer_type == ReviewerType.STUDENT.value]
    four_plus = sum(1 for rating in ratings if rating >= 4)
    return RatingsSection(
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        total_reviews=len(ratings),
        five_star_reviews=sum(1 for rating in ratings if rating == 5),
        four_plus_reviews=four_plus,
        positive_percent=_percent(four_plus, len(ratings)),
    )


def build_subjects(bookings: Sequence[TutoringSession], subject_names: Dict[str, str]) -> List[SubjectBreakdown]:
    """Per-subject breakdown, busiest subject first."""
    grouped: Dict[Optional[str], List[TutoringSession]] = defaultdict(list)
    for booking in bookings:
        grouped[booking.subject_id].append(booking)

    rows = [
        SubjectBreakdown(
            subject_id=subject_id,
            subject_name=subject_names.get(subject_id, NO_SUBJECT) if subject_id else NO_SUBJECT,
            sessions=len(items),
            completed_sessions=len(_completed(items)),
            hours=round(_hours(_completed(items)), 2),
            earnings=_earnings(items),
        )
        for subject_id, items in grouped.items()
    ]
    return sorted(rows, key=lambda row: (-row.sessions, row.subject_name))


def build_daily_trends(bookings: Sequence[TutoringSession], today: date, days: int = TREND_DAYS) -> List[DailyTrend]:
    """One entry per day for the trailing ``days`` days ending today, zero-filled."""
    by_day: Dict[date, List[TutoringSession]] = defaultdict(list)
    for booking in bookings:
        by_day[booking.scheduled_start.date()].append(booking)

    first = today - timedelta(days=days - 1)
    trends = []
    for offset in range(days):
        day = first + timedelta(days=offset)
        items = by_day.get(day, [])
        trends.append(
            DailyTrend(
                date=day,
                sessions=len(items),
                completed_sessions=len(_completed(items)),
                earnings=_earnings(items),
            )
        )
    return trends


def build_monthly_earnings(
    bookings: Sequence[TutoringSession], payments: Sequence[Payment]
) -> List[MonthlyEarnings]:
    """Completed-session earnings and completed payments received, per calendar month, oldest first."""
    months: Dict[str, MonthlyEarnings] = {}

    def _month(key: str) -> MonthlyEarnings:
        if key not in months:
            months[key] = MonthlyEarnings(
                month=key, sessions=0, session_earnings=0.0, payment_count=0, payments_received=0.0
            )
        return months[key]

    for booking in _completed(bookings):
        row = _month(booking.scheduled_start.strftime("%Y-%m"))
        row.sessions += 1
        row.session_earnings = round(row.session_earnings + session_amount(booking), 2)
    for payment in payments:
        if payment.status != PaymentState.COMPLETED.value:
            continue
        row = _month(payment.created_at.strftime("%Y-%m"))
        row.payment_count += 1
        row.payments_received = round(row.payments_received + payment.amount, 2)
    return [months[key] for key in sorted(months)]


def build_student_progress(
    bookings: Sequence[TutoringSession],
    reviews: Sequence[SessionReview],
    students: Dict[str, UserSummary],
) -> List[StudentProgress]:
    """Per-student totals for a tutor, most recently seen student first."""
    grouped: Dict[str, List[TutoringSession]] = defaultdict(list)
    for booking in bookings:
        grouped[booking.student_id].append(booking)

    given: Dict[str, List[int]] = defaultdict(list)
    for review in reviews:
        if review.reviewer_type == ReviewerType.STUDENT.value:
            given[review.reviewer_id].append(review.rating)

    progress = []
    for student_id, items in grouped.items():
        if student_id not in students:
            continue
        ratings = given.get(student_id)
        progress.append(
            StudentProgress(
                student=students[student_id],
                total_sessions=len(items),
                completed_sessions=len(_completed(items)),
                total_hours=round(_hours(_completed(items)), 2),
                average_rating_given=round(sum(ratings) / len(ratings), 2) if ratings else None,
                last_session_at=max(b.scheduled_start for b in items),
            )
        )
    return sorted(progress, key=lambda row: row.last_session_at or datetime.min, reverse=True)
