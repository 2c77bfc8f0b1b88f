"""Unit tests for the tutor analytics builders."""

from datetime import date, datetime, timedelta

import pytest

from tutorconnect.core.database.entities.payments import Payment
from tutorconnect.core.database.entities.reviews import SessionReview
from tutorconnect.core.database.entities.tutoring_sessions import TutoringSession
from tutorconnect.core.models.io.users import UserSummary
from tutorconnect.server.services.analytics import (
    NO_SUBJECT,
    ReportWindow,
    build_daily_trends,
    build_monthly_earnings,
    build_overview,
    build_ratings,
    build_student_progress,
    build_students,
    build_subjects,
    resolve_window,
)

NOW = datetime(2030, 6, 15, 12, 0)


def booking(student="s1", start=NOW - timedelta(days=1), hours=1.0, status="completed", rate=40.0, subject=None):
    return TutoringSession(
        student_id=student,
        tutor_id="t1",
        subject_id=subject,
        title="Lesson",
        scheduled_start=start,
        scheduled_end=start + timedelta(hours=hours),
        status=status,
        hourly_rate=rate,
    )


def review(rating, reviewer="s1", reviewer_type="student"):
    return SessionReview(
        session_id="x", reviewer_id=reviewer, reviewee_id="t1", reviewer_type=reviewer_type, rating=rating
    )


def summary(user_id):
    return UserSummary(id=user_id, first_name=user_id.upper(), last_name="Student", role="student")


class TestResolveWindow:
    @pytest.mark.parametrize("period,days", [("week", 7), ("month", 30), ("quarter", 90), ("year", 365)])
    def test_named_period_ends_now(self, period, days):
        window = resolve_window(period, None, None, NOW)

        assert window.period == period
        assert window.end == NOW
        assert window.end - window.start == timedelta(days=days)

    def test_defaults_to_month(self):
        assert resolve_window(None, None, None, NOW).period == "month"

    def test_explicit_range_includes_end_day(self):
        window = resolve_window("week", date(2030, 1, 1), date(2030, 1, 31), NOW)

        assert window.period == "custom"
        assert window.start == datetime(2030, 1, 1)
        assert window.end == datetime(2030, 2, 1)
        assert window.contains(datetime(2030, 1, 31, 23, 59))
        assert not window.contains(datetime(2030, 2, 1))

    def test_reversed_range(self):
        with pytest.raises(ValueError, match="endDate"):
            resolve_window(None, date(2030, 2, 1), date(2030, 1, 1), NOW)

    def test_unknown_period(self):
        with pytest.raises(ValueError, match="Period must be"):
            resolve_window("decade", None, None, NOW)


class TestOverview:
    def test_counts_and_money(self):
        bookings = [
            booking(hours=1.5),
            booking(status="cancelled"),
            booking(status="no_show"),
            booking(status="scheduled", start=NOW + timedelta(days=2)),
        ]
        overview = build_overview(bookings, NOW)

        assert overview.total_sessions == 4
        assert overview.completed_sessions == 1
        assert overview.cancelled_sessions == 1
        assert overview.no_show_sessions == 1
        assert overview.upcoming_sessions == 1
        assert overview.total_hours == 1.5
        assert overview.average_session_minutes == 90.0
        assert overview.total_earnings == 60.0
        assert overview.completion_rate == 25.0

    def test_empty(self):
        overview = build_overview([], NOW)
        assert overview.completion_rate == 0.0
        assert overview.average_session_minutes == 0.0


class TestStudents:
    def test_new_and_top_students(self):
        window = ReportWindow("month", NOW - timedelta(days=30), NOW)
        veteran_first = booking(student="s1", start=NOW - timedelta(days=200))
        in_window = [
            booking(student="s1"),
            booking(student="s2"),
            booking(student="s2", start=NOW - timedelta(days=3)),
            booking(student="s3", status="cancelled"),
        ]
        students = {sid: summary(sid) for sid in ("s1", "s2", "s3")}

        section = build_students(in_window, in_window + [veteran_first], window, students)

        assert section.total_students == 3
        assert section.new_students == 2
        assert [top.student.id for top in section.top_students] == ["s2", "s1", "s3"]
        assert section.top_students[0].completed_sessions == 2


class TestRatings:
    def test_only_student_reviews_count(self):
        section = build_ratings([review(5), review(4), review(2), review(1, reviewer_type="tutor")])

        assert section.total_reviews == 3
        assert section.average_rating == 3.67
        assert section.five_star_reviews == 1
        assert section.four_plus_reviews == 2
        assert section.positive_percent == 66.67

    def test_no_reviews(self):
        section = build_ratings([])
        assert section.average_rating == 0.0
        assert section.positive_percent == 0.0


class TestSubjects:
    def test_grouped_and_sorted_by_volume(self):
        rows = build_subjects(
            [booking(subject="math"), booking(subject="math", status="cancelled"), booking()],
            {"math": "Mathematics"},
        )

        assert [row.subject_name for row in rows] == ["Mathematics", NO_SUBJECT]
        assert rows[0].sessions == 2
        assert rows[0].completed_sessions == 1
        assert rows[0].earnings == 40.0


class TestDailyTrends:
    def test_zero_filled_trailing_days(self):
        today = NOW.date()
        trends = build_daily_trends([booking(start=NOW - timedelta(days=1))], today, days=5)

        assert len(trends) == 5
        assert trends[0].date == today - timedelta(days=4)
        assert trends[-1].date == today
        assert [t.sessions for t in trends] == [0, 0, 0, 1, 0]
        assert trends[3].earnings == 40.0


class TestMonthlyEarnings:
    def test_sessions_and_payments_per_month(self):
        may = datetime(2030, 5, 10, 10)
        june = datetime(2030, 6, 2, 10)
        payments = [
            Payment(session_id="a", payer_id="s1", recipient_id="t1", amount=40.0, status="completed", created_at=june),
            Payment(session_id="b", payer_id="s1", recipient_id="t1", amount=99.0, status="pending", created_at=june),
        ]
        rows = build_monthly_earnings([booking(start=may), booking(start=june, hours=2)], payments)

        assert [row.month for row in rows] == ["2030-05", "2030-06"]
        assert rows[0].session_earnings == 40.0
        assert rows[0].payment_count == 0
        assert rows[1].session_earnings == 80.0
        assert rows[1].payment_count == 1
        assert rows[1].payments_received == 40.0


class TestStudentProgress:
    def test_per_student_rows_most_recent_first(self):
        bookings = [
            booking(student="s1", start=NOW - timedelta(days=10)),
            booking(student="s1", start=NOW - timedelta(days=9), status="cancelled"),
            booking(student="s2", start=NOW - timedelta(days=1), hours=2),
        ]
        reviews = [review(5, reviewer="s1"), review(4, reviewer="s1"), review(3, reviewer="t1", reviewer_type="tutor")]

        rows = build_student_progress(bookings, reviews, {"s1": summary("s1"), "s2": summary("s2")})

        assert [row.student.id for row in rows] == ["s2", "s1"]
        assert rows[0].total_hours == 2.0
        assert rows[0].average_rating_given is None
        assert rows[1].total_sessions == 2
        assert rows[1].completed_sessions == 1
        assert rows[1].average_rating_given == 4.5
