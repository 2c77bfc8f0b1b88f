"""API tests for tutor analytics reports."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.payments import Payment
from tutorconnect.core.database.entities.reviews import SessionReview

pytestmark = pytest.mark.asyncio


def _days_ago(days: int):
    return utc_now() - timedelta(days=days)


class TestDashboard:
    async def test_month_dashboard(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor")
        student = await make_user(first_name="Ada")
        done = await make_booking(student, tutor, status="completed", start=_days_ago(2), hourly_rate=40)
        await make_booking(student, tutor, status="cancelled", start=_days_ago(3))
        await make_booking(student, tutor, status="completed", start=_days_ago(40))
        session.add(
            SessionReview(
                session_id=done.id, reviewer_id=student.id, reviewee_id=tutor.id, reviewer_type="student", rating=5
            )
        )
        await session.commit()

        response = await client.get(f"/api/v1/analytics/dashboard/{tutor.id}", headers=auth_headers(tutor))

        assert response.status_code == 200
        data = response.json()
        assert data["period"]["period"] == "month"
        overview = data["overview"]
        assert overview["totalSessions"] == 2
        assert overview["completedSessions"] == 1
        assert overview["cancelledSessions"] == 1
        assert overview["totalEarnings"] == 40.0
        assert overview["completionRate"] == 50.0
        assert data["students"]["totalStudents"] == 1
        assert data["students"]["newStudents"] == 0
        assert data["students"]["topStudents"][0]["student"]["firstName"] == "Ada"
        assert data["ratings"]["averageRating"] == 5.0
        assert data["ratings"]["positivePercent"] == 100.0
        assert data["subjects"][0]["subjectName"] == "General"
        assert len(data["trends"]["daily"]) == 30
        assert data["trends"]["daily"][-1]["date"] == utc_now().date().isoformat()

    async def test_custom_range_includes_upcoming(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        await make_booking(student, tutor, start=utc_now() + timedelta(days=1))
        today = utc_now().date()

        response = await client.get(
            f"/api/v1/analytics/dashboard/{tutor.id}",
            params={"startDate": today.isoformat(), "endDate": (today + timedelta(days=7)).isoformat()},
            headers=auth_headers(tutor),
        )

        data = response.json()
        assert data["period"]["period"] == "custom"
        assert data["overview"]["upcomingSessions"] == 1
        assert data["students"]["newStudents"] == 1

    async def test_invalid_window(self, client: AsyncClient, make_user, auth_headers):
        tutor = await make_user("tutor")
        headers = auth_headers(tutor)
        today = utc_now().date()

        reversed_range = await client.get(
            f"/api/v1/analytics/dashboard/{tutor.id}",
            params={"startDate": today.isoformat(), "endDate": (today - timedelta(days=1)).isoformat()},
            headers=headers,
        )
        unknown_period = await client.get(
            f"/api/v1/analytics/dashboard/{tutor.id}", params={"period": "decade"}, headers=headers
        )

        assert reversed_range.status_code == 400
        assert unknown_period.status_code == 422

    async def test_access_rules(self, client: AsyncClient, make_user, auth_headers):
        tutor = await make_user("tutor")
        other = await make_user("tutor")
        student = await make_user()
        admin = await make_user("admin")

        by_other = await client.get(f"/api/v1/analytics/dashboard/{tutor.id}", headers=auth_headers(other))
        by_admin = await client.get(f"/api/v1/analytics/dashboard/{tutor.id}", headers=auth_headers(admin))
        not_a_tutor = await client.get(f"/api/v1/analytics/dashboard/{student.id}", headers=auth_headers(admin))

        assert by_other.status_code == 403
        assert by_admin.status_code == 200
        assert not_a_tutor.status_code == 404


class TestEarnings:
    async def test_earnings_totals(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor")
        student = await make_user()
        done = await make_booking(student, tutor, status="completed", start=_days_ago(2), hours=1.5, hourly_rate=40)
        await make_booking(student, tutor, status="cancelled", start=_days_ago(2))
        session.add_all(
            [
                Payment(
                    session_id=done.id, payer_id=student.id, recipient_id=tutor.id, amount=60.0, status="completed"
                ),
                Payment(session_id=done.id, payer_id=student.id, recipient_id=tutor.id, amount=15.0, status="failed"),
            ]
        )
        await session.commit()

        response = await client.get(
            f"/api/v1/analytics/earnings/{tutor.id}", params={"period": "week"}, headers=auth_headers(tutor)
        )

        data = response.json()
        assert data["period"]["period"] == "week"
        assert data["completedSessions"] == 1
        assert data["totalSessionEarnings"] == 60.0
        assert data["totalPaymentsReceived"] == 60.0
        assert sum(row["paymentCount"] for row in data["monthly"]) == 1


class TestStudentProgress:
    async def test_progress_per_student(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor")
        ada = await make_user(first_name="Ada")
        bob = await make_user(first_name="Bob")
        first = await make_booking(ada, tutor, status="completed", start=_days_ago(5), hours=2)
        await make_booking(ada, tutor, status="completed", start=_days_ago(3))
        await make_booking(bob, tutor, start=utc_now() + timedelta(days=2))
        session.add(
            SessionReview(
                session_id=first.id, reviewer_id=ada.id, reviewee_id=tutor.id, reviewer_type="student", rating=4
            )
        )
        await session.commit()
        headers = auth_headers(tutor)

        everyone = await client.get(f"/api/v1/analytics/student-progress/{tutor.id}", headers=headers)
        only_ada = await client.get(
            f"/api/v1/analytics/student-progress/{tutor.id}", params={"studentId": ada.id}, headers=headers
        )

        rows = everyone.json()["students"]
        assert [row["student"]["firstName"] for row in rows] == ["Bob", "Ada"]
        ada_row = only_ada.json()["students"][0]
        assert ada_row["totalSessions"] == 2
        assert ada_row["completedSessions"] == 2
        assert ada_row["totalHours"] == 3.0
        assert ada_row["averageRatingGiven"] == 4.0
        assert rows[0]["averageRatingGiven"] is None
