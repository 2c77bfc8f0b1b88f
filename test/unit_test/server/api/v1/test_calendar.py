"""API tests for the merged session and task calendar."""

from datetime import datetime, time, timedelta

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.tasks import Task

pytestmark = pytest.mark.asyncio


class TestCalendarEvents:
    async def test_sessions_and_tasks_sorted(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor", first_name="Tess")
        student = await make_user()
        day = utc_now().date() + timedelta(days=3)
        booking = await make_booking(student, tutor, start=datetime.combine(day, time(15)))
        session.add_all(
            [
                Task(
                    user_id=student.id,
                    title="Prepare questions",
                    due_date=datetime.combine(day, time(9)),
                    priority="high",
                ),
                Task(user_id=student.id, title="No due date"),
                Task(user_id=tutor.id, title="Not mine", due_date=datetime.combine(day, time(10))),
            ]
        )
        await session.commit()
        headers = auth_headers(student)

        everything = await client.get("/api/v1/calendar/events", headers=headers)
        only_sessions = await client.get("/api/v1/calendar/events", params={"type": "sessions"}, headers=headers)

        events = everything.json()["events"]
        assert [(e["type"], e["title"]) for e in events] == [("task", "Prepare questions"), ("session", booking.title)]
        assert events[0]["priority"] == "high"
        assert events[1]["withUser"] == "Tess Tester"
        assert everything.json()["endDate"] == (utc_now().date() + timedelta(days=30)).isoformat()
        assert [e["type"] for e in only_sessions.json()["events"]] == ["session"]

    async def test_events_on_date(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        day = utc_now().date() + timedelta(days=2)
        await make_booking(student, tutor, start=datetime.combine(day, time(23)))
        await make_booking(student, tutor, start=datetime.combine(day + timedelta(days=1), time(0, 30)))

        response = await client.get(f"/api/v1/calendar/events/date/{day.isoformat()}", headers=auth_headers(tutor))

        assert response.json()["startDate"] == response.json()["endDate"] == day.isoformat()
        assert len(response.json()["events"]) == 1

    @pytest.mark.parametrize(
        "span,detail", [(-1, "endDate must not be before startDate"), (367, "Date range cannot exceed 366 days")]
    )
    async def test_range_checks(self, client: AsyncClient, make_user, auth_headers, span, detail):
        user = await make_user()
        start = utc_now().date()

        response = await client.get(
            "/api/v1/calendar/events",
            params={"startDate": start.isoformat(), "endDate": (start + timedelta(days=span)).isoformat()},
            headers=auth_headers(user),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == detail


class TestCalendarStats:
    async def test_stats(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor")
        student = await make_user()
        now = utc_now()
        month_start = datetime.combine(now.date().replace(day=1), time(0, 1))
        await make_booking(student, tutor, start=now + timedelta(days=2))
        await make_booking(student, tutor, start=now + timedelta(days=10))
        await make_booking(student, tutor, status="completed", start=month_start)
        session.add_all(
            [
                Task(user_id=student.id, title="Soon", due_date=now + timedelta(days=1)),
                Task(user_id=student.id, title="Late", due_date=now - timedelta(days=1)),
                Task(user_id=student.id, title="Done late", due_date=now - timedelta(days=1), status="completed"),
            ]
        )
        await session.commit()

        response = await client.get("/api/v1/calendar/stats", headers=auth_headers(student))

        assert response.json() == {
            "upcomingSessions": 1,
            "tasksDueSoon": 1,
            "overdueTasks": 1,
            "completedSessionsThisMonth": 1,
        }
