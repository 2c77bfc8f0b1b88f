"""API tests for the public tutor catalogue."""

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.entities.reviews import SessionReview
from tutorconnect.core.database.entities.subjects import TutorSubject

pytestmark = pytest.mark.asyncio


class TestBrowseTutors:
    async def test_best_rated_first_and_inactive_hidden(self, client: AsyncClient, make_user):
        await make_user("tutor", first_name="Low", rating=3.0)
        await make_user("tutor", first_name="High", rating=4.8)
        await make_user("tutor", first_name="Gone", rating=5.0, is_active=False)
        await make_user("student")

        response = await client.get("/api/v1/tutors")

        assert response.status_code == 200
        names = [t["firstName"] for t in response.json()["tutors"]]
        assert names == ["High", "Low"]
        assert response.json()["pagination"]["total"] == 2

    async def test_filters(self, client: AsyncClient, make_user, make_subject, session):
        cheap = await make_user("tutor", first_name="Cheap", hourly_rate=20, rating=4.0)
        await make_user("tutor", first_name="Pricey", hourly_rate=90, rating=4.9)
        maths = await make_subject()
        session.add(TutorSubject(tutor_id=cheap.id, subject_id=maths.id))
        await session.commit()

        by_subject = await client.get("/api/v1/tutors", params={"subject": maths.id})
        by_rate = await client.get("/api/v1/tutors", params={"minRate": 50})
        by_rating = await client.get("/api/v1/tutors", params={"minRating": 4.5})
        by_name = await client.get("/api/v1/tutors", params={"search": "chea"})

        assert [t["firstName"] for t in by_subject.json()["tutors"]] == ["Cheap"]
        assert by_subject.json()["tutors"][0]["subjects"][0]["name"] == "Mathematics"
        assert [t["firstName"] for t in by_rate.json()["tutors"]] == ["Pricey"]
        assert [t["firstName"] for t in by_rating.json()["tutors"]] == ["Pricey"]
        assert [t["firstName"] for t in by_name.json()["tutors"]] == ["Cheap"]

    async def test_pagination(self, client: AsyncClient, make_user):
        for _ in range(3):
            await make_user("tutor")

        response = await client.get("/api/v1/tutors", params={"limit": 2, "offset": 0})

        assert len(response.json()["tutors"]) == 2
        assert response.json()["pagination"]["hasMore"] is True


class TestTutorDetail:
    async def test_detail_with_recent_reviews(self, client: AsyncClient, make_user, make_booking, session):
        tutor = await make_user("tutor", education="MSc Mathematics")
        student = await make_user(first_name="Ada")
        booking = await make_booking(student, tutor, status="completed")
        session.add(
            SessionReview(
                session_id=booking.id,
                reviewer_id=student.id,
                reviewee_id=tutor.id,
                reviewer_type="student",
                rating=5,
                comment="Great",
            )
        )
        await session.commit()

        response = await client.get(f"/api/v1/tutors/{tutor.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["education"] == "MSc Mathematics"
        assert data["recentReviews"][0]["rating"] == 5
        assert data["recentReviews"][0]["reviewer"]["firstName"] == "Ada"

    async def test_student_is_not_a_tutor(self, client: AsyncClient, make_user):
        student = await make_user()

        response = await client.get(f"/api/v1/tutors/{student.id}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Tutor not found"


class TestTutorStudents:
    async def test_students_with_counts(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        ada = await make_user(first_name="Ada")
        await make_booking(ada, tutor, status="completed")
        await make_booking(ada, tutor)

        response = await client.get(f"/api/v1/tutors/{tutor.id}/students", headers=auth_headers(tutor))

        assert response.status_code == 200
        entry = response.json()["students"][0]
        assert entry["student"]["firstName"] == "Ada"
        assert entry["totalSessions"] == 2
        assert entry["completedSessions"] == 1

    async def test_other_tutor_denied(self, client: AsyncClient, make_user, auth_headers):
        tutor = await make_user("tutor")
        other = await make_user("tutor")

        response = await client.get(f"/api/v1/tutors/{tutor.id}/students", headers=auth_headers(other))

        assert response.status_code == 403
