"""API tests for the subject catalogue."""

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.entities.subjects import TutorSubject
from tutorconnect.core.database.entities.tasks import Task

pytestmark = pytest.mark.asyncio


class TestBrowseSubjects:
    async def test_list_filters_and_sorts(self, client: AsyncClient, make_subject):
        await make_subject("Physics", "science")
        await make_subject("Mathematics", "academics")
        await make_subject("Latin", "languages", is_active=False)

        everything = await client.get("/api/v1/subjects")
        science = await client.get("/api/v1/subjects", params={"category": "science"})
        inactive = await client.get("/api/v1/subjects", params={"active": "false"})
        search = await client.get("/api/v1/subjects", params={"search": "physics lessons"})

        assert [s["name"] for s in everything.json()["subjects"]] == ["Mathematics", "Physics"]
        assert [s["name"] for s in science.json()["subjects"]] == ["Physics"]
        assert [s["name"] for s in inactive.json()["subjects"]] == ["Latin"]
        assert search.json()["pagination"]["total"] == 1

    async def test_categories(self, client: AsyncClient, make_subject):
        await make_subject("Physics", "science")
        await make_subject("Chemistry", "science")
        await make_subject("Mathematics", "academics")

        response = await client.get("/api/v1/subjects/meta/categories")

        assert response.json() == {"categories": ["academics", "science"]}

    async def test_detail_lists_active_tutors(self, client: AsyncClient, make_subject, make_user, session):
        maths = await make_subject()
        tutor = await make_user("tutor", first_name="Euler", rating=4.9)
        gone = await make_user("tutor", is_active=False)
        session.add_all(
            [
                TutorSubject(tutor_id=tutor.id, subject_id=maths.id, proficiency_level="expert"),
                TutorSubject(tutor_id=gone.id, subject_id=maths.id),
            ]
        )
        await session.commit()

        response = await client.get(f"/api/v1/subjects/{maths.id}")

        assert response.status_code == 200
        tutors = response.json()["tutors"]
        assert len(tutors) == 1
        assert tutors[0]["firstName"] == "Euler"
        assert tutors[0]["proficiencyLevel"] == "expert"

    async def test_unknown_subject(self, client: AsyncClient):
        response = await client.get("/api/v1/subjects/missing")
        assert response.status_code == 404


class TestManageSubjects:
    async def test_admin_creates_subject(self, client: AsyncClient, make_user, auth_headers):
        admin = await make_user("admin")

        response = await client.post(
            "/api/v1/subjects",
            json={"name": " Biology ", "description": "Cells", "category": "science"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Biology"

    async def test_duplicate_name_is_case_insensitive(self, client: AsyncClient, make_user, make_subject, auth_headers):
        admin = await make_user("admin")
        await make_subject("Mathematics")

        response = await client.post("/api/v1/subjects", json={"name": "mathematics"}, headers=auth_headers(admin))

        assert response.status_code == 409

    async def test_non_admin_forbidden(self, client: AsyncClient, make_user, auth_headers):
        tutor = await make_user("tutor")

        response = await client.post("/api/v1/subjects", json={"name": "Biology"}, headers=auth_headers(tutor))

        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions"

    async def test_update(self, client: AsyncClient, make_user, make_subject, auth_headers):
        admin = await make_user("admin")
        subject = await make_subject("Physics", "science")
        headers = auth_headers(admin)

        renamed = await client.put(f"/api/v1/subjects/{subject.id}", json={"name": "Applied Physics"}, headers=headers)
        empty = await client.put(f"/api/v1/subjects/{subject.id}", json={}, headers=headers)

        assert renamed.json()["name"] == "Applied Physics"
        assert empty.status_code == 400

    async def test_delete_unused_subject_detaches_tasks(
        self, client: AsyncClient, make_user, make_subject, auth_headers, session
    ):
        admin = await make_user("admin")
        subject = await make_subject("Geography", "science")
        task = Task(user_id=admin.id, subject_id=subject.id, title="Map quiz")
        session.add(task)
        await session.commit()

        response = await client.delete(f"/api/v1/subjects/{subject.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        await session.refresh(task)
        assert task.subject_id is None

    async def test_delete_subject_in_use(self, client: AsyncClient, make_user, make_subject, auth_headers, session):
        admin = await make_user("admin")
        tutor = await make_user("tutor")
        subject = await make_subject()
        session.add(TutorSubject(tutor_id=tutor.id, subject_id=subject.id))
        await session.commit()

        response = await client.delete(f"/api/v1/subjects/{subject.id}", headers=auth_headers(admin))

        assert response.status_code == 409
