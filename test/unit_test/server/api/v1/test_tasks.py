"""Tests for personal tasks."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.tasks import Task
from tutorconnect.server.api.v1.tasks import apply_completion


class TestApplyCompletion:
    def test_completing_sets_full_progress_and_timestamp(self):
        task = Task(user_id="u1", title="Essay", status="completed", progress=20)

        apply_completion(task, {"status": "completed"})

        assert task.progress == 100
        assert task.completed_at is not None

    def test_full_progress_completes_task(self):
        task = Task(user_id="u1", title="Essay", status="in_progress", progress=90)
        task.progress = 100

        apply_completion(task, {"progress": 100})

        assert task.status == "completed"
        assert task.completed_at is not None

    def test_explicit_status_wins_over_progress(self):
        task = Task(user_id="u1", title="Essay", status="in_progress", progress=100)

        apply_completion(task, {"progress": 100, "status": "in_progress"})

        assert task.status == "in_progress"
        assert task.completed_at is None

    def test_reopening_clears_timestamp_and_keeps_first_stamp(self):
        stamped = utc_now() - timedelta(days=1)
        task = Task(user_id="u1", title="Essay", status="completed", progress=100, completed_at=stamped)

        apply_completion(task, {"status": "completed"})
        assert task.completed_at == stamped

        task.status = "pending"
        apply_completion(task, {"status": "pending"})
        assert task.completed_at is None


class TestTaskEndpoints:
    async def test_create_and_list_in_due_order(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        headers = auth_headers(user)
        soon = (utc_now() + timedelta(days=1)).isoformat()
        later = (utc_now() + timedelta(days=5)).isoformat()

        created = await client.post(
            "/api/v1/tasks", json={"title": "  Undated  ", "priority": "high"}, headers=headers
        )
        await client.post("/api/v1/tasks", json={"title": "Later", "dueDate": later}, headers=headers)
        await client.post("/api/v1/tasks", json={"title": "Soon", "dueDate": soon}, headers=headers)

        assert created.status_code == 201
        assert created.json()["title"] == "Undated"
        assert created.json()["status"] == "pending"
        listing = await client.get("/api/v1/tasks", headers=headers)
        assert [t["title"] for t in listing.json()["tasks"]] == ["Soon", "Later", "Undated"]
        high = await client.get("/api/v1/tasks", params={"priority": "high"}, headers=headers)
        assert high.json()["pagination"]["total"] == 1

    async def test_create_completed_task(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()

        response = await client.post(
            "/api/v1/tasks", json={"title": "Done already", "status": "completed"}, headers=auth_headers(user)
        )

        assert response.json()["progress"] == 100
        assert response.json()["completedAt"] is not None

    async def test_create_with_unknown_subject(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()

        response = await client.post(
            "/api/v1/tasks", json={"title": "Read", "subjectId": "missing"}, headers=auth_headers(user)
        )

        assert response.status_code == 400

    async def test_create_urgent_task(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()

        response = await client.post(
            "/api/v1/tasks", json={"title": "Exam tomorrow", "priority": "urgent"}, headers=auth_headers(user)
        )

        assert response.status_code == 201
        assert response.json()["priority"] == "urgent"

    @pytest.mark.parametrize(
        "payload", [{"title": ""}, {"title": "x", "progress": 101}, {"title": "x", "priority": "critical"}]
    )
    async def test_invalid_payload(self, client: AsyncClient, make_user, auth_headers, payload):
        user = await make_user()

        response = await client.post("/api/v1/tasks", json=payload, headers=auth_headers(user))

        assert response.status_code == 422

    async def test_update_progress_completes_and_reopen(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        headers = auth_headers(user)
        task_id = (await client.post("/api/v1/tasks", json={"title": "Practice"}, headers=headers)).json()["id"]

        finished = await client.put(f"/api/v1/tasks/{task_id}", json={"progress": 100}, headers=headers)
        reopened = await client.put(f"/api/v1/tasks/{task_id}", json={"status": "in_progress"}, headers=headers)
        empty = await client.put(f"/api/v1/tasks/{task_id}", json={}, headers=headers)

        assert finished.json()["status"] == "completed"
        assert finished.json()["completedAt"] is not None
        assert reopened.json()["status"] == "in_progress"
        assert reopened.json()["completedAt"] is None
        assert empty.status_code == 400

    async def test_tasks_are_private(self, client: AsyncClient, make_user, auth_headers):
        owner = await make_user()
        other = await make_user()
        task_id = (await client.post("/api/v1/tasks", json={"title": "Mine"}, headers=auth_headers(owner))).json()["id"]
        other_headers = auth_headers(other)

        read = await client.get(f"/api/v1/tasks/{task_id}", headers=other_headers)
        update = await client.put(f"/api/v1/tasks/{task_id}", json={"title": "Yours"}, headers=other_headers)
        delete = await client.delete(f"/api/v1/tasks/{task_id}", headers=other_headers)

        assert {read.status_code, update.status_code, delete.status_code} == {404}

    async def test_delete(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        headers = auth_headers(user)
        task_id = (await client.post("/api/v1/tasks", json={"title": "Temp"}, headers=headers)).json()["id"]

        response = await client.delete(f"/api/v1/tasks/{task_id}", headers=headers)
        again = await client.get(f"/api/v1/tasks/{task_id}", headers=headers)

        assert response.json()["message"] == "Task deleted successfully"
        assert again.status_code == 404
