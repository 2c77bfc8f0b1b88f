"""API tests for simulated session payments."""

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.entities.payments import Payment

pytestmark = pytest.mark.asyncio


class TestPayForSession:
    async def test_student_pays(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor = await make_user("tutor")
        student = await make_user()
        booking = await make_booking(student, tutor, title="Geometry")
        booking_id = booking.id
        headers = auth_headers(student)

        response = await client.post(f"/api/v1/payments/session/{booking_id}", json={"amount": 40.456}, headers=headers)
        session_detail = await client.get(f"/api/v1/sessions/{booking_id}", headers=headers)

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == 40.46
        assert data["currency"] == "USD"
        assert data["paymentMethod"] == "mock"
        assert data["status"] == "completed"
        assert data["recipientId"] == tutor.id
        assert data["description"] == "Payment for session: Geometry"
        assert session_detail.json()["paymentStatus"] == "paid"

    async def test_cannot_pay_twice(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        booking = await make_booking(student, tutor)
        url = f"/api/v1/payments/session/{booking.id}"
        headers = auth_headers(student)

        await client.post(url, json={"amount": 40}, headers=headers)
        response = await client.post(url, json={"amount": 40}, headers=headers)

        assert response.status_code == 409

    async def test_only_student_pays(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        booking = await make_booking(student, tutor)

        by_tutor = await client.post(
            f"/api/v1/payments/session/{booking.id}", json={"amount": 40}, headers=auth_headers(tutor)
        )
        missing = await client.post("/api/v1/payments/session/missing", json={"amount": 40}, headers=auth_headers(tutor))

        assert by_tutor.status_code == 403
        assert missing.status_code == 404

    async def test_amount_must_be_positive(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        booking = await make_booking(student, tutor)

        response = await client.post(
            f"/api/v1/payments/session/{booking.id}", json={"amount": 0}, headers=auth_headers(student)
        )

        assert response.status_code == 422


class TestReadPayments:
    async def _seed(self, session, make_user, make_booking):
        tutor = await make_user("tutor")
        student = await make_user()
        first = await make_booking(student, tutor)
        second = await make_booking(student, tutor, status="completed")
        session.add_all(
            [
                Payment(
                    session_id=first.id, payer_id=student.id, recipient_id=tutor.id, amount=30.0, status="completed"
                ),
                Payment(
                    session_id=second.id, payer_id=student.id, recipient_id=tutor.id, amount=45.5, status="completed"
                ),
                Payment(session_id=second.id, payer_id=student.id, recipient_id=tutor.id, amount=10.0),
            ]
        )
        await session.commit()
        return tutor, student

    async def test_list_by_direction_and_status(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor, student = await self._seed(session, make_user, make_booking)

        sent = await client.get("/api/v1/payments", params={"type": "sent"}, headers=auth_headers(student))
        received = await client.get("/api/v1/payments", params={"type": "received"}, headers=auth_headers(student))
        pending = await client.get("/api/v1/payments", params={"status": "pending"}, headers=auth_headers(tutor))

        assert sent.json()["pagination"]["total"] == 3
        assert received.json()["pagination"]["total"] == 0
        assert [p["amount"] for p in pending.json()["payments"]] == [10.0]

    async def test_stats_summary(self, client: AsyncClient, make_user, make_booking, auth_headers, session):
        tutor, student = await self._seed(session, make_user, make_booking)

        as_student = await client.get("/api/v1/payments/stats/summary", headers=auth_headers(student))
        as_tutor = await client.get("/api/v1/payments/stats/summary", headers=auth_headers(tutor))

        assert as_student.json() == {
            "paymentsSent": {"count": 2, "total": 75.5},
            "paymentsReceived": {"count": 0, "total": 0},
            "completedPayments": 2,
            "pendingPayments": 1,
        }
        assert as_tutor.json()["paymentsReceived"] == {"count": 2, "total": 75.5}

    async def test_get_payment_visibility(self, client: AsyncClient, make_user, make_booking, auth_headers):
        tutor = await make_user("tutor")
        student = await make_user()
        outsider = await make_user()
        booking = await make_booking(student, tutor)
        created = await client.post(
            f"/api/v1/payments/session/{booking.id}", json={"amount": 40}, headers=auth_headers(student)
        )
        payment_id = created.json()["id"]

        by_tutor = await client.get(f"/api/v1/payments/{payment_id}", headers=auth_headers(tutor))
        by_outsider = await client.get(f"/api/v1/payments/{payment_id}", headers=auth_headers(outsider))

        assert by_tutor.status_code == 200
        assert by_outsider.status_code == 404
