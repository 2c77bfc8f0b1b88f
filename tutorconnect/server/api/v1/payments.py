"""
Payment API Endpoints.

Payment processing is simulated: paying for a session writes a ``completed``
payment straight away and marks the session paid.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlmodel import select

from tutorconnect.core.database.entities.payments import Payment, PaymentMethod, PaymentState
from tutorconnect.core.database.entities.tutoring_sessions import SessionPaymentStatus
from tutorconnect.core.database.repositories import BaseRepository, TutoringSessionRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import Pagination
from tutorconnect.core.models.io.payments import PaymentCreate, PaymentList, PaymentRead, PaymentStats, PaymentTotals
from tutorconnect.server.services.bookings import DEFAULT_CURRENCY
from tutorconnect.server.services.deps import CurrentUser, SessionDep

logger = get_logger(__name__)
router = APIRouter()


def _totals(payments: List[Payment]) -> PaymentTotals:
    return PaymentTotals(count=len(payments), total=round(sum(p.amount for p in payments), 2))


@router.post(
    "/session/{session_id}",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Pay For Session",
    description="Pay for a session as its student. The payment completes immediately.",
    responses={
        403: {"description": "Only the session's student can pay"},
        404: {"description": "Session not found"},
        409: {"description": "Session already paid"},
    },
)
async def pay_for_session(session_id: str, data: PaymentCreate, user: CurrentUser, session: SessionDep) -> PaymentRead:
    sessions = TutoringSessionRepository(session)
    booking = await sessions.get_by_id(session_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    if booking.student_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the session's student can pay for it")

    existing = await session.execute(
        select(Payment).where(Payment.session_id == session_id, Payment.status == PaymentState.COMPLETED.value)
    )
    if existing.scalars().first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Session has already been paid")

    payment = Payment(
        session_id=booking.id,
        payer_id=user.id,
        recipient_id=booking.tutor_id,
        amount=round(data.amount, 2),
        currency=DEFAULT_CURRENCY,
        payment_method=PaymentMethod.MOCK.value,
        status=PaymentState.COMPLETED.value,
        description=data.description or f"Payment for session: {booking.title}",
    )
    session.add(payment)
    booking.payment_status = SessionPaymentStatus.PAID.value
    await sessions.update(booking)
    await session.refresh(payment)

    logger.info(f"Payment {payment.id} of {payment.amount} {payment.currency} for session {session_id}")
    return PaymentRead.model_validate(payment)


@router.get(
    "",
    response_model=PaymentList,
    summary="List My Payments",
    description="Payments the caller sent or received, newest first.",
)
async def list_payments(
    user: CurrentUser,
    session: SessionDep,
    direction: Optional[Literal["sent", "received"]] = Query(default=None, alias="type"),
    status_filter: Optional[PaymentState] = Query(default=None, alias="status"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PaymentList:
    if direction == "sent":
        stmt = select(Payment).where(Payment.payer_id == user.id)
    elif direction == "received":
        stmt = select(Payment).where(Payment.recipient_id == user.id)
    else:
        stmt = select(Payment).where(or_(Payment.payer_id == user.id, Payment.recipient_id == user.id))
    if status_filter:
        stmt = stmt.where(Payment.status == status_filter.value)

    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    result = await session.execute(
        stmt.order_by(Payment.created_at.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
    )
    return PaymentList(
        payments=[PaymentRead.model_validate(p) for p in result.scalars().all()],
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/stats/summary",
    response_model=PaymentStats,
    summary="Payment Summary",
    description="Counts and completed totals of the caller's sent and received payments.",
)
async def payment_stats(user: CurrentUser, session: SessionDep) -> PaymentStats:
    result = await session.execute(
        select(Payment).where(or_(Payment.payer_id == user.id, Payment.recipient_id == user.id))
    )
    payments = list(result.scalars().all())
    completed = [p for p in payments if p.status == PaymentState.COMPLETED.value]
    return PaymentStats(
        payments_sent=_totals([p for p in completed if p.payer_id == user.id]),
        payments_received=_totals([p for p in completed if p.recipient_id == user.id]),
        completed_payments=len(completed),
        pending_payments=sum(1 for p in payments if p.status == PaymentState.PENDING.value),
    )


@router.get(
    "/{payment_id}",
    response_model=PaymentRead,
    summary="Get Payment",
    description="A payment the caller sent or received.",
    responses={404: {"description": "Payment not found"}},
)
async def get_payment(payment_id: str, user: CurrentUser, session: SessionDep) -> PaymentRead:
    payment = await BaseRepository(session, Payment).get_by_id(payment_id)
    if payment is None or user.id not in (payment.payer_id, payment.recipient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return PaymentRead.model_validate(payment)
