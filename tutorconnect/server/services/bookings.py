"""
Tutoring session helpers shared by the sessions, users and admin routers.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tutorconnect.core.database.entities.messages import Message, MessageType
from tutorconnect.core.database.entities.payments import Payment, PaymentMethod, PaymentState
from tutorconnect.core.database.entities.subjects import Subject
from tutorconnect.core.database.entities.tutoring_sessions import SessionPaymentStatus, TutoringSession
from tutorconnect.core.database.entities.users import TutorProfile, User
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.messages import MessageRead
from tutorconnect.core.models.io.sessions import SessionRead

from .accounts import load_user_summaries
from .message_broker import get_message_broker

logger = get_logger(__name__)

DEFAULT_CURRENCY = "USD"


def session_amount(booking: TutoringSession) -> float:
    """Price of a session: hourly rate times booked hours, to the cent."""
    hours = (booking.scheduled_end - booking.scheduled_start).total_seconds() / 3600
    return round(booking.hourly_rate * hours, 2)


async def present_sessions(session: AsyncSession, bookings: Sequence[TutoringSession]) -> List[SessionRead]:
    """Session rows with participant summaries and subject names attached."""
    users = await load_user_summaries(session, [b.student_id for b in bookings] + [b.tutor_id for b in bookings])
    subject_ids = {b.subject_id for b in bookings if b.subject_id}
    subjects = {}
    if subject_ids:
        result = await session.execute(select(Subject).where(Subject.id.in_(subject_ids)))  # type: ignore[attr-defined]
        subjects = {subject.id: subject.name for subject in result.scalars().all()}

    presented = []
    for booking in bookings:
        item = SessionRead.model_validate(booking)
        item.student = users.get(booking.student_id)
        item.tutor = users.get(booking.tutor_id)
        item.subject_name = subjects.get(booking.subject_id) if booking.subject_id else None
        presented.append(item)
    return presented


async def settle_completed_session(session: AsyncSession, booking: TutoringSession) -> Optional[Payment]:
    """
    Book-keeping for a session that just moved to ``completed``.

    Creates the platform payment when none exists yet, marks the session paid
    and increments the tutor's session counter. The caller commits.
    """
    result = await session.execute(select(Payment).where(Payment.session_id == booking.id))
    payment = result.scalars().first()
    amount = session_amount(booking)
    if payment is None and amount > 0:
        payment = Payment(
            session_id=booking.id,
            payer_id=booking.student_id,
            recipient_id=booking.tutor_id,
            amount=amount,
            currency=DEFAULT_CURRENCY,
            payment_method=PaymentMethod.PLATFORM.value,
            status=PaymentState.COMPLETED.value,
            description=f"Payment for session: {booking.title}",
        )
        session.add(payment)
        logger.info(f"Created platform payment of {amount} {DEFAULT_CURRENCY} for session {booking.id}")
    booking.payment_status = SessionPaymentStatus.PAID.value

    result = await session.execute(select(TutorProfile).where(TutorProfile.user_id == booking.tutor_id))
    profile = result.scalars().first()
    if profile is not None:
        profile.total_sessions += 1
        session.add(profile)
    return payment


async def notify_tutor_of_booking(session: AsyncSession, booking: TutoringSession, student: User) -> Message:
    """System message to the tutor announcing a new booking. The caller commits."""
    message = Message(
        sender_id=student.id,
        recipient_id=booking.tutor_id,
        session_id=booking.id,
        subject=f"New session booked: {booking.title}",
        content=(
            f"{student.full_name} booked \"{booking.title}\" on "
            f"{booking.scheduled_start.strftime('%Y-%m-%d %H:%M')} UTC."
        ),
        message_type=MessageType.SYSTEM.value,
    )
    session.add(message)
    return message


def publish_message(message: Message) -> int:
    """Push a stored message to the recipient's live streams."""
    payload = MessageRead.model_validate(message).model_dump(mode="json", by_alias=True)
    return get_message_broker().publish(message.recipient_id, {"type": "message", "message": payload})
