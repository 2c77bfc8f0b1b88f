"""
Tutoring Session API Endpoints.

Booking, reading, updating and cancelling one-on-one tutoring sessions.

Booking rules:
- The caller becomes the student; the tutor must be an active tutor account.
- The requested interval must start in the future and must not overlap another
  ``scheduled`` or ``in_progress`` session of the tutor. The tutor row is locked
  for the check so concurrent bookings for one tutor are serialized.
- The tutor is told about the booking through a system message that is also
  pushed to their live message stream.

Moving a session to ``completed`` settles it: a platform payment is created
when none exists, the session is marked paid and the tutor's session counter
goes up.
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status

from tutorconnect.core.database.base import to_utc_naive, utc_now
from tutorconnect.core.database.entities.subjects import Subject
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, SessionType, TutoringSession
from tutorconnect.core.database.entities.users import User, UserRole
from tutorconnect.core.database.repositories import TutoringSessionRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse, Pagination
from tutorconnect.core.models.io.sessions import SessionCreate, SessionList, SessionRead, SessionUpdate
from tutorconnect.server.services.bookings import (
    notify_tutor_of_booking,
    present_sessions,
    publish_message,
    settle_completed_session,
)
from tutorconnect.server.services.deps import CurrentUser, SessionDep, is_admin

logger = get_logger(__name__)
router = APIRouter()

STUDENT_FIELDS = ("student_rating", "student_feedback")
TUTOR_FIELDS = ("tutor_rating", "tutor_feedback", "session_notes", "meeting_link")


async def _get_visible_session(session: SessionDep, session_id: str, user: User) -> TutoringSession:
    booking = await TutoringSessionRepository(session).get_by_id(session_id)
    if booking is None or not (booking.is_participant(user.id) or is_admin(user)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return booking


@router.get(
    "",
    response_model=SessionList,
    summary="List My Sessions",
    description="Sessions the caller takes part in, newest scheduled start first.",
)
async def list_sessions(
    user: CurrentUser,
    session: SessionDep,
    status_filter: Optional[SessionStatus] = Query(default=None, alias="status"),
    role: Optional[Literal["student", "tutor"]] = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> SessionList:
    rows, total = await TutoringSessionRepository(session).list_for_user(
        user.id,
        as_role=role,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return SessionList(sessions=await present_sessions(session, rows), pagination=Pagination.build(total, limit, offset))


@router.post(
    "",
    response_model=SessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book Session",
    description="Book a session with a tutor. Fails when the tutor already has a session in that interval.",
    responses={
        201: {"description": "Session booked"},
        400: {"description": "Start in the past, tutor unavailable or unknown subject"},
        404: {"description": "Tutor not found"},
    },
)
async def book_session(data: SessionCreate, user: CurrentUser, session: SessionDep) -> SessionRead:
    users = UserRepository(session)
    tutor = await users.get_active_by_id(data.tutor_id, role=UserRole.TUTOR.value)
    if tutor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")
    if tutor.id == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot book a session with yourself")

    start = to_utc_naive(data.scheduled_start)
    end = to_utc_naive(data.scheduled_end)
    if start <= utc_now():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session must be scheduled in the future")

    if data.subject_id and await session.get(Subject, data.subject_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subject not found")

    await users.lock_for_booking(tutor.id)
    repo = TutoringSessionRepository(session)
    if await repo.find_conflicts(tutor.id, start, end):
        logger.info(f"Booking conflict for tutor {tutor.id} between {start} and {end}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Tutor is not available at the requested time"
        )

    hourly_rate = data.hourly_rate
    if hourly_rate is None:
        profile = await users.get_tutor_profile(tutor.id)
        hourly_rate = profile.hourly_rate if profile is not None else 0.0

    session_type = SessionType(data.session_type).value
    booking = TutoringSession(
        student_id=user.id,
        tutor_id=tutor.id,
        subject_id=data.subject_id,
        title=data.title.strip(),
        description=data.description,
        session_type=session_type,
        scheduled_start=start,
        scheduled_end=end,
        hourly_rate=hourly_rate,
        meeting_link=data.meeting_link if session_type == SessionType.ONLINE.value else None,
        meeting_room=data.location_address if session_type == SessionType.IN_PERSON.value else None,
    )
    session.add(booking)
    notification = await notify_tutor_of_booking(session, booking, user)
    await session.commit()
    await session.refresh(booking)
    await session.refresh(notification)
    publish_message(notification)

    logger.info(f"Session {booking.id} booked by student {user.id} with tutor {tutor.id}")
    return (await present_sessions(session, [booking]))[0]


@router.get(
    "/{session_id}",
    response_model=SessionRead,
    summary="Get Session",
    description="Session details for a participant or an administrator.",
    responses={404: {"description": "Session not found"}},
)
async def get_session_detail(session_id: str, user: CurrentUser, session: SessionDep) -> SessionRead:
    booking = await _get_visible_session(session, session_id, user)
    return (await present_sessions(session, [booking]))[0]


@router.put(
    "/{session_id}",
    response_model=SessionRead,
    summary="Update Session",
    description=(
        "Update status, ratings, feedback and notes. Tutors and administrators may set any status; "
        "students may only mark a session as completed. Each side may only rate and comment for itself."
    ),
    responses={
        400: {"description": "No valid fields to update"},
        403: {"description": "Status change not allowed"},
        404: {"description": "Session not found"},
    },
)
async def update_session(session_id: str, data: SessionUpdate, user: CurrentUser, session: SessionDep) -> SessionRead:
    booking = await _get_visible_session(session, session_id, user)
    is_tutor = user.id == booking.tutor_id
    is_student = user.id == booking.student_id
    changes = data.model_dump(exclude_unset=True)
    applied = {}

    new_status = changes.get("status")
    if new_status is not None:
        new_status = SessionStatus(new_status).value
        if not (is_tutor or is_admin(user)) and not (is_student and new_status == SessionStatus.COMPLETED.value):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Students may only mark a session as completed"
            )
        applied["status"] = new_status

    if is_student:
        applied.update({field: changes[field] for field in STUDENT_FIELDS if field in changes})
    if is_tutor:
        applied.update({field: changes[field] for field in TUTOR_FIELDS if field in changes})

    if not applied:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    previous_status = booking.status
    for field, value in applied.items():
        setattr(booking, field, value)
    if booking.status == SessionStatus.COMPLETED.value and previous_status != SessionStatus.COMPLETED.value:
        await settle_completed_session(session, booking)

    booking = await TutoringSessionRepository(session).update(booking)
    logger.info(f"Session {booking.id} updated by {user.id}: {sorted(applied)}")
    return (await present_sessions(session, [booking]))[0]


@router.delete(
    "/{session_id}",
    response_model=MessageResponse,
    summary="Cancel Session",
    description="Cancel a scheduled session. Only participants can cancel, and only while it is scheduled.",
    responses={404: {"description": "Session not found or cannot be cancelled"}},
)
async def cancel_session(session_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    repo = TutoringSessionRepository(session)
    booking = await repo.get_by_id(session_id)
    if booking is None or not booking.is_participant(user.id) or booking.status != SessionStatus.SCHEDULED.value:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found or cannot be cancelled")
    booking.status = SessionStatus.CANCELLED.value
    await repo.update(booking)
    logger.info(f"Session {session_id} cancelled by {user.id}")
    return MessageResponse(message="Session cancelled successfully")
