"""
User API Endpoints.

Profile read and update for the account owner (or an administrator), plus the
owner's sessions and tasks.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlmodel import select

from tutorconnect.core.database.entities.subjects import Subject, TutorSubject
from tutorconnect.core.database.entities.tasks import Task
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus
from tutorconnect.core.database.entities.users import StudentProfile, TutorProfile, User, UserRole
from tutorconnect.core.database.repositories import TutoringSessionRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import Pagination
from tutorconnect.core.models.io.sessions import SessionList
from tutorconnect.core.models.io.tasks import TaskList, TaskRead
from tutorconnect.core.models.io.users import UserProfileRead, UserUpdate
from tutorconnect.server.services.accounts import build_user_profile
from tutorconnect.server.services.bookings import present_sessions
from tutorconnect.server.services.deps import CurrentUser, SessionDep, ensure_owner_or_admin

logger = get_logger(__name__)
router = APIRouter()

USER_FIELDS = ("first_name", "last_name", "phone", "bio", "address", "pincode", "date_of_birth", "profile_picture_url")
TUTOR_FIELDS = ("title", "hourly_rate", "years_of_experience", "education", "certifications", "languages")
STUDENT_FIELDS = ("academic_level", "school", "learning_goals", "learning_style")


async def _get_user_or_404(session: SessionDep, user_id: str) -> User:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get(
    "/{user_id}",
    response_model=UserProfileRead,
    summary="Get User",
    description="Retrieve a user with their role profile. Only the owner or an administrator may do this.",
    responses={403: {"description": "Access denied"}, 404: {"description": "User not found"}},
)
async def get_user(user_id: str, current_user: CurrentUser, session: SessionDep) -> UserProfileRead:
    ensure_owner_or_admin(current_user, user_id)
    user = await _get_user_or_404(session, user_id)
    return await build_user_profile(session, user)


@router.put(
    "/{user_id}",
    response_model=UserProfileRead,
    summary="Update User",
    description="Update account fields and the role-specific profile.",
    responses={
        400: {"description": "No valid fields to update or unknown subject"},
        403: {"description": "Access denied"},
        404: {"description": "User not found"},
    },
)
async def update_user(user_id: str, data: UserUpdate, current_user: CurrentUser, session: SessionDep) -> UserProfileRead:
    """
    Update a user profile.

    Account fields apply to everyone. Teaching fields (and ``subjectIds``, which
    replaces the tutor's subject list) only apply to tutors; learning fields
    only to students. Fields that do not apply are ignored.
    """
    ensure_owner_or_admin(current_user, user_id)
    repo = UserRepository(session)
    user = await _get_user_or_404(session, user_id)
    changes = data.model_dump(exclude_unset=True)
    applied = 0

    for field in USER_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])
            applied += 1

    if user.role == UserRole.TUTOR.value:
        profile = await repo.get_tutor_profile(user.id) or TutorProfile(user_id=user.id)
        for field in TUTOR_FIELDS:
            if field in changes:
                setattr(profile, field, changes[field])
                applied += 1
        session.add(profile)

        if data.subject_ids is not None:
            subject_ids = list(dict.fromkeys(data.subject_ids))
            if subject_ids:
                known = await session.execute(
                    select(func.count()).select_from(Subject).where(Subject.id.in_(subject_ids))  # type: ignore[attr-defined]
                )
                if int(known.scalar_one()) != len(subject_ids):
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown subject id")
            await session.execute(sa_delete(TutorSubject).where(TutorSubject.tutor_id == user.id))
            session.add_all([TutorSubject(tutor_id=user.id, subject_id=subject_id) for subject_id in subject_ids])
            applied += 1
    elif user.role == UserRole.STUDENT.value:
        profile = await repo.get_student_profile(user.id) or StudentProfile(user_id=user.id)
        for field in STUDENT_FIELDS:
            if field in changes:
                setattr(profile, field, changes[field])
                applied += 1
        session.add(profile)

    if not applied:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    await repo.update(user)
    logger.info(f"User {user.id} updated {applied} field(s)")
    return await build_user_profile(session, user)


@router.get(
    "/{user_id}/sessions",
    response_model=SessionList,
    summary="List User Sessions",
    description="Sessions in which the user is the student or the tutor, newest first.",
)
async def list_user_sessions(
    user_id: str,
    current_user: CurrentUser,
    session: SessionDep,
    status_filter: Optional[SessionStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> SessionList:
    ensure_owner_or_admin(current_user, user_id)
    await _get_user_or_404(session, user_id)
    rows, total = await TutoringSessionRepository(session).list_for_user(
        user_id,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return SessionList(sessions=await present_sessions(session, rows), pagination=Pagination.build(total, limit, offset))


@router.get(
    "/{user_id}/tasks",
    response_model=TaskList,
    summary="List User Tasks",
    description="Personal tasks of the user, newest first.",
)
async def list_user_tasks(
    user_id: str,
    current_user: CurrentUser,
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> TaskList:
    ensure_owner_or_admin(current_user, user_id)
    await _get_user_or_404(session, user_id)
    stmt = select(Task).where(Task.user_id == user_id)
    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    result = await session.execute(stmt.order_by(Task.created_at.desc()).limit(limit).offset(offset))  # type: ignore[attr-defined]
    return TaskList(
        tasks=[TaskRead.model_validate(task) for task in result.scalars().all()],
        pagination=Pagination.build(total, limit, offset),
    )
