"""
Subject Catalogue API Endpoints.

Anyone can browse subjects; only administrators curate the catalogue.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_, update
from sqlmodel import select

from tutorconnect.core.database.entities.subjects import Subject, TutorSubject
from tutorconnect.core.database.entities.tasks import Task
from tutorconnect.core.database.entities.tutoring_sessions import TutoringSession
from tutorconnect.core.database.entities.users import TutorProfile, User
from tutorconnect.core.database.repositories import BaseRepository
from tutorconnect.core.database.utils import LIKE_ESCAPE, contains_pattern
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse, Pagination
from tutorconnect.core.models.io.subjects import (
    CategoryList,
    SubjectCreate,
    SubjectDetail,
    SubjectList,
    SubjectRead,
    SubjectTutor,
    SubjectUpdate,
)
from tutorconnect.server.services.deps import AdminUser, SessionDep

logger = get_logger(__name__)
router = APIRouter()

SUBJECT_TUTOR_LIMIT = 10


async def _get_subject_or_404(session: SessionDep, subject_id: str) -> Subject:
    subject = await session.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return subject


async def _ensure_unique_name(session: SessionDep, name: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Subject).where(func.lower(Subject.name) == name.strip().lower())
    if exclude_id:
        stmt = stmt.where(Subject.id != exclude_id)
    if (await session.execute(stmt)).scalars().first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject with this name already exists")


@router.get(
    "",
    response_model=SubjectList,
    summary="List Subjects",
    description="List catalogue subjects filtered by category, active flag and name or description search.",
)
async def list_subjects(
    session: SessionDep,
    category: Optional[str] = None,
    active: bool = True,
    search: Optional[str] = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> SubjectList:
    stmt = select(Subject).where(Subject.is_active == active)
    if category:
        stmt = stmt.where(Subject.category == category)
    if search:
        pattern = contains_pattern(search.strip())
        stmt = stmt.where(
            or_(
                func.lower(Subject.name).like(pattern, escape=LIKE_ESCAPE),
                func.lower(func.coalesce(Subject.description, "")).like(pattern, escape=LIKE_ESCAPE),
            )
        )
    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    result = await session.execute(stmt.order_by(Subject.category, Subject.name).limit(limit).offset(offset))
    return SubjectList(
        subjects=[SubjectRead.model_validate(subject) for subject in result.scalars().all()],
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/meta/categories",
    response_model=CategoryList,
    summary="List Subject Categories",
    description="Distinct categories of active subjects in alphabetical order.",
)
async def list_categories(session: SessionDep) -> CategoryList:
    stmt = (
        select(Subject.category)
        .where(Subject.is_active == True, Subject.category.is_not(None))  # type: ignore[union-attr]  # noqa: E712
        .distinct()
        .order_by(Subject.category)
    )
    return CategoryList(categories=[row for row in (await session.execute(stmt)).scalars().all()])


@router.get(
    "/{subject_id}",
    response_model=SubjectDetail,
    summary="Get Subject",
    description="Subject with up to ten active tutors teaching it, best rated first.",
    responses={404: {"description": "Subject not found"}},
)
async def get_subject(subject_id: str, session: SessionDep) -> SubjectDetail:
    subject = await _get_subject_or_404(session, subject_id)
    stmt = (
        select(User, TutorProfile, TutorSubject.proficiency_level)
        .join(TutorSubject, TutorSubject.tutor_id == User.id)
        .join(TutorProfile, TutorProfile.user_id == User.id)
        .where(TutorSubject.subject_id == subject_id, User.is_active == True)  # noqa: E712
        .order_by(TutorProfile.rating.desc())  # type: ignore[attr-defined]
        .limit(SUBJECT_TUTOR_LIMIT)
    )
    tutors = [
        SubjectTutor(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_picture_url=user.profile_picture_url,
            title=profile.title,
            hourly_rate=profile.hourly_rate,
            rating=profile.rating,
            proficiency_level=proficiency,
        )
        for user, profile, proficiency in (await session.execute(stmt)).all()
    ]
    detail = SubjectDetail.model_validate(subject)
    detail.tutors = tutors
    return detail


@router.post(
    "",
    response_model=SubjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Subject",
    description="Add a subject to the catalogue. Administrators only.",
    responses={409: {"description": "Subject name already exists"}},
)
async def create_subject(data: SubjectCreate, admin: AdminUser, session: SessionDep) -> SubjectRead:
    await _ensure_unique_name(session, data.name)
    subject = Subject(
        name=data.name.strip(),
        description=data.description,
        category=data.category,
        is_active=data.is_active,
    )
    subject = await BaseRepository(session, Subject).create(subject)
    logger.info(f"Admin {admin.id} created subject {subject.id} ({subject.name})")
    return SubjectRead.model_validate(subject)


@router.put(
    "/{subject_id}",
    response_model=SubjectRead,
    summary="Update Subject",
    description="Update a catalogue subject. Administrators only.",
    responses={400: {"description": "No fields to update"}, 404: {"description": "Subject not found"}},
)
async def update_subject(subject_id: str, data: SubjectUpdate, admin: AdminUser, session: SessionDep) -> SubjectRead:
    subject = await _get_subject_or_404(session, subject_id)
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    if "name" in changes:
        await _ensure_unique_name(session, changes["name"], exclude_id=subject_id)
        changes["name"] = changes["name"].strip()
    for field, value in changes.items():
        setattr(subject, field, value)
    subject = await BaseRepository(session, Subject).update(subject)
    return SubjectRead.model_validate(subject)


@router.delete(
    "/{subject_id}",
    response_model=MessageResponse,
    summary="Delete Subject",
    description="Remove a subject that no tutor teaches and no session references. Administrators only.",
    responses={404: {"description": "Subject not found"}, 409: {"description": "Subject is in use"}},
)
async def delete_subject(subject_id: str, admin: AdminUser, session: SessionDep) -> MessageResponse:
    await _get_subject_or_404(session, subject_id)
    for model in (TutorSubject, TutoringSession):
        in_use = await session.execute(
            select(func.count()).select_from(model).where(model.subject_id == subject_id)
        )
        if int(in_use.scalar_one()):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Subject is referenced by tutors or sessions and cannot be deleted",
            )

    await session.execute(update(Task).where(Task.subject_id == subject_id).values(subject_id=None))
    await BaseRepository(session, Subject).delete(subject_id)
    logger.info(f"Admin {admin.id} deleted subject {subject_id}")
    return MessageResponse(message="Subject deleted successfully")
