"""
Tutor Catalogue API Endpoints.

Public browsing of active tutors and a tutor's own view of the students they
teach.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import select

from tutorconnect.core.database.entities.subjects import Subject, TutorSubject
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus
from tutorconnect.core.database.entities.users import TutorProfile, User, UserRole
from tutorconnect.core.database.repositories import ReviewRepository, TutoringSessionRepository, UserRepository
from tutorconnect.core.models.io.common import Pagination
from tutorconnect.core.models.io.subjects import SubjectRef
from tutorconnect.core.models.io.tutors import (
    TutorDetail,
    TutorList,
    TutorStudentList,
    TutorStudentSummary,
    TutorSummary,
)
from tutorconnect.server.services.accounts import load_user_summaries
from tutorconnect.server.services.deps import CurrentUser, SessionDep, ensure_owner_or_admin
from tutorconnect.server.services.reviews import present_reviews

router = APIRouter()

RECENT_REVIEWS = 5


async def _subjects_by_tutor(session: SessionDep, tutor_ids: List[str]) -> Dict[str, List[SubjectRef]]:
    if not tutor_ids:
        return {}
    stmt = (
        select(TutorSubject.tutor_id, Subject)
        .join(Subject, Subject.id == TutorSubject.subject_id)
        .where(TutorSubject.tutor_id.in_(tutor_ids))  # type: ignore[attr-defined]
        .order_by(Subject.name)
    )
    grouped: Dict[str, List[SubjectRef]] = {}
    for tutor_id, subject in (await session.execute(stmt)).all():
        grouped.setdefault(tutor_id, []).append(SubjectRef.model_validate(subject))
    return grouped


def _summary(user: User, profile: TutorProfile, subjects: List[SubjectRef]) -> Dict:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "bio": user.bio,
        "profile_picture_url": user.profile_picture_url,
        "title": profile.title,
        "hourly_rate": profile.hourly_rate,
        "years_of_experience": profile.years_of_experience,
        "languages": profile.languages,
        "rating": profile.rating,
        "total_sessions": profile.total_sessions,
        "total_reviews": profile.total_reviews,
        "is_verified": profile.is_verified,
        "subjects": subjects,
    }


@router.get(
    "",
    response_model=TutorList,
    summary="Browse Tutors",
    description="Search active tutors by subject, hourly rate, rating and name. Best rated first.",
)
async def browse_tutors(
    session: SessionDep,
    subject: Optional[str] = Query(default=None, description="Subject id"),
    min_rate: Optional[float] = Query(default=None, alias="minRate", ge=0),
    max_rate: Optional[float] = Query(default=None, alias="maxRate", ge=0),
    min_rating: Optional[float] = Query(default=None, alias="minRating", ge=0, le=5),
    search: Optional[str] = Query(default=None, max_length=100),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> TutorList:
    rows, total = await UserRepository(session).browse_tutors(
        subject_id=subject,
        min_rate=min_rate,
        max_rate=max_rate,
        min_rating=min_rating,
        search=search.strip() if search else None,
        limit=limit,
        offset=offset,
    )
    subjects = await _subjects_by_tutor(session, [user.id for user, _ in rows])
    tutors = [TutorSummary(**_summary(user, profile, subjects.get(user.id, []))) for user, profile in rows]
    return TutorList(tutors=tutors, pagination=Pagination.build(total, limit, offset))


@router.get(
    "/{tutor_id}",
    response_model=TutorDetail,
    summary="Get Tutor",
    description="Tutor profile with subjects and the most recent student reviews.",
    responses={404: {"description": "Tutor not found"}},
)
async def get_tutor(tutor_id: str, session: SessionDep) -> TutorDetail:
    repo = UserRepository(session)
    user = await repo.get_active_by_id(tutor_id, role=UserRole.TUTOR.value)
    profile = await repo.get_tutor_profile(tutor_id) if user is not None else None
    if user is None or profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")

    subjects = await _subjects_by_tutor(session, [tutor_id])
    reviews, _ = await ReviewRepository(session).about_tutor(tutor_id, limit=RECENT_REVIEWS)
    return TutorDetail(
        **_summary(user, profile, subjects.get(tutor_id, [])),
        education=profile.education,
        certifications=profile.certifications,
        member_since=user.created_at,
        recent_reviews=await present_reviews(session, reviews),
    )


@router.get(
    "/{tutor_id}/students",
    response_model=TutorStudentList,
    summary="List Tutor Students",
    description="Students the tutor has sessions with, with per-student counts. Tutor self or admin only.",
    responses={403: {"description": "Access denied"}, 404: {"description": "Tutor not found"}},
)
async def list_tutor_students(tutor_id: str, current_user: CurrentUser, session: SessionDep) -> TutorStudentList:
    ensure_owner_or_admin(current_user, tutor_id)
    if await UserRepository(session).get_active_by_id(tutor_id, role=UserRole.TUTOR.value) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")

    stats: Dict[str, Dict] = {}
    for booking in await TutoringSessionRepository(session).for_tutor(tutor_id):
        entry = stats.setdefault(booking.student_id, {"total": 0, "completed": 0, "last": None})
        entry["total"] += 1
        if booking.status == SessionStatus.COMPLETED.value:
            entry["completed"] += 1
        if entry["last"] is None or booking.scheduled_start > entry["last"]:
            entry["last"] = booking.scheduled_start

    students = await load_user_summaries(session, stats.keys())
    items = [
        TutorStudentSummary(
            student=students[student_id],
            total_sessions=entry["total"],
            completed_sessions=entry["completed"],
            last_session_at=entry["last"],
        )
        for student_id, entry in stats.items()
        if student_id in students
    ]
    items.sort(key=lambda item: item.last_session_at, reverse=True)
    return TutorStudentList(students=items)
