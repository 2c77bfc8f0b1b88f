"""
Account helpers shared by the auth, users and admin routers.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tutorconnect.core.database.entities.users import User, UserRole
from tutorconnect.core.database.repositories import UserRepository
from tutorconnect.core.models.io.users import (
    StudentProfileRead,
    TutorProfileRead,
    UserProfileRead,
    UserSummary,
)


async def build_user_profile(session: AsyncSession, user: User) -> UserProfileRead:
    """Account fields plus the profile matching the user's role."""
    repo = UserRepository(session)
    profile = UserProfileRead.model_validate(user)
    if user.role == UserRole.TUTOR.value:
        tutor_profile = await repo.get_tutor_profile(user.id)
        if tutor_profile is not None:
            profile.tutor_profile = TutorProfileRead.model_validate(tutor_profile)
    elif user.role == UserRole.STUDENT.value:
        student_profile = await repo.get_student_profile(user.id)
        if student_profile is not None:
            profile.student_profile = StudentProfileRead.model_validate(student_profile)
    return profile


async def load_user_summaries(session: AsyncSession, user_ids: Iterable[Optional[str]]) -> Dict[str, UserSummary]:
    """Compact references for every id in ``user_ids``, keyed by id."""
    ids = {user_id for user_id in user_ids if user_id}
    if not ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(ids)))  # type: ignore[attr-defined]
    return {user.id: UserSummary.model_validate(user) for user in result.scalars().all()}
