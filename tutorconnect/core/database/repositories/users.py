"""
User repository.

Data access for accounts and their role profiles, including the tutor browse
query used by the public catalogue.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.subjects import Subject, TutorSubject
from ..entities.users import StudentProfile, TutorProfile, User, UserRole
from ..utils import LIKE_ESCAPE, contains_pattern
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user accounts and profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look up an account by email (case-insensitive)."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_active_by_id(self, user_id: str, role: Optional[str] = None) -> Optional[User]:
        """Return the user when it exists, is active and (optionally) has ``role``."""
        user = await self.get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        if role is not None and user.role != role:
            return None
        return user

    async def lock_for_booking(self, tutor_id: str) -> None:
        """Row-lock the tutor until commit so overlapping bookings are checked one at a time.

        Backends without ``SELECT ... FOR UPDATE`` (SQLite) drop the clause.
        """
        await self.session.execute(select(User.id).where(User.id == tutor_id).with_for_update())

    async def get_tutor_profile(self, user_id: str) -> Optional[TutorProfile]:
        result = await self.session.execute(select(TutorProfile).where(TutorProfile.user_id == user_id))
        return result.scalars().first()

    async def get_student_profile(self, user_id: str) -> Optional[StudentProfile]:
        result = await self.session.execute(select(StudentProfile).where(StudentProfile.user_id == user_id))
        return result.scalars().first()

    async def get_tutor_subjects(self, tutor_id: str) -> List[Subject]:
        stmt = (
            select(Subject)
            .join(TutorSubject, TutorSubject.subject_id == Subject.id)
            .where(TutorSubject.tutor_id == tutor_id)
            .order_by(Subject.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search_users(
        self,
        *,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        """Filter accounts for the admin console.

        Returns:
            The requested page and the total number of matches
        """
        conditions = []
        if role:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active == is_active)
        if search:
            pattern = contains_pattern(search)
            conditions.append(
                or_(
                    func.lower(User.first_name).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(User.last_name).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(User.email).like(pattern, escape=LIKE_ESCAPE),
                )
            )

        total_stmt = select(func.count()).select_from(User)
        page_stmt = select(User).order_by(User.created_at.desc())  # type: ignore[union-attr]
        for condition in conditions:
            total_stmt = total_stmt.where(condition)
            page_stmt = page_stmt.where(condition)

        total = int((await self.session.execute(total_stmt)).scalar_one())
        result = await self.session.execute(page_stmt.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def browse_tutors(
        self,
        *,
        subject_id: Optional[str] = None,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        min_rating: Optional[float] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Tuple[User, TutorProfile]], int]:
        """Active tutors ordered by rating, then by number of sessions taught."""
        stmt = (
            select(User, TutorProfile)
            .join(TutorProfile, TutorProfile.user_id == User.id)
            .where(User.role == UserRole.TUTOR.value, User.is_active == True)  # noqa: E712
        )
        if subject_id:
            stmt = stmt.where(
                User.id.in_(select(TutorSubject.tutor_id).where(TutorSubject.subject_id == subject_id))  # type: ignore[attr-defined]
            )
        if min_rate is not None:
            stmt = stmt.where(TutorProfile.hourly_rate >= min_rate)
        if max_rate is not None:
            stmt = stmt.where(TutorProfile.hourly_rate <= max_rate)
        if min_rating is not None:
            stmt = stmt.where(TutorProfile.rating >= min_rating)
        if search:
            pattern = contains_pattern(search)
            stmt = stmt.where(
                or_(
                    func.lower(User.first_name).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(User.last_name).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(func.coalesce(TutorProfile.title, "")).like(pattern, escape=LIKE_ESCAPE),
                )
            )

        total = int((await self.session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
        stmt = stmt.order_by(TutorProfile.rating.desc(), TutorProfile.total_sessions.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt.limit(limit).offset(offset))
        return [(row[0], row[1]) for row in result.all()], total
