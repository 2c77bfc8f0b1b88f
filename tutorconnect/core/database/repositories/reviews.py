"""
Session review repository.

Holds the rating aggregation used to keep ``tutor_profiles.rating`` in sync with
the reviews students leave.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.reviews import ReviewerType, SessionReview
from ..entities.users import TutorProfile
from .base import BaseRepository


class ReviewRepository(BaseRepository[SessionReview]):
    """Repository for session reviews."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SessionReview)

    async def get_by_reviewer(self, session_id: str, reviewer_id: str) -> Optional[SessionReview]:
        stmt = select(SessionReview).where(
            SessionReview.session_id == session_id,
            SessionReview.reviewer_id == reviewer_id,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def for_session(self, session_id: str) -> List[SessionReview]:
        stmt = select(SessionReview).where(SessionReview.session_id == session_id).order_by(SessionReview.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def about_tutor(self, tutor_id: str, limit: int = 10, offset: int = 0) -> Tuple[List[SessionReview], int]:
        """Student-written reviews of a tutor, newest first, with the total count."""
        base = select(SessionReview).where(
            SessionReview.reviewee_id == tutor_id,
            SessionReview.reviewer_type == ReviewerType.STUDENT.value,
        )
        total = int((await self.session.execute(select(func.count()).select_from(base.subquery()))).scalar_one())
        stmt = base.order_by(SessionReview.created_at.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def by_reviewer(self, reviewer_id: str, limit: int = 10, offset: int = 0) -> Tuple[List[SessionReview], int]:
        base = select(SessionReview).where(SessionReview.reviewer_id == reviewer_id)
        total = int((await self.session.execute(select(func.count()).select_from(base.subquery()))).scalar_one())
        stmt = base.order_by(SessionReview.created_at.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def tutor_rating(self, tutor_id: str) -> Tuple[float, int]:
        """Average student rating of the tutor (2 decimals, 0 when unrated) and review count."""
        stmt = select(func.avg(SessionReview.rating), func.count(SessionReview.id)).where(
            SessionReview.reviewee_id == tutor_id,
            SessionReview.reviewer_type == ReviewerType.STUDENT.value,
        )
        avg, count = (await self.session.execute(stmt)).one()
        return round(float(avg or 0), 2), int(count or 0)

    async def refresh_tutor_rating(self, tutor_id: str) -> Optional[TutorProfile]:
        """Recompute and store the tutor's rating and review count."""
        rating, total = await self.tutor_rating(tutor_id)
        result = await self.session.execute(select(TutorProfile).where(TutorProfile.user_id == tutor_id))
        profile = result.scalars().first()
        if profile is None:
            return None
        profile.rating = rating
        profile.total_reviews = total
        self.session.add(profile)
        await self.session.commit()
        await self.session.refresh(profile)
        return profile
