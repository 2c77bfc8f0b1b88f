"""
Tutoring session repository.

Besides CRUD this holds the two calendar queries the booking flow depends on:
overlap detection for a new booking and the list of blocking bookings inside a
time range used by slot generation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.tutoring_sessions import BLOCKING_STATUSES, TutoringSession
from .base import BaseRepository


class TutoringSessionRepository(BaseRepository[TutoringSession]):
    """Repository for tutoring sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TutoringSession)

    async def find_conflicts(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[TutoringSession]:
        """Blocking sessions of ``tutor_id`` whose interval overlaps ``[start, end)``."""
        stmt = select(TutoringSession).where(
            TutoringSession.tutor_id == tutor_id,
            TutoringSession.status.in_(BLOCKING_STATUSES),  # type: ignore[attr-defined]
            TutoringSession.scheduled_start < end,
            TutoringSession.scheduled_end > start,
        )
        if exclude_id:
            stmt = stmt.where(TutoringSession.id != exclude_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def blocking_between(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[str] = BLOCKING_STATUSES,
    ) -> List[TutoringSession]:
        """Sessions in ``statuses`` starting inside ``[start, end)``, earliest first."""
        stmt = (
            select(TutoringSession)
            .where(
                TutoringSession.tutor_id == tutor_id,
                TutoringSession.status.in_(list(statuses)),  # type: ignore[attr-defined]
                TutoringSession.scheduled_start >= start,
                TutoringSession.scheduled_start < end,
            )
            .order_by(TutoringSession.scheduled_start)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self,
        user_id: str,
        *,
        as_role: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[TutoringSession], int]:
        """Sessions the user takes part in, newest scheduled start first.

        Args:
            user_id: Participant id
            as_role: ``student`` or ``tutor`` to restrict which side the user is on
            status: Optional status filter
            limit: Page size
            offset: Rows to skip
        """
        if as_role == "student":
            participant = TutoringSession.student_id == user_id
        elif as_role == "tutor":
            participant = TutoringSession.tutor_id == user_id
        else:
            participant = or_(TutoringSession.student_id == user_id, TutoringSession.tutor_id == user_id)

        stmt = select(TutoringSession).where(participant)
        if status:
            stmt = stmt.where(TutoringSession.status == status)

        total = int((await self.session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
        stmt = stmt.order_by(TutoringSession.scheduled_start.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def for_tutor(
        self, tutor_id: str, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[TutoringSession]:
        """Every session taught by the tutor, optionally bounded by scheduled start."""
        stmt = select(TutoringSession).where(TutoringSession.tutor_id == tutor_id)
        if start is not None:
            stmt = stmt.where(TutoringSession.scheduled_start >= start)
        if end is not None:
            stmt = stmt.where(TutoringSession.scheduled_start < end)
        result = await self.session.execute(stmt.order_by(TutoringSession.scheduled_start))
        return list(result.scalars().all())

    async def for_participant_between(self, user_id: str, start: datetime, end: datetime) -> List[TutoringSession]:
        """Sessions of a participant starting inside ``[start, end)``, earliest first."""
        stmt = (
            select(TutoringSession)
            .where(
                or_(TutoringSession.student_id == user_id, TutoringSession.tutor_id == user_id),
                TutoringSession.scheduled_start >= start,
                TutoringSession.scheduled_start < end,
            )
            .order_by(TutoringSession.scheduled_start)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
