"""
Availability slot repository.
"""

from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.availability import AvailabilitySlot
from .base import BaseRepository


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    """Repository for tutor availability slots."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AvailabilitySlot)

    async def get_for_tutor(self, tutor_id: str, slot_id: str) -> Optional[AvailabilitySlot]:
        """Return the slot only when it belongs to ``tutor_id``."""
        slot = await self.get_by_id(slot_id)
        if slot is None or slot.tutor_id != tutor_id:
            return None
        return slot

    async def recurring(
        self, tutor_id: str, day_of_week: Optional[int] = None, available_only: bool = True
    ) -> List[AvailabilitySlot]:
        """Recurring slots ordered by weekday then start time."""
        stmt = select(AvailabilitySlot).where(
            AvailabilitySlot.tutor_id == tutor_id,
            AvailabilitySlot.is_recurring == True,  # noqa: E712
        )
        if day_of_week is not None:
            stmt = stmt.where(AvailabilitySlot.day_of_week == day_of_week)
        if available_only:
            stmt = stmt.where(AvailabilitySlot.is_available == True)  # noqa: E712
        stmt = stmt.order_by(AvailabilitySlot.day_of_week, AvailabilitySlot.start_time)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def specific_between(
        self, tutor_id: str, start: date, end: date, available_only: bool = True
    ) -> List[AvailabilitySlot]:
        """Date-bound slots with ``specific_date`` in ``[start, end]``."""
        stmt = select(AvailabilitySlot).where(
            AvailabilitySlot.tutor_id == tutor_id,
            AvailabilitySlot.is_recurring == False,  # noqa: E712
            AvailabilitySlot.specific_date >= start,
            AvailabilitySlot.specific_date <= end,
        )
        if available_only:
            stmt = stmt.where(AvailabilitySlot.is_available == True)  # noqa: E712
        stmt = stmt.order_by(AvailabilitySlot.specific_date, AvailabilitySlot.start_time)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_overlapping(
        self,
        tutor_id: str,
        start: time,
        end: time,
        *,
        day_of_week: Optional[int] = None,
        specific_date: Optional[date] = None,
        exclude_id: Optional[str] = None,
    ) -> List[AvailabilitySlot]:
        """Slots of the same kind whose window overlaps ``[start, end)``.

        Pass ``day_of_week`` to check recurring slots, ``specific_date`` to check
        date-bound slots.
        """
        stmt = select(AvailabilitySlot).where(
            AvailabilitySlot.tutor_id == tutor_id,
            AvailabilitySlot.start_time < end,
            AvailabilitySlot.end_time > start,
        )
        if specific_date is not None:
            stmt = stmt.where(
                AvailabilitySlot.is_recurring == False,  # noqa: E712
                AvailabilitySlot.specific_date == specific_date,
            )
        else:
            stmt = stmt.where(
                AvailabilitySlot.is_recurring == True,  # noqa: E712
                AvailabilitySlot.day_of_week == day_of_week,
            )
        if exclude_id:
            stmt = stmt.where(AvailabilitySlot.id != exclude_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def replace_recurring(self, tutor_id: str, slots: List[AvailabilitySlot]) -> List[AvailabilitySlot]:
        """Atomically swap every recurring slot of the tutor for ``slots``."""
        await self.session.execute(
            sa_delete(AvailabilitySlot).where(
                AvailabilitySlot.tutor_id == tutor_id,
                AvailabilitySlot.is_recurring == True,  # noqa: E712
            )
        )
        self.session.add_all(slots)
        await self.session.commit()
        for slot in slots:
            await self.session.refresh(slot)
        return slots
