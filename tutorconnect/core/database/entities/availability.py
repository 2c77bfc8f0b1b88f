"""
Tutor availability entity models.

A slot is either recurring (every week on ``day_of_week``) or bound to a single
``specific_date``. ``day_of_week`` counts from 0 = Sunday.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class AvailabilitySlotBase(Base):
    """Base fields for availability slots."""

    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time
    is_recurring: bool = Field(default=True)
    specific_date: Optional[date] = Field(default=None, index=True)
    is_available: bool = Field(default=True)


class AvailabilitySlot(AvailabilitySlotBase, table=True):
    """Bookable time window published by a tutor.

    Table: tutor_availability_slots
    """

    __tablename__ = "tutor_availability_slots"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    tutor_id: str = Field(foreign_key="users.id", index=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        when = self.specific_date.isoformat() if self.specific_date else f"dow={self.day_of_week}"
        return f"AvailabilitySlot(id={self.id}, {when}, {self.start_time}-{self.end_time})"
