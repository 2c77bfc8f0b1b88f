"""
Tutoring session entity models.

A tutoring session is a booked one-on-one appointment between a student and a
tutor. Only ``scheduled`` and ``in_progress`` sessions block the tutor's calendar.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class SessionStatus(str, Enum):
    """Lifecycle status of a tutoring session."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class SessionType(str, Enum):
    """Delivery mode of a tutoring session."""

    ONLINE = "online"
    IN_PERSON = "in_person"


class SessionPaymentStatus(str, Enum):
    """Whether the student has paid for the session."""

    PENDING = "pending"
    PAID = "paid"


BLOCKING_STATUSES = (SessionStatus.SCHEDULED.value, SessionStatus.IN_PROGRESS.value)


class TutoringSessionBase(Base):
    """Base fields for tutoring sessions."""

    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    session_type: str = Field(default=SessionType.ONLINE.value, max_length=16)
    status: str = Field(default=SessionStatus.SCHEDULED.value, max_length=16, index=True)
    scheduled_start: datetime = Field(index=True)
    scheduled_end: datetime
    hourly_rate: float = Field(default=0.0, ge=0)
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    meeting_room: Optional[str] = Field(default=None, max_length=255)


class TutoringSession(TutoringSessionBase, table=True):
    """Persistent tutoring session.

    Table: tutoring_sessions
    """

    __tablename__ = "tutoring_sessions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    student_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    tutor_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    subject_id: Optional[str] = Field(default=None, foreign_key="subjects.id", max_length=36)

    student_rating: Optional[int] = Field(default=None, ge=1, le=5)
    tutor_rating: Optional[int] = Field(default=None, ge=1, le=5)
    student_feedback: Optional[str] = Field(default=None)
    tutor_feedback: Optional[str] = Field(default=None)
    session_notes: Optional[str] = Field(default=None)
    payment_status: str = Field(default=SessionPaymentStatus.PENDING.value, max_length=16)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def duration_minutes(self) -> int:
        return int((self.scheduled_end - self.scheduled_start).total_seconds() // 60)

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.tutor_id)

    def __repr__(self) -> str:
        return f"TutoringSession(id={self.id}, tutor={self.tutor_id}, student={self.student_id}, status={self.status})"
