"""
Tutoring session I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, SessionType

from .common import APIModel, Pagination
from .users import UserSummary


class SessionCreate(APIModel):
    """Booking request; the caller is always the student."""

    tutor_id: str
    subject_id: Optional[str] = None
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    session_type: SessionType = SessionType.ONLINE
    scheduled_start: datetime
    scheduled_end: datetime
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    location_address: Optional[str] = Field(default=None, max_length=255)
    hourly_rate: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_interval(self) -> "SessionCreate":
        if self.scheduled_end <= self.scheduled_start:
            raise ValueError("scheduledEnd must be after scheduledStart")
        return self


class SessionUpdate(APIModel):
    """Partial update; which fields apply depends on the caller's side."""

    status: Optional[SessionStatus] = None
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    student_rating: Optional[int] = Field(default=None, ge=1, le=5)
    student_feedback: Optional[str] = None
    tutor_rating: Optional[int] = Field(default=None, ge=1, le=5)
    tutor_feedback: Optional[str] = None
    session_notes: Optional[str] = None


class SessionRead(APIModel):
    id: str
    student_id: str
    tutor_id: str
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    session_type: str
    status: str
    scheduled_start: datetime
    scheduled_end: datetime
    duration_minutes: int
    hourly_rate: float
    meeting_link: Optional[str] = None
    meeting_room: Optional[str] = None
    student_rating: Optional[int] = None
    tutor_rating: Optional[int] = None
    student_feedback: Optional[str] = None
    tutor_feedback: Optional[str] = None
    session_notes: Optional[str] = None
    payment_status: str
    created_at: datetime
    student: Optional[UserSummary] = None
    tutor: Optional[UserSummary] = None


class SessionList(APIModel):
    sessions: List[SessionRead]
    pagination: Pagination
