"""
Public tutor catalogue I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import APIModel, Pagination
from .reviews import ReviewRead
from .subjects import SubjectRef
from .users import UserSummary


class TutorSummary(APIModel):
    """Tutor card shown in search results."""

    id: str
    first_name: str
    last_name: str
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    title: Optional[str] = None
    hourly_rate: float
    years_of_experience: int
    languages: Optional[List[str]] = None
    rating: float
    total_sessions: int
    total_reviews: int
    is_verified: bool
    subjects: List[SubjectRef] = Field(default_factory=list)


class TutorDetail(TutorSummary):
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    member_since: datetime
    recent_reviews: List[ReviewRead] = Field(default_factory=list)


class TutorList(APIModel):
    tutors: List[TutorSummary]
    pagination: Pagination


class TutorStudentSummary(APIModel):
    student: UserSummary
    total_sessions: int
    completed_sessions: int
    last_session_at: Optional[datetime] = None


class TutorStudentList(APIModel):
    students: List[TutorStudentSummary]
