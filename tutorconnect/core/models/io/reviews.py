"""
Session review I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import APIModel, Pagination
from .users import UserSummary


class ReviewCreate(APIModel):
    session_id: str
    reviewee_id: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    is_anonymous: bool = False


class ReviewUpdate(APIModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewRead(APIModel):
    id: str
    session_id: str
    reviewer_id: Optional[str] = None
    reviewee_id: str
    reviewer_type: str
    rating: int
    comment: Optional[str] = None
    is_anonymous: bool
    created_at: datetime
    reviewer: Optional[UserSummary] = None


class ReviewList(APIModel):
    reviews: List[ReviewRead]
    pagination: Pagination


class TutorReviewList(ReviewList):
    average_rating: float


class SessionReviewList(APIModel):
    reviews: List[ReviewRead]
