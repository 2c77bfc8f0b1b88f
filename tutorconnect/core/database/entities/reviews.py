"""
Session review entity models.

Both participants of a finished session may review each other once. Reviews
written by students drive the tutor's public rating.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ReviewerType(str, Enum):
    """Which side of the session wrote the review."""

    STUDENT = "student"
    TUTOR = "tutor"


class SessionReview(Base, table=True):
    """Review of a tutoring session.

    Table: session_reviews
    """

    __tablename__ = "session_reviews"
    __table_args__ = (
        UniqueConstraint("session_id", "reviewer_id", name="uq_session_reviews_session_reviewer"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    session_id: str = Field(foreign_key="tutoring_sessions.id", index=True, max_length=36)
    reviewer_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    reviewee_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    reviewer_type: str = Field(max_length=16)

    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None)
    is_anonymous: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
