"""
Subject catalogue I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import APIModel, Pagination


class SubjectCreate(APIModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=64)
    is_active: bool = True


class SubjectUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=64)
    is_active: Optional[bool] = None


class SubjectRead(APIModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool
    created_at: datetime


class SubjectRef(APIModel):
    """Subject reference embedded in tutor listings."""

    id: str
    name: str
    category: Optional[str] = None


class SubjectTutor(APIModel):
    """Tutor teaching a subject."""

    id: str
    first_name: str
    last_name: str
    profile_picture_url: Optional[str] = None
    title: Optional[str] = None
    hourly_rate: float
    rating: float
    proficiency_level: Optional[str] = None


class SubjectDetail(SubjectRead):
    tutors: List[SubjectTutor] = Field(default_factory=list)


class SubjectList(APIModel):
    subjects: List[SubjectRead]
    pagination: Pagination


class CategoryList(APIModel):
    categories: List[str]
