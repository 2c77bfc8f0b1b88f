"""
Subject entity models.

Subjects form the catalogue tutors teach from. ``tutor_subjects`` links a tutor
account to the subjects listed on their profile.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class SubjectBase(Base):
    """Base fields for subjects."""

    name: str = Field(max_length=100, unique=True, index=True)
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, max_length=64, index=True)
    is_active: bool = Field(default=True)


class Subject(SubjectBase, table=True):
    """Catalogue subject.

    Table: subjects
    """

    __tablename__ = "subjects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class TutorSubject(Base, table=True):
    """Subject taught by a tutor.

    Table: tutor_subjects
    """

    __tablename__ = "tutor_subjects"
    __table_args__ = (
        UniqueConstraint("tutor_id", "subject_id", name="uq_tutor_subjects_tutor_subject"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    tutor_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    subject_id: str = Field(foreign_key="subjects.id", index=True, max_length=36)
    proficiency_level: Optional[str] = Field(default=None, max_length=32)
    created_at: datetime = Field(default_factory=utc_now)
