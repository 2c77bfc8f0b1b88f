"""
User entity models.

This module contains the account table and the two role-specific profile
tables. Every person on the platform has exactly one ``users`` row; tutors
additionally own a ``tutor_profiles`` row and students a ``student_profiles`` row.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserRole(str, Enum):
    """Role of an account on the marketplace."""

    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class UserBase(Base):
    """Base fields for user accounts."""

    email: str = Field(max_length=255, unique=True, index=True, description="Login email, stored lower-cased")
    role: str = Field(default=UserRole.STUDENT.value, max_length=16, index=True, description="Account role")
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    date_of_birth: Optional[date] = Field(default=None)
    address: Optional[str] = Field(default=None, max_length=255)
    pincode: Optional[str] = Field(default=None, max_length=16)
    bio: Optional[str] = Field(default=None)
    profile_picture_url: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, description="Inactive accounts cannot log in")
    is_verified: bool = Field(default=False)


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    password_hash: str = Field(max_length=255)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class TutorProfile(Base, table=True):
    """Teaching profile attached to a tutor account.

    ``rating`` is the average of student reviews rounded to two decimals and is
    kept in sync by the review endpoints.

    Table: tutor_profiles
    """

    __tablename__ = "tutor_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, max_length=36)

    title: Optional[str] = Field(default=None, max_length=255)
    hourly_rate: float = Field(default=0.0, ge=0)
    years_of_experience: int = Field(default=0, ge=0)
    education: Optional[str] = Field(default=None)
    certifications: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    languages: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    rating: float = Field(default=0.0)
    total_sessions: int = Field(default=0)
    total_reviews: int = Field(default=0)
    is_verified: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class StudentProfile(Base, table=True):
    """Learning profile attached to a student account.

    Table: student_profiles
    """

    __tablename__ = "student_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, max_length=36)

    academic_level: Optional[str] = Field(default=None, max_length=64)
    school: Optional[str] = Field(default=None, max_length=255)
    learning_goals: Optional[str] = Field(default=None)
    learning_style: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
