"""
User and authentication I/O models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from tutorconnect.core.security import validate_password_strength

from .common import APIModel, PagePagination


class TutorProfileRead(APIModel):
    title: Optional[str] = None
    hourly_rate: float
    years_of_experience: int
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    rating: float
    total_sessions: int
    total_reviews: int
    is_verified: bool


class StudentProfileRead(APIModel):
    academic_level: Optional[str] = None
    school: Optional[str] = None
    learning_goals: Optional[str] = None
    learning_style: Optional[str] = None


class UserRead(APIModel):
    """Public account fields (never includes the password hash)."""

    id: str
    email: str
    role: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    is_active: bool
    is_verified: bool
    created_at: datetime


class UserProfileRead(UserRead):
    """Account plus the profile matching its role."""

    tutor_profile: Optional[TutorProfileRead] = None
    student_profile: Optional[StudentProfileRead] = None


class UserSummary(APIModel):
    """Compact user reference embedded in other resources."""

    id: str
    first_name: str
    last_name: str
    role: str
    profile_picture_url: Optional[str] = None


class RegisterRequest(APIModel):
    email: EmailStr
    password: str
    role: Literal["student", "tutor"] = "student"
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    date_of_birth: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=255)
    pincode: Optional[str] = Field(default=None, max_length=16)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return validate_password_strength(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name cannot be blank")
        return value


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(APIModel):
    message: str
    token: str
    user: UserProfileRead


class VerifyResponse(APIModel):
    valid: bool
    user: UserRead


class PasswordChangeRequest(APIModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return validate_password_strength(value)


class ForgotPasswordRequest(APIModel):
    email: EmailStr


class ResetPasswordRequest(APIModel):
    token: str = Field(min_length=64, max_length=64, pattern=r"^[0-9a-fA-F]{64}$")
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return validate_password_strength(value)


class UserUpdate(APIModel):
    """Profile update. Tutor and student specific fields apply only to that role."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    bio: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=255)
    pincode: Optional[str] = Field(default=None, max_length=16)
    date_of_birth: Optional[date] = None
    profile_picture_url: Optional[str] = Field(default=None, max_length=500)

    # Tutor profile
    title: Optional[str] = Field(default=None, max_length=255)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=80)
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    subject_ids: Optional[List[str]] = None

    # Student profile
    academic_level: Optional[str] = Field(default=None, max_length=64)
    school: Optional[str] = Field(default=None, max_length=255)
    learning_goals: Optional[str] = None
    learning_style: Optional[str] = Field(default=None, max_length=64)


class UserStatusUpdate(APIModel):
    is_active: bool


class UserList(APIModel):
    users: List[UserRead]
    pagination: PagePagination
