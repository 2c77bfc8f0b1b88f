"""Shared fixtures for API tests.

Every test gets a fresh in-memory SQLite database, an HTTP client bound to the
ASGI app, and small factories for the rows most tests start from.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from tutorconnect.core.database import get_session
from tutorconnect.core.database.base import Base, utc_now
from tutorconnect.core.database.entities.subjects import Subject
from tutorconnect.core.database.entities.tutoring_sessions import TutoringSession
from tutorconnect.core.database.entities.users import StudentProfile, TutorProfile, User, UserRole
from tutorconnect.core.security import create_access_token, hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Password123"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with every table."""
    from tutorconnect.core.database import entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the database and assistant overridden."""
    from tutorconnect.server.main import app
    from tutorconnect.server.services.study_assistant import StudyAssistant, get_study_assistant

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    # No model configured: the assistant answers with its fallback reply
    app.dependency_overrides[get_study_assistant] = lambda: StudyAssistant()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build an ``Authorization`` header for a user."""

    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def make_user(session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for accounts with the profile matching their role."""
    counter = {"n": 0}

    async def _make(
        role: str = UserRole.STUDENT.value,
        *,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        first_name: Optional[str] = None,
        last_name: str = "Tester",
        is_active: bool = True,
        hourly_rate: float = 40.0,
        **profile_fields,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"{role}{n}@example.com",
            password_hash=hash_password(password),
            role=role,
            first_name=first_name or f"{role.capitalize()}{n}",
            last_name=last_name,
            is_active=is_active,
        )
        session.add(user)
        if role == UserRole.TUTOR.value:
            session.add(TutorProfile(user_id=user.id, hourly_rate=hourly_rate, **profile_fields))
        elif role == UserRole.STUDENT.value:
            session.add(StudentProfile(user_id=user.id, **profile_fields))
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_subject(session: AsyncSession) -> Callable[..., Awaitable[Subject]]:
    async def _make(name: str = "Mathematics", category: str = "academics", is_active: bool = True) -> Subject:
        subject = Subject(name=name, description=f"{name} lessons", category=category, is_active=is_active)
        session.add(subject)
        await session.commit()
        await session.refresh(subject)
        return subject

    return _make


@pytest.fixture
def make_booking(session: AsyncSession) -> Callable[..., Awaitable[TutoringSession]]:
    """Factory for tutoring sessions; defaults to one hour starting tomorrow."""

    async def _make(
        student: User,
        tutor: User,
        *,
        start: Optional[datetime] = None,
        hours: float = 1.0,
        status: str = "scheduled",
        hourly_rate: float = 40.0,
        subject_id: Optional[str] = None,
        title: str = "Algebra review",
    ) -> TutoringSession:
        start = start or (utc_now() + timedelta(days=1)).replace(microsecond=0)
        booking = TutoringSession(
            student_id=student.id,
            tutor_id=tutor.id,
            subject_id=subject_id,
            title=title,
            scheduled_start=start,
            scheduled_end=start + timedelta(hours=hours),
            status=status,
            hourly_rate=hourly_rate,
        )
        session.add(booking)
        await session.commit()
        await session.refresh(booking)
        return booking

    return _make
