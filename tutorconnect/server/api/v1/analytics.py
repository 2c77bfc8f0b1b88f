"""
Tutor Analytics API Endpoints.

Dashboards for a tutor's own teaching activity. Available to the tutor and to
administrators. Reports cover a named period (``week``, ``month``, ``quarter``,
``year``) ending now, or an explicit ``startDate``/``endDate`` range.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import select

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.payments import Payment
from tutorconnect.core.database.entities.reviews import SessionReview
from tutorconnect.core.database.entities.subjects import Subject
from tutorconnect.core.database.entities.tutoring_sessions import TutoringSession
from tutorconnect.core.database.entities.users import UserRole
from tutorconnect.core.database.repositories import TutoringSessionRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.analytics import (
    Dashboard,
    EarningsReport,
    ReportPeriod,
    StudentProgressList,
    TrendsSection,
)
from tutorconnect.server.services import analytics as reports
from tutorconnect.server.services.accounts import load_user_summaries
from tutorconnect.server.services.deps import CurrentUser, SessionDep, ensure_owner_or_admin

logger = get_logger(__name__)
router = APIRouter()

Period = Literal["week", "month", "quarter", "year"]


async def _ensure_tutor(session: SessionDep, tutor_id: str, user: CurrentUser) -> None:
    ensure_owner_or_admin(user, tutor_id)
    tutor = await UserRepository(session).get_by_id(tutor_id)
    if tutor is None or tutor.role != UserRole.TUTOR.value:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")


def _window(period: Optional[str], start_date: Optional[date], end_date: Optional[date]) -> reports.ReportWindow:
    try:
        return reports.resolve_window(period, start_date, end_date, utc_now())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _period(window: reports.ReportWindow) -> ReportPeriod:
    return ReportPeriod(period=window.period, start_date=window.start, end_date=window.end)


async def _reviews_of(session: SessionDep, tutor_id: str) -> List[SessionReview]:
    result = await session.execute(select(SessionReview).where(SessionReview.reviewee_id == tutor_id))
    return list(result.scalars().all())


async def _subject_names(session: SessionDep, bookings: List[TutoringSession]) -> Dict[str, str]:
    ids = {b.subject_id for b in bookings if b.subject_id}
    if not ids:
        return {}
    result = await session.execute(select(Subject).where(Subject.id.in_(ids)))  # type: ignore[attr-defined]
    return {subject.id: subject.name for subject in result.scalars().all()}


@router.get(
    "/dashboard/{tutor_id}",
    response_model=Dashboard,
    summary="Tutor Dashboard",
    description=(
        "Overview, student, rating, subject and daily trend figures for a tutor. "
        "Daily trends always cover the last 30 days."
    ),
    responses={
        400: {"description": "Invalid period"},
        403: {"description": "Access denied"},
        404: {"description": "Tutor not found"},
    },
)
async def tutor_dashboard(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    period: Period = "month",
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
) -> Dashboard:
    await _ensure_tutor(session, tutor_id, user)
    window = _window(period, start_date, end_date)
    now = utc_now()

    all_bookings = await TutoringSessionRepository(session).for_tutor(tutor_id)
    in_window = [b for b in all_bookings if window.contains(b.scheduled_start)]
    window_ids = {b.id for b in in_window}
    reviews = [r for r in await _reviews_of(session, tutor_id) if r.session_id in window_ids]
    students = await load_user_summaries(session, [b.student_id for b in in_window])

    logger.info(f"Dashboard for tutor {tutor_id} over {window.period}: {len(in_window)} session(s)")
    return Dashboard(
        tutor_id=tutor_id,
        period=_period(window),
        overview=reports.build_overview(in_window, now),
        students=reports.build_students(in_window, all_bookings, window, students),
        ratings=reports.build_ratings(reviews),
        subjects=reports.build_subjects(in_window, await _subject_names(session, in_window)),
        trends=TrendsSection(daily=reports.build_daily_trends(all_bookings, now.date())),
    )


@router.get(
    "/earnings/{tutor_id}",
    response_model=EarningsReport,
    summary="Tutor Earnings",
    description="Completed-session earnings and payments received, in total and per month.",
    responses={
        400: {"description": "Invalid period"},
        403: {"description": "Access denied"},
        404: {"description": "Tutor not found"},
    },
)
async def tutor_earnings(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    period: Period = "month",
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
) -> EarningsReport:
    await _ensure_tutor(session, tutor_id, user)
    window = _window(period, start_date, end_date)

    bookings = await TutoringSessionRepository(session).for_tutor(tutor_id, start=window.start, end=window.end)
    result = await session.execute(
        select(Payment).where(
            Payment.recipient_id == tutor_id,
            Payment.created_at >= window.start,
            Payment.created_at < window.end,
        )
    )
    monthly = reports.build_monthly_earnings(bookings, list(result.scalars().all()))
    return EarningsReport(
        tutor_id=tutor_id,
        period=_period(window),
        completed_sessions=sum(row.sessions for row in monthly),
        total_session_earnings=round(sum(row.session_earnings for row in monthly), 2),
        total_payments_received=round(sum(row.payments_received for row in monthly), 2),
        monthly=monthly,
    )


@router.get(
    "/student-progress/{tutor_id}",
    response_model=StudentProgressList,
    summary="Student Progress",
    description="Per-student session counts, teaching hours, average rating given and last session.",
    responses={403: {"description": "Access denied"}, 404: {"description": "Tutor not found"}},
)
async def student_progress(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    student_id: Optional[str] = Query(default=None, alias="studentId"),
) -> StudentProgressList:
    await _ensure_tutor(session, tutor_id, user)
    bookings = await TutoringSessionRepository(session).for_tutor(tutor_id)
    if student_id:
        bookings = [b for b in bookings if b.student_id == student_id]
    students = await load_user_summaries(session, [b.student_id for b in bookings])
    return StudentProgressList(
        tutor_id=tutor_id,
        students=reports.build_student_progress(bookings, await _reviews_of(session, tutor_id), students),
    )
