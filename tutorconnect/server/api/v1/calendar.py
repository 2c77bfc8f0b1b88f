"""
Calendar API Endpoints.

Merges the caller's tutoring sessions and dated tasks into one event list.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List, Literal, Optional, Sequence

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import select

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.tasks import Task, TaskStatus
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, TutoringSession
from tutorconnect.core.database.entities.users import User
from tutorconnect.core.database.repositories import TutoringSessionRepository
from tutorconnect.core.models.io.calendar import CalendarEvent, CalendarEvents, CalendarStats
from tutorconnect.server.services.accounts import load_user_summaries
from tutorconnect.server.services.deps import CurrentUser, SessionDep

router = APIRouter()

DEFAULT_RANGE_DAYS = 30
MAX_RANGE_DAYS = 366
SOON_DAYS = 7
OPEN_TASK_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)

EventType = Literal["all", "sessions", "tasks"]


async def _session_events(session: SessionDep, user: User, start: datetime, end: datetime) -> List[CalendarEvent]:
    bookings = await TutoringSessionRepository(session).for_participant_between(user.id, start, end)
    others = await load_user_summaries(
        session, [b.tutor_id if b.student_id == user.id else b.student_id for b in bookings]
    )
    events = []
    for booking in bookings:
        other = others.get(booking.tutor_id if booking.student_id == user.id else booking.student_id)
        events.append(
            CalendarEvent(
                id=booking.id,
                type="session",
                title=booking.title,
                start=booking.scheduled_start,
                end=booking.scheduled_end,
                status=booking.status,
                description=booking.description,
                session_type=booking.session_type,
                with_user=f"{other.first_name} {other.last_name}" if other else None,
            )
        )
    return events


async def _task_events(session: SessionDep, user: User, start: datetime, end: datetime) -> List[CalendarEvent]:
    result = await session.execute(
        select(Task).where(Task.user_id == user.id, Task.due_date >= start, Task.due_date < end)  # type: ignore[operator]
    )
    return [
        CalendarEvent(
            id=task.id,
            type="task",
            title=task.title,
            start=task.due_date,
            end=task.due_date,
            status=task.status,
            description=task.description,
            priority=task.priority,
        )
        for task in result.scalars().all()
    ]


async def _events(
    session: SessionDep, user: User, first: date, last: date, event_type: EventType
) -> List[CalendarEvent]:
    start = datetime.combine(first, time.min)
    end = datetime.combine(last + timedelta(days=1), time.min)
    events: List[CalendarEvent] = []
    if event_type in ("all", "sessions"):
        events += await _session_events(session, user, start, end)
    if event_type in ("all", "tasks"):
        events += await _task_events(session, user, start, end)
    return sorted(events, key=lambda event: (event.start, event.type))


def _count(items: Sequence, predicate) -> int:
    return sum(1 for item in items if predicate(item))


@router.get(
    "/events",
    response_model=CalendarEvents,
    summary="Calendar Events",
    description="Sessions and dated tasks between two dates (inclusive), sorted by start. Defaults to the next 30 days.",
    responses={400: {"description": "Invalid date range"}},
)
async def list_events(
    user: CurrentUser,
    session: SessionDep,
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    event_type: EventType = Query(default="all", alias="type"),
) -> CalendarEvents:
    first = start_date or utc_now().date()
    last = end_date or first + timedelta(days=DEFAULT_RANGE_DAYS)
    if last < first:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="endDate must not be before startDate")
    if (last - first).days > MAX_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Date range cannot exceed {MAX_RANGE_DAYS} days"
        )
    return CalendarEvents(
        start_date=first, end_date=last, events=await _events(session, user, first, last, event_type)
    )


@router.get(
    "/events/date/{day}",
    response_model=CalendarEvents,
    summary="Events On A Date",
    description="Sessions and tasks on a single day.",
)
async def events_on_date(
    day: date,
    user: CurrentUser,
    session: SessionDep,
    event_type: EventType = Query(default="all", alias="type"),
) -> CalendarEvents:
    return CalendarEvents(start_date=day, end_date=day, events=await _events(session, user, day, day, event_type))


@router.get(
    "/stats",
    response_model=CalendarStats,
    summary="Calendar Summary",
    description="Upcoming sessions in the next 7 days, tasks due soon, overdue tasks and sessions completed this month.",
)
async def calendar_stats(user: CurrentUser, session: SessionDep) -> CalendarStats:
    now = utc_now()
    soon = now + timedelta(days=SOON_DAYS)
    month_start = datetime.combine(now.date().replace(day=1), time.min)
    next_month = datetime.combine((month_start + timedelta(days=32)).date().replace(day=1), time.min)

    bookings: List[TutoringSession] = await TutoringSessionRepository(session).for_participant_between(
        user.id, month_start, max(soon, next_month)
    )
    result = await session.execute(
        select(Task).where(Task.user_id == user.id, Task.status.in_(OPEN_TASK_STATUSES))  # type: ignore[attr-defined]
    )
    open_tasks = [task for task in result.scalars().all() if task.due_date is not None]

    return CalendarStats(
        upcoming_sessions=_count(
            bookings, lambda b: b.status == SessionStatus.SCHEDULED.value and now <= b.scheduled_start < soon
        ),
        tasks_due_soon=_count(open_tasks, lambda t: now <= t.due_date < soon),
        overdue_tasks=_count(open_tasks, lambda t: t.due_date < now),
        completed_sessions_this_month=_count(
            bookings,
            lambda b: b.status == SessionStatus.COMPLETED.value and month_start <= b.scheduled_start < next_month,
        ),
    )
