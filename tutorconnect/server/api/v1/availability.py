"""
Tutor Availability API Endpoints.

Tutors publish weekly recurring windows and one-off windows for specific dates.
Students read them back as concrete bookable start times: every window is cut
into candidate starts on a 15 minute grid, and candidates that collide with a
``scheduled`` or ``in_progress`` session or that already lie in the past are
dropped (see ``tutorconnect.server.services.availability``).

Wall-clock times are ``HH:MM`` and ``dayOfWeek`` counts from 0 = Sunday.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query, status

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.availability import AvailabilitySlot
from tutorconnect.core.database.entities.tutoring_sessions import BLOCKING_STATUSES
from tutorconnect.core.database.entities.users import User, UserRole
from tutorconnect.core.database.repositories import AvailabilityRepository, TutoringSessionRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.availability import (
    AvailabilityOverview,
    BookableSlotRead,
    BookableSlots,
    BookedSession,
    BulkAvailabilityRequest,
    BulkAvailabilityResponse,
    DateSlots,
    DayOverview,
    RecurringSlotCreate,
    SlotRead,
    SlotUpdate,
    SpecificSlotCreate,
    TutorAvailability,
)
from tutorconnect.core.models.io.common import MessageResponse
from tutorconnect.server.services.availability import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MAX_OVERVIEW_DAYS,
    MIN_DURATION_MINUTES,
    BookableSlot,
    TimeWindow,
    date_range,
    day_index,
    day_of_week,
    group_by_date,
    slots_for_date,
    slots_for_range,
    window_contains,
)
from tutorconnect.server.services.deps import CurrentUser, SessionDep, TutorUser, is_admin

logger = get_logger(__name__)
router = APIRouter()

WEEK_DAYS = 7


def _ensure_can_manage(user: User, tutor_id: str) -> None:
    if is_admin(user):
        return
    if user.id != tutor_id or user.role != UserRole.TUTOR.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


async def _ensure_tutor(session: SessionDep, tutor_id: str) -> None:
    if await UserRepository(session).get_active_by_id(tutor_id, role=UserRole.TUTOR.value) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")


def _check_window(start: time, end: time) -> None:
    if start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start time must be before end time")


def _day_bounds(first: date, last: date) -> Tuple[datetime, datetime]:
    """``[first 00:00, last+1 00:00)`` as naive UTC datetimes."""
    return datetime.combine(first, time.min), datetime.combine(last + timedelta(days=1), time.min)


async def _windows_by_date(
    session: SessionDep, tutor_id: str, dates: List[date], include_specific: bool = True
) -> Dict[date, List[TimeWindow]]:
    """Available windows per date: recurring ones for the weekday, plus date-bound ones."""
    repo = AvailabilityRepository(session)
    recurring: Dict[int, List[TimeWindow]] = {}
    for slot in await repo.recurring(tutor_id):
        recurring.setdefault(slot.day_of_week, []).append(TimeWindow(slot.start_time, slot.end_time))

    specific: Dict[date, List[TimeWindow]] = {}
    if include_specific and dates:
        for slot in await repo.specific_between(tutor_id, min(dates), max(dates)):
            specific.setdefault(slot.specific_date, []).append(TimeWindow(slot.start_time, slot.end_time))

    return {target: recurring.get(day_of_week(target), []) + specific.get(target, []) for target in dates}


async def _bookings_between(session: SessionDep, tutor_id: str, first: date, last: date) -> List[Tuple[datetime, datetime]]:
    start, end = _day_bounds(first, last)
    conflicts = await TutoringSessionRepository(session).find_conflicts(tutor_id, start, end)
    return [(booking.scheduled_start, booking.scheduled_end) for booking in conflicts]


def _present(slots: List[BookableSlot]) -> List[BookableSlotRead]:
    return [
        BookableSlotRead(date=slot.date, start_time=slot.start_time, end_time=slot.end_time, start=slot.start, end=slot.end)
        for slot in slots
    ]


@router.post(
    "",
    response_model=BulkAvailabilityResponse,
    summary="Replace Weekly Availability",
    description=(
        "Replace every recurring slot of the calling tutor with a weekly schedule keyed by day name, e.g. "
        '{"availability": {"monday": {"available": true, "slots": [{"startTime": "09:00", "endTime": "12:00"}]}}}.'
    ),
    responses={400: {"description": "Unknown day or invalid window"}, 403: {"description": "Tutors only"}},
)
async def replace_weekly_availability(
    data: BulkAvailabilityRequest, user: TutorUser, session: SessionDep
) -> BulkAvailabilityResponse:
    slots: List[AvailabilitySlot] = []
    for name, day in data.availability.items():
        try:
            index = day_index(name)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not day.available:
            continue
        windows = sorted((window.start_time, window.end_time) for window in day.slots)
        for position, (start, end) in enumerate(windows):
            if start >= end:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid time window for {name}")
            if position and windows[position - 1][1] > start:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Overlapping time windows for {name}")
            slots.append(
                AvailabilitySlot(tutor_id=user.id, day_of_week=index, start_time=start, end_time=end, is_recurring=True)
            )

    saved = await AvailabilityRepository(session).replace_recurring(user.id, slots)
    saved.sort(key=lambda slot: (slot.day_of_week, slot.start_time))
    logger.info(f"Tutor {user.id} replaced weekly availability with {len(saved)} slot(s)")
    return BulkAvailabilityResponse(
        message="Availability updated successfully",
        slots=[SlotRead.model_validate(slot) for slot in saved],
    )


@router.get(
    "/{tutor_id}",
    response_model=TutorAvailability,
    summary="Get Tutor Availability",
    description=(
        "Available recurring slots ordered by weekday and start time. With includeBooked=true the sessions "
        "booked on `date`, in the week starting `weekStart`, or in the next seven days are listed as well."
    ),
    responses={404: {"description": "Tutor not found"}},
)
async def get_tutor_availability(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    include_booked: bool = Query(default=False, alias="includeBooked"),
    on_date: Optional[date] = Query(default=None, alias="date"),
    week_start: Optional[date] = Query(default=None, alias="weekStart"),
) -> TutorAvailability:
    await _ensure_tutor(session, tutor_id)
    slots = await AvailabilityRepository(session).recurring(tutor_id)
    response = TutorAvailability(tutor_id=tutor_id, slots=[SlotRead.model_validate(slot) for slot in slots])

    if include_booked:
        if on_date is not None:
            first, last = on_date, on_date
        else:
            first = week_start or utc_now().date()
            last = first + timedelta(days=WEEK_DAYS - 1)
        start, end = _day_bounds(first, last)
        booked = await TutoringSessionRepository(session).blocking_between(tutor_id, start, end, BLOCKING_STATUSES)
        response.booked_sessions = [BookedSession.model_validate(booking) for booking in booked]
    return response


@router.get(
    "/{tutor_id}/slots",
    response_model=DateSlots,
    summary="Get Bookable Slots For Date",
    description="Bookable start times on one date, cut from the tutor's recurring windows for that weekday.",
    responses={404: {"description": "Tutor not found"}},
)
async def get_slots_for_date(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    on_date: date = Query(alias="date"),
    duration: int = Query(default=DEFAULT_DURATION_MINUTES, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES),
) -> DateSlots:
    await _ensure_tutor(session, tutor_id)
    windows = await _windows_by_date(session, tutor_id, [on_date], include_specific=False)
    bookings = await _bookings_between(session, tutor_id, on_date, on_date)
    slots = slots_for_date(on_date, windows[on_date], bookings, duration, utc_now())
    return DateSlots(
        tutor_id=tutor_id,
        date=on_date,
        day_of_week=day_of_week(on_date),
        duration=duration,
        slots=_present(slots),
    )


@router.get(
    "/{tutor_id}/overview",
    response_model=AvailabilityOverview,
    summary="Get Availability Overview",
    description=f"Per-date summary of bookable slots for an inclusive range of at most {MAX_OVERVIEW_DAYS} days.",
    responses={400: {"description": "Invalid date range"}, 404: {"description": "Tutor not found"}},
)
async def get_availability_overview(
    tutor_id: str,
    user: CurrentUser,
    session: SessionDep,
    start_date: date = Query(alias="startDate"),
    end_date: date = Query(alias="endDate"),
    duration: int = Query(default=DEFAULT_DURATION_MINUTES, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES),
) -> AvailabilityOverview:
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="endDate must not be before startDate")
    if (end_date - start_date).days + 1 > MAX_OVERVIEW_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Date range cannot exceed {MAX_OVERVIEW_DAYS} days"
        )
    await _ensure_tutor(session, tutor_id)

    dates = date_range(start_date, end_date)
    windows = await _windows_by_date(session, tutor_id, dates)
    bookings = await _bookings_between(session, tutor_id, start_date, end_date)
    grouped = group_by_date(slots_for_range(dates, windows, bookings, duration, utc_now()))
    days = [
        DayOverview(
            date=target,
            day_of_week=day_of_week(target),
            has_availability=bool(grouped.get(target)),
            total_slots=len(grouped.get(target, [])),
        )
        for target in dates
    ]
    return AvailabilityOverview(
        tutor_id=tutor_id, start_date=start_date, end_date=end_date, duration=duration, days=days
    )


@router.get(
    "/{tutor_id}/bookable",
    response_model=BookableSlots,
    summary="Get Bookable Slots",
    description=(
        "Public list of bookable start times for one date, the week starting `weekStart`, or the next seven "
        "days. Recurring and date-specific windows are merged."
    ),
    responses={404: {"description": "Tutor not found"}},
)
async def get_bookable_slots(
    tutor_id: str,
    session: SessionDep,
    on_date: Optional[date] = Query(default=None, alias="date"),
    week_start: Optional[date] = Query(default=None, alias="weekStart"),
    duration: int = Query(default=DEFAULT_DURATION_MINUTES, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES),
) -> BookableSlots:
    await _ensure_tutor(session, tutor_id)
    if on_date is not None:
        first, last = on_date, on_date
    else:
        first = week_start or utc_now().date()
        last = first + timedelta(days=WEEK_DAYS - 1)

    dates = date_range(first, last)
    windows = await _windows_by_date(session, tutor_id, dates)
    bookings = await _bookings_between(session, tutor_id, first, last)
    slots = slots_for_range(dates, windows, bookings, duration, utc_now())
    return BookableSlots(
        tutor_id=tutor_id,
        start_date=first,
        end_date=last,
        duration=duration,
        total_slots=len(slots),
        slots=_present(slots),
    )


@router.post(
    "/{tutor_id}/recurring",
    response_model=SlotRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Recurring Slot",
    description="Add a weekly window. It must not overlap another recurring window on the same weekday.",
    responses={
        400: {"description": "Start time not before end time"},
        403: {"description": "Access denied"},
        404: {"description": "Tutor not found"},
        409: {"description": "Overlapping slot"},
    },
)
async def add_recurring_slot(
    tutor_id: str, data: RecurringSlotCreate, user: CurrentUser, session: SessionDep
) -> SlotRead:
    _ensure_can_manage(user, tutor_id)
    await _ensure_tutor(session, tutor_id)
    _check_window(data.start_time, data.end_time)

    repo = AvailabilityRepository(session)
    if await repo.find_overlapping(tutor_id, data.start_time, data.end_time, day_of_week=data.day_of_week):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slot overlaps an existing availability slot")

    slot = await repo.create(
        AvailabilitySlot(
            tutor_id=tutor_id,
            day_of_week=data.day_of_week,
            start_time=data.start_time,
            end_time=data.end_time,
            is_recurring=True,
            is_available=data.is_available,
        )
    )
    return SlotRead.model_validate(slot)


@router.post(
    "/{tutor_id}/specific",
    response_model=SlotRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Date-Specific Slot",
    description="Add a window for one date. It must not overlap another window on that date.",
    responses={
        400: {"description": "Past date or start time not before end time"},
        403: {"description": "Access denied"},
        404: {"description": "Tutor not found"},
        409: {"description": "Overlapping slot"},
    },
)
async def add_specific_slot(
    tutor_id: str, data: SpecificSlotCreate, user: CurrentUser, session: SessionDep
) -> SlotRead:
    _ensure_can_manage(user, tutor_id)
    await _ensure_tutor(session, tutor_id)
    _check_window(data.start_time, data.end_time)
    if data.specific_date < utc_now().date():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot add availability for a past date")

    repo = AvailabilityRepository(session)
    if await repo.find_overlapping(tutor_id, data.start_time, data.end_time, specific_date=data.specific_date):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slot overlaps an existing availability slot")

    slot = await repo.create(
        AvailabilitySlot(
            tutor_id=tutor_id,
            day_of_week=day_of_week(data.specific_date),
            start_time=data.start_time,
            end_time=data.end_time,
            is_recurring=False,
            specific_date=data.specific_date,
            is_available=data.is_available,
        )
    )
    return SlotRead.model_validate(slot)


@router.put(
    "/{tutor_id}/slots/{slot_id}",
    response_model=SlotRead,
    summary="Update Slot",
    description="Change the times or the availability flag of a slot.",
    responses={
        400: {"description": "No fields or start time not before end time"},
        403: {"description": "Access denied"},
        404: {"description": "Slot not found"},
        409: {"description": "Overlapping slot"},
    },
)
async def update_slot(
    tutor_id: str, slot_id: str, data: SlotUpdate, user: CurrentUser, session: SessionDep
) -> SlotRead:
    _ensure_can_manage(user, tutor_id)
    repo = AvailabilityRepository(session)
    slot = await repo.get_for_tutor(tutor_id, slot_id)
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability slot not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    start = changes.get("start_time", slot.start_time)
    end = changes.get("end_time", slot.end_time)
    _check_window(start, end)
    if "start_time" in changes or "end_time" in changes:
        if slot.is_recurring:
            overlapping = await repo.find_overlapping(tutor_id, start, end, day_of_week=slot.day_of_week, exclude_id=slot.id)
        else:
            overlapping = await repo.find_overlapping(
                tutor_id, start, end, specific_date=slot.specific_date, exclude_id=slot.id
            )
        if overlapping:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slot overlaps an existing availability slot")

    for field, value in changes.items():
        setattr(slot, field, value)
    slot = await repo.update(slot)
    return SlotRead.model_validate(slot)


@router.delete(
    "/{tutor_id}/slots/{slot_id}",
    response_model=MessageResponse,
    summary="Delete Slot",
    description="Delete a slot unless upcoming scheduled or in-progress sessions start inside it.",
    responses={
        403: {"description": "Access denied"},
        404: {"description": "Slot not found"},
        409: {"description": "Slot has upcoming booked sessions"},
    },
)
async def delete_slot(tutor_id: str, slot_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    _ensure_can_manage(user, tutor_id)
    repo = AvailabilityRepository(session)
    slot = await repo.get_for_tutor(tutor_id, slot_id)
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability slot not found")

    sessions = TutoringSessionRepository(session)
    if slot.is_recurring:
        today, _ = _day_bounds(utc_now().date(), utc_now().date())
        booked = [
            booking
            for booking in await sessions.for_tutor(tutor_id, start=today)
            if booking.status in BLOCKING_STATUSES
            and day_of_week(booking.scheduled_start.date()) == slot.day_of_week
            and window_contains(slot.start_time, slot.end_time, booking.scheduled_start.time())
        ]
    else:
        start, end = _day_bounds(slot.specific_date, slot.specific_date)
        booked = [
            booking
            for booking in await sessions.blocking_between(tutor_id, start, end)
            if window_contains(slot.start_time, slot.end_time, booking.scheduled_start.time())
        ]
    if booked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete a slot with {len(booked)} upcoming booked session(s)",
        )

    await repo.delete(slot.id)
    logger.info(f"Availability slot {slot_id} of tutor {tutor_id} deleted by {user.id}")
    return MessageResponse(message="Availability slot deleted successfully")
