"""
Tutor availability I/O models.

Times travel as ``HH:MM`` strings and dates as ISO dates.
"""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import Field

from .common import APIModel, ClockTime


class SlotRead(APIModel):
    id: str
    tutor_id: str
    day_of_week: int
    start_time: ClockTime
    end_time: ClockTime
    is_recurring: bool
    specific_date: Optional[dt.date] = None
    is_available: bool


class RecurringSlotCreate(APIModel):
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: dt.time
    end_time: dt.time
    is_available: bool = True


class SpecificSlotCreate(APIModel):
    specific_date: dt.date
    start_time: dt.time
    end_time: dt.time
    is_available: bool = True


class SlotUpdate(APIModel):
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: Optional[bool] = None


class BookedSession(APIModel):
    id: str
    title: str
    status: str
    scheduled_start: dt.datetime
    scheduled_end: dt.datetime


class TutorAvailability(APIModel):
    tutor_id: str
    slots: List[SlotRead]
    booked_sessions: Optional[List[BookedSession]] = None


class BookableSlotRead(APIModel):
    date: dt.date
    start_time: ClockTime
    end_time: ClockTime
    start: dt.datetime
    end: dt.datetime


class DateSlots(APIModel):
    tutor_id: str
    date: dt.date
    day_of_week: int
    duration: int
    slots: List[BookableSlotRead]


class DayOverview(APIModel):
    date: dt.date
    day_of_week: int
    has_availability: bool
    total_slots: int


class AvailabilityOverview(APIModel):
    tutor_id: str
    start_date: dt.date
    end_date: dt.date
    duration: int
    days: List[DayOverview]


class BookableSlots(APIModel):
    tutor_id: str
    start_date: dt.date
    end_date: dt.date
    duration: int
    total_slots: int
    slots: List[BookableSlotRead]


class TimeRange(APIModel):
    start_time: dt.time
    end_time: dt.time


class DayAvailability(APIModel):
    available: bool = False
    slots: List[TimeRange] = Field(default_factory=list)


class BulkAvailabilityRequest(APIModel):
    """Weekly schedule keyed by lower-case day name."""

    availability: Dict[str, DayAvailability]


class BulkAvailabilityResponse(APIModel):
    message: str
    slots: List[SlotRead]
