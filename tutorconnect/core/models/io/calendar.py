"""
Calendar I/O models.
"""

import datetime as dt
from typing import List, Optional

from .common import APIModel


class CalendarEvent(APIModel):
    """Session or task placed on the calendar."""

    id: str
    type: str
    title: str
    start: dt.datetime
    end: dt.datetime
    status: str
    description: Optional[str] = None
    session_type: Optional[str] = None
    priority: Optional[str] = None
    with_user: Optional[str] = None


class CalendarEvents(APIModel):
    start_date: dt.date
    end_date: dt.date
    events: List[CalendarEvent]


class CalendarStats(APIModel):
    upcoming_sessions: int
    tasks_due_soon: int
    overdue_tasks: int
    completed_sessions_this_month: int
