"""
Bookable slot generation.

Pure functions that turn a tutor's availability windows and existing bookings
into the list of start times a student can book. Nothing here touches the
database, so the routers gather windows and bookings and hand them over.

Conventions:
- Windows are half-open wall-clock intervals ``[start, end)`` on one date.
- Candidate starts step every ``SLOT_STEP_MINUTES`` from the window start.
- A candidate survives only when it fits in the window, does not overlap a
  booking and starts strictly after ``now``.
- ``day_of_week`` counts from 0 = Sunday.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple

SLOT_STEP_MINUTES = 15
MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480
DEFAULT_DURATION_MINUTES = 60
MAX_OVERVIEW_DAYS = 62

DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

Booking = Tuple[datetime, datetime]


@dataclass(frozen=True)
class TimeWindow:
    """Availability window on a single date."""

    start: time
    end: time


@dataclass(frozen=True, order=True)
class BookableSlot:
    """A start time a session of the requested duration can be booked at."""

    date: date
    start_time: time
    end_time: time

    @property
    def start(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.date, self.end_time)


def day_of_week(target: date) -> int:
    """Weekday index with 0 = Sunday."""
    return (target.weekday() + 1) % 7


def day_index(name: str) -> int:
    """Map a weekday name to its index.

    Raises:
        ValueError: For names that are not a weekday
    """
    try:
        return DAY_NAMES.index(name.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid day name: {name}")


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap; touching intervals do not overlap."""
    return a_start < b_end and b_start < a_end


def validate_duration(duration_minutes: int) -> int:
    if duration_minutes < MIN_DURATION_MINUTES or duration_minutes > MAX_DURATION_MINUTES:
        raise ValueError(
            f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
        )
    return duration_minutes


def slots_for_date(
    target: date,
    windows: Iterable[TimeWindow],
    bookings: Sequence[Booking],
    duration_minutes: int,
    now: datetime,
) -> List[BookableSlot]:
    """
    Generate bookable slots on one date.

    Args:
        target: The calendar date
        windows: Availability windows on that date
        bookings: ``(start, end)`` of blocking sessions; any date is accepted,
            only overlapping ones matter
        duration_minutes: Requested session length
        now: Reference instant; slots must start strictly after it

    Returns:
        Sorted, de-duplicated slots
    """
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    found = set()

    for window in windows:
        window_end = datetime.combine(target, window.end)
        candidate = datetime.combine(target, window.start)
        while candidate + duration <= window_end:
            candidate_end = candidate + duration
            if candidate > now and not any(
                overlaps(candidate, candidate_end, start, end) for start, end in bookings
            ):
                found.add(BookableSlot(date=target, start_time=candidate.time(), end_time=candidate_end.time()))
            candidate += step

    return sorted(found)


def slots_for_range(
    dates: Iterable[date],
    windows_by_date: Dict[date, List[TimeWindow]],
    bookings: Sequence[Booking],
    duration_minutes: int,
    now: datetime,
) -> List[BookableSlot]:
    """Generate slots for several dates, sorted by (date, start time)."""
    slots: List[BookableSlot] = []
    for target in dates:
        slots.extend(slots_for_date(target, windows_by_date.get(target, []), bookings, duration_minutes, now))
    return sorted(set(slots))


def date_range(start: date, end: date) -> List[date]:
    """Every date from ``start`` to ``end`` inclusive."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def group_by_date(slots: Iterable[BookableSlot]) -> Dict[date, List[BookableSlot]]:
    grouped: Dict[date, List[BookableSlot]] = {}
    for slot in slots:
        grouped.setdefault(slot.date, []).append(slot)
    return grouped


def window_contains(window_start: time, window_end: time, moment: time) -> bool:
    """Whether a wall-clock time falls inside ``[window_start, window_end)``."""
    return window_start <= moment < window_end
