"""
Admin console I/O models.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .common import APIModel


class RoleCount(APIModel):
    total: int
    active: int


class TopTutor(APIModel):
    id: str
    first_name: str
    last_name: str
    rating: float
    total_sessions: int
    total_reviews: int
    hourly_rate: float
    title: Optional[str] = None


class RecentActivity(APIModel):
    """Rows created in the trailing window."""

    days: int
    new_users: int
    new_sessions: int


class PlatformStats(APIModel):
    users_by_role: Dict[str, RoleCount]
    sessions_by_status: Dict[str, int]
    total_users: int
    total_sessions: int
    recent_activity: RecentActivity
    top_tutors: List[TopTutor]
