"""
Notification and broadcast I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .common import APIModel, Pagination


class NotificationRead(APIModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationList(APIModel):
    notifications: List[NotificationRead]
    unread_count: int
    pagination: Pagination


class ReadAllResult(APIModel):
    message: str
    updated: int


class BroadcastCreate(APIModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    type: str = Field(default="announcement", max_length=32)
    target_role: Literal["student", "tutor", "all"] = "all"


class BroadcastResult(APIModel):
    message: str
    recipient_count: int


class BroadcastSummary(APIModel):
    title: str
    message: str
    type: str
    created_at: datetime
    recipient_count: int
    read_count: int


class BroadcastList(APIModel):
    notifications: List[BroadcastSummary]
