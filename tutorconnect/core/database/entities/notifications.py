"""
Notification entity models.

Admin broadcasts fan out into one row per recipient so read state is tracked
per user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Notification(Base, table=True):
    """In-app notification for a single user.

    Table: notifications
    """

    __tablename__ = "notifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    created_by: Optional[str] = Field(default=None, foreign_key="users.id", max_length=36)

    type: str = Field(default="announcement", max_length=32)
    title: str = Field(max_length=255)
    message: str

    is_read: bool = Field(default=False)
    read_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
