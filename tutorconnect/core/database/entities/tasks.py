"""
Personal task entity models.

Tasks are private to-do items owned by a single user, optionally tagged with a
subject. They show up next to sessions on the calendar.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Task(Base, table=True):
    """Personal task.

    Table: tasks
    """

    __tablename__ = "tasks"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    subject_id: Optional[str] = Field(default=None, foreign_key="subjects.id", max_length=36)

    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    priority: str = Field(default=TaskPriority.MEDIUM.value, max_length=16)
    status: str = Field(default=TaskStatus.PENDING.value, max_length=16, index=True)
    due_date: Optional[datetime] = Field(default=None, index=True)
    progress: int = Field(default=0, ge=0, le=100)
    completed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
