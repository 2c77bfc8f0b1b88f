"""
Personal task I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from tutorconnect.core.database.entities.tasks import TaskPriority, TaskStatus

from .common import APIModel, Pagination


class TaskCreate(APIModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[datetime] = None
    progress: int = Field(default=0, ge=0, le=100)
    subject_id: Optional[str] = None


class TaskUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    subject_id: Optional[str] = None


class TaskRead(APIModel):
    id: str
    user_id: str
    subject_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[datetime] = None
    progress: int
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskList(APIModel):
    tasks: List[TaskRead]
    pagination: Pagination
