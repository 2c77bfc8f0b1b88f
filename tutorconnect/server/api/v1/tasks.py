"""
Personal Task API Endpoints.

Private to-do items. Every endpoint is scoped to the caller; another user's task
is reported as missing.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func
from sqlmodel import select

from tutorconnect.core.database.base import to_utc_naive, utc_now
from tutorconnect.core.database.entities.subjects import Subject
from tutorconnect.core.database.entities.tasks import Task, TaskPriority, TaskStatus
from tutorconnect.core.database.repositories import BaseRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse, Pagination
from tutorconnect.core.models.io.tasks import TaskCreate, TaskList, TaskRead, TaskUpdate
from tutorconnect.server.services.deps import CurrentUser, SessionDep

logger = get_logger(__name__)
router = APIRouter()


def apply_completion(task: Task, changes: Dict[str, Any]) -> None:
    """
    Keep ``status`` and ``progress`` consistent.

    A completed task always has progress 100 and progress 100 always means
    completed. ``completed_at`` is stamped on the transition and cleared when
    the task is reopened.
    """
    if changes.get("status") == TaskStatus.COMPLETED.value:
        task.progress = 100
    elif changes.get("progress") == 100 and "status" not in changes:
        task.status = TaskStatus.COMPLETED.value

    if task.status == TaskStatus.COMPLETED.value:
        if task.completed_at is None:
            task.completed_at = utc_now()
    else:
        task.completed_at = None


async def _get_own_task(session: SessionDep, task_id: str, user: CurrentUser) -> Task:
    task = await session.get(Task, task_id)
    if task is None or task.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def _check_subject(session: SessionDep, subject_id: Optional[str]) -> None:
    if subject_id and await session.get(Subject, subject_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subject not found")


@router.get(
    "",
    response_model=TaskList,
    summary="List My Tasks",
    description="The caller's tasks, earliest due first (undated last), then newest first.",
)
async def list_tasks(
    user: CurrentUser,
    session: SessionDep,
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
    priority: Optional[TaskPriority] = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> TaskList:
    stmt = select(Task).where(Task.user_id == user.id)
    if status_filter:
        stmt = stmt.where(Task.status == status_filter.value)
    if priority:
        stmt = stmt.where(Task.priority == priority.value)
    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    stmt = stmt.order_by(
        Task.due_date.is_(None),  # type: ignore[union-attr]
        Task.due_date,
        Task.created_at.desc(),  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt.limit(limit).offset(offset))
    return TaskList(
        tasks=[TaskRead.model_validate(task) for task in result.scalars().all()],
        pagination=Pagination.build(total, limit, offset),
    )


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Add a personal task.",
    responses={400: {"description": "Subject not found"}},
)
async def create_task(data: TaskCreate, user: CurrentUser, session: SessionDep) -> TaskRead:
    await _check_subject(session, data.subject_id)
    task = Task(
        user_id=user.id,
        subject_id=data.subject_id,
        title=data.title.strip(),
        description=data.description,
        priority=TaskPriority(data.priority).value,
        status=TaskStatus(data.status).value,
        due_date=to_utc_naive(data.due_date) if data.due_date else None,
        progress=data.progress,
    )
    apply_completion(task, {"status": task.status, "progress": task.progress})
    task = await BaseRepository(session, Task).create(task)
    logger.info(f"Task {task.id} created by {user.id}")
    return TaskRead.model_validate(task)


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Get Task",
    responses={404: {"description": "Task not found"}},
)
async def get_task(task_id: str, user: CurrentUser, session: SessionDep) -> TaskRead:
    return TaskRead.model_validate(await _get_own_task(session, task_id, user))


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Update Task",
    description="Update a task. Completing it sets progress to 100 and progress 100 completes it.",
    responses={400: {"description": "No valid fields to update"}, 404: {"description": "Task not found"}},
)
async def update_task(task_id: str, data: TaskUpdate, user: CurrentUser, session: SessionDep) -> TaskRead:
    task = await _get_own_task(session, task_id, user)
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    if "subject_id" in changes:
        await _check_subject(session, changes["subject_id"])
    if changes.get("due_date") is not None:
        changes["due_date"] = to_utc_naive(changes["due_date"])
    if "title" in changes and changes["title"] is not None:
        changes["title"] = changes["title"].strip()

    for field, value in changes.items():
        if value is None and field in ("title", "priority", "status", "progress"):
            continue
        setattr(task, field, value)
    apply_completion(task, changes)

    task = await BaseRepository(session, Task).update(task)
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete Task",
    responses={404: {"description": "Task not found"}},
)
async def delete_task(task_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    task = await _get_own_task(session, task_id, user)
    await BaseRepository(session, Task).delete(task.id)
    return MessageResponse(message="Task deleted successfully")
