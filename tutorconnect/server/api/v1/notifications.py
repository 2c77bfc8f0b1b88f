"""
Notification API Endpoints.

The caller's in-app notifications, created by administrator broadcasts.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, update
from sqlmodel import select

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.notifications import Notification
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import Pagination
from tutorconnect.core.models.io.messages import UnreadCount
from tutorconnect.core.models.io.notifications import NotificationList, NotificationRead, ReadAllResult
from tutorconnect.server.services.deps import CurrentUser, SessionDep

logger = get_logger(__name__)
router = APIRouter()


async def _unread_count(session: SessionDep, user_id: str) -> int:
    stmt = select(func.count()).select_from(Notification).where(
        Notification.user_id == user_id, Notification.is_read == False  # noqa: E712
    )
    return int((await session.execute(stmt)).scalar_one())


@router.get(
    "",
    response_model=NotificationList,
    summary="List Notifications",
    description="The caller's notifications, newest first.",
)
async def list_notifications(
    user: CurrentUser,
    session: SessionDep,
    unread: bool = False,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> NotificationList:
    stmt = select(Notification).where(Notification.user_id == user.id)
    if unread:
        stmt = stmt.where(Notification.is_read == False)  # noqa: E712
    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    result = await session.execute(
        stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
    )
    return NotificationList(
        notifications=[NotificationRead.model_validate(n) for n in result.scalars().all()],
        unread_count=await _unread_count(session, user.id),
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/unread-count",
    response_model=UnreadCount,
    summary="Unread Notification Count",
)
async def unread_notifications(user: CurrentUser, session: SessionDep) -> UnreadCount:
    return UnreadCount(unread_count=await _unread_count(session, user.id))


@router.patch(
    "/read-all",
    response_model=ReadAllResult,
    summary="Mark All Notifications Read",
)
async def mark_all_read(user: CurrentUser, session: SessionDep) -> ReadAllResult:
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read == False)  # noqa: E712
        .values(is_read=True, read_at=utc_now())
    )
    await session.commit()
    updated = int(result.rowcount or 0)
    logger.debug(f"Marked {updated} notification(s) read for {user.id}")
    return ReadAllResult(message="All notifications marked as read", updated=updated)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark Notification Read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(notification_id: str, user: CurrentUser, session: SessionDep) -> NotificationRead:
    notification = await session.get(Notification, notification_id)
    if notification is None or notification.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        session.add(notification)
        await session.commit()
        await session.refresh(notification)
    return NotificationRead.model_validate(notification)
