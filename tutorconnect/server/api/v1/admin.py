"""
Admin Console API Endpoints.

Account moderation, platform statistics, broadcast notifications and the
platform settings store. Every route on ``router`` requires the admin role.

``public_router`` exposes the settings flagged ``is_public`` to anonymous
clients; it is mounted separately under ``/api/v1/settings``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func
from sqlmodel import select

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.notifications import Notification
from tutorconnect.core.database.entities.settings import PlatformSetting
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, TutoringSession
from tutorconnect.core.database.entities.users import TutorProfile, User, UserRole
from tutorconnect.core.database.repositories import BaseRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.admin import PlatformStats, RecentActivity, RoleCount, TopTutor
from tutorconnect.core.models.io.common import MessageResponse, PagePagination, Pagination
from tutorconnect.core.models.io.notifications import BroadcastCreate, BroadcastList, BroadcastResult, BroadcastSummary
from tutorconnect.core.models.io.sessions import SessionList
from tutorconnect.core.models.io.settings import (
    PublicSettings,
    SettingCreate,
    SettingRead,
    SettingsByCategory,
    SettingUpdate,
)
from tutorconnect.core.models.io.users import UserList, UserRead, UserStatusUpdate
from tutorconnect.server.services.bookings import present_sessions
from tutorconnect.server.services.deps import AdminUser, SessionDep
from tutorconnect.server.services.platform_settings import parse_value, serialize_value

logger = get_logger(__name__)
router = APIRouter()
public_router = APIRouter()

RECENT_DAYS = 30
TOP_TUTORS = 5


def _present_setting(setting: PlatformSetting) -> SettingRead:
    item = SettingRead.model_validate(setting)
    item.value = parse_value(setting.value, setting.data_type)
    return item


async def _get_setting_or_404(session: SessionDep, key: str) -> PlatformSetting:
    result = await session.execute(select(PlatformSetting).where(PlatformSetting.key == key))
    setting = result.scalars().first()
    if setting is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return setting


async def _get_user_or_404(session: SessionDep, user_id: str) -> User:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Users


@router.get(
    "/users",
    response_model=UserList,
    summary="List Users",
    description="Search accounts by role, active state and name or email.",
)
async def list_users(
    admin: AdminUser,
    session: SessionDep,
    role: Optional[UserRole] = None,
    status_filter: Optional[Literal["active", "inactive"]] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> UserList:
    users, total = await UserRepository(session).search_users(
        role=role.value if role else None,
        is_active=None if status_filter is None else status_filter == "active",
        search=search.strip() if search else None,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return UserList(
        users=[UserRead.model_validate(user) for user in users],
        pagination=PagePagination.build(total, page, limit),
    )


@router.patch(
    "/users/{user_id}/status",
    response_model=UserRead,
    summary="Set User Status",
    description="Activate or deactivate an account.",
    responses={400: {"description": "Cannot deactivate yourself"}, 404: {"description": "User not found"}},
)
async def set_user_status(user_id: str, data: UserStatusUpdate, admin: AdminUser, session: SessionDep) -> UserRead:
    if user_id == admin.id and not data.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
    user = await _get_user_or_404(session, user_id)
    user.is_active = data.is_active
    user = await UserRepository(session).update(user)
    logger.info(f"Admin {admin.id} set user {user_id} active={data.is_active}")
    return UserRead.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    summary="Deactivate User",
    description="Soft delete: the account is deactivated and its data kept.",
    responses={400: {"description": "Cannot delete yourself"}, 404: {"description": "User not found"}},
)
async def deactivate_user(user_id: str, admin: AdminUser, session: SessionDep) -> MessageResponse:
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    user = await _get_user_or_404(session, user_id)
    user.is_active = False
    await UserRepository(session).update(user)
    logger.info(f"Admin {admin.id} deactivated user {user_id}")
    return MessageResponse(message="User deactivated successfully")


# Statistics and sessions


@router.get(
    "/stats",
    response_model=PlatformStats,
    summary="Platform Statistics",
    description="Users by role, sessions by status, recent sign-ups and bookings, and the best rated tutors.",
)
async def platform_stats(admin: AdminUser, session: SessionDep) -> PlatformStats:
    since = utc_now() - timedelta(days=RECENT_DAYS)

    users_by_role = {role.value: RoleCount(total=0, active=0) for role in UserRole}
    new_users = 0
    for role, is_active, created_at in (await session.execute(select(User.role, User.is_active, User.created_at))).all():
        counts = users_by_role.setdefault(role, RoleCount(total=0, active=0))
        counts.total += 1
        counts.active += int(bool(is_active))
        new_users += int(created_at >= since)

    sessions_by_status = {state.value: 0 for state in SessionStatus}
    new_sessions = 0
    for state, created_at in (await session.execute(select(TutoringSession.status, TutoringSession.created_at))).all():
        sessions_by_status[state] = sessions_by_status.get(state, 0) + 1
        new_sessions += int(created_at >= since)

    stmt = (
        select(User, TutorProfile)
        .join(TutorProfile, TutorProfile.user_id == User.id)
        .where(User.is_active == True)  # noqa: E712
        .order_by(TutorProfile.rating.desc(), TutorProfile.total_sessions.desc())  # type: ignore[attr-defined]
        .limit(TOP_TUTORS)
    )
    top_tutors = [
        TopTutor(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            rating=profile.rating,
            total_sessions=profile.total_sessions,
            total_reviews=profile.total_reviews,
            hourly_rate=profile.hourly_rate,
            title=profile.title,
        )
        for user, profile in (await session.execute(stmt)).all()
    ]

    return PlatformStats(
        users_by_role=users_by_role,
        sessions_by_status=sessions_by_status,
        total_users=sum(c.total for c in users_by_role.values()),
        total_sessions=sum(sessions_by_status.values()),
        recent_activity=RecentActivity(days=RECENT_DAYS, new_users=new_users, new_sessions=new_sessions),
        top_tutors=top_tutors,
    )


@router.get(
    "/sessions",
    response_model=SessionList,
    summary="List All Sessions",
    description="Every tutoring session, newest scheduled start first, filtered by status and start date.",
)
async def list_all_sessions(
    admin: AdminUser,
    session: SessionDep,
    status_filter: Optional[SessionStatus] = Query(default=None, alias="status"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> SessionList:
    stmt = select(TutoringSession)
    if status_filter:
        stmt = stmt.where(TutoringSession.status == status_filter.value)
    if start_date:
        stmt = stmt.where(TutoringSession.scheduled_start >= datetime.combine(start_date, time.min))
    if end_date:
        stmt = stmt.where(TutoringSession.scheduled_start < datetime.combine(end_date + timedelta(days=1), time.min))
    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
    result = await session.execute(
        stmt.order_by(TutoringSession.scheduled_start.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
    )
    return SessionList(
        sessions=await present_sessions(session, list(result.scalars().all())),
        pagination=Pagination.build(total, limit, offset),
    )


# Broadcast notifications


@router.post(
    "/notifications",
    response_model=BroadcastResult,
    status_code=status.HTTP_201_CREATED,
    summary="Broadcast Notification",
    description="Send a notification to every active user, or to every active student or tutor.",
)
async def broadcast_notification(data: BroadcastCreate, admin: AdminUser, session: SessionDep) -> BroadcastResult:
    stmt = select(User.id).where(User.is_active == True)  # noqa: E712
    if data.target_role != "all":
        stmt = stmt.where(User.role == data.target_role)
    recipients = list((await session.execute(stmt)).scalars().all())

    created_at = utc_now()
    for user_id in recipients:
        session.add(
            Notification(
                user_id=user_id,
                created_by=admin.id,
                type=data.type,
                title=data.title,
                message=data.message,
                created_at=created_at,
            )
        )
    await session.commit()

    logger.info(f"Admin {admin.id} broadcast '{data.title}' to {len(recipients)} {data.target_role} user(s)")
    return BroadcastResult(message="Notification sent successfully", recipient_count=len(recipients))


@router.get(
    "/notifications",
    response_model=BroadcastList,
    summary="List Broadcasts",
    description="Sent broadcasts, newest first, with how many users received and read each.",
)
async def list_broadcasts(
    admin: AdminUser,
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=200),
) -> BroadcastList:
    result = await session.execute(
        select(Notification)
        .where(Notification.created_by.is_not(None))  # type: ignore[union-attr]
        .order_by(Notification.created_at.desc())  # type: ignore[attr-defined]
    )
    grouped: Dict[Tuple[str, str, str, datetime], BroadcastSummary] = {}
    for notification in result.scalars().all():
        key = (notification.title, notification.message, notification.type, notification.created_at)
        summary = grouped.get(key)
        if summary is None:
            summary = grouped[key] = BroadcastSummary(
                title=notification.title,
                message=notification.message,
                type=notification.type,
                created_at=notification.created_at,
                recipient_count=0,
                read_count=0,
            )
        summary.recipient_count += 1
        summary.read_count += int(notification.is_read)
    return BroadcastList(notifications=list(grouped.values())[:limit])


# Platform settings


@router.get(
    "/settings",
    response_model=SettingsByCategory,
    summary="List Settings",
    description="All platform settings grouped by category.",
)
async def list_settings(admin: AdminUser, session: SessionDep, category: Optional[str] = None) -> SettingsByCategory:
    stmt = select(PlatformSetting).order_by(PlatformSetting.category, PlatformSetting.key)
    if category:
        stmt = stmt.where(PlatformSetting.category == category)
    grouped: Dict[str, List[SettingRead]] = {}
    for setting in (await session.execute(stmt)).scalars().all():
        grouped.setdefault(setting.category, []).append(_present_setting(setting))
    return SettingsByCategory(settings=grouped)


@router.post(
    "/settings",
    response_model=SettingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Setting",
    responses={400: {"description": "Value does not match its data type"}, 409: {"description": "Key exists"}},
)
async def create_setting(data: SettingCreate, admin: AdminUser, session: SessionDep) -> SettingRead:
    existing = await session.execute(select(PlatformSetting).where(PlatformSetting.key == data.key))
    if existing.scalars().first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Setting with this key already exists")
    try:
        stored = serialize_value(data.value, data.data_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    setting = await BaseRepository(session, PlatformSetting).create(
        PlatformSetting(
            key=data.key,
            value=stored,
            category=data.category,
            description=data.description,
            data_type=data.data_type,
            is_public=data.is_public,
        )
    )
    logger.info(f"Admin {admin.id} created setting {setting.key}")
    return _present_setting(setting)


@router.put(
    "/settings/{key}",
    response_model=SettingRead,
    summary="Update Setting",
    responses={
        400: {"description": "Nothing to update or value does not match its data type"},
        404: {"description": "Setting not found"},
    },
)
async def update_setting(key: str, data: SettingUpdate, admin: AdminUser, session: SessionDep) -> SettingRead:
    setting = await _get_setting_or_404(session, key)
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    data_type = changes.get("data_type") or setting.data_type
    if "value" in changes or "data_type" in changes:
        raw = changes["value"] if "value" in changes else parse_value(setting.value, setting.data_type)
        try:
            setting.value = serialize_value(raw, data_type)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        setting.data_type = data_type
    for field in ("category", "description", "is_public"):
        if field in changes and (changes[field] is not None or field == "description"):
            setattr(setting, field, changes[field])

    setting = await BaseRepository(session, PlatformSetting).update(setting)
    logger.info(f"Admin {admin.id} updated setting {key}")
    return _present_setting(setting)


@router.delete(
    "/settings/{key}",
    response_model=MessageResponse,
    summary="Delete Setting",
    responses={404: {"description": "Setting not found"}},
)
async def delete_setting(key: str, admin: AdminUser, session: SessionDep) -> MessageResponse:
    setting = await _get_setting_or_404(session, key)
    await BaseRepository(session, PlatformSetting).delete(setting.id)
    logger.info(f"Admin {admin.id} deleted setting {key}")
    return MessageResponse(message="Setting deleted successfully")


@public_router.get(
    "/public",
    response_model=PublicSettings,
    summary="Public Settings",
    description="Settings flagged public, as typed values keyed by setting key. No authentication required.",
)
async def public_settings(session: SessionDep) -> PublicSettings:
    result = await session.execute(
        select(PlatformSetting).where(PlatformSetting.is_public == True)  # noqa: E712
    )
    return PublicSettings(
        settings={setting.key: parse_value(setting.value, setting.data_type) for setting in result.scalars().all()}
    )
