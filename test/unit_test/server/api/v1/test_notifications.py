"""API tests for in-app notifications."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.notifications import Notification

pytestmark = pytest.mark.asyncio


async def _notify(session, user, title, created_ago=0, **fields):
    notification = Notification(
        user_id=user.id,
        title=title,
        message=f"{title} details",
        created_at=utc_now() - timedelta(minutes=created_ago),
        **fields,
    )
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return notification


class TestNotifications:
    async def test_list_newest_first_with_unread_count(self, client: AsyncClient, make_user, auth_headers, session):
        user = await make_user()
        other = await make_user()
        await _notify(session, user, "Older", created_ago=10)
        await _notify(session, user, "Newer", created_ago=1)
        await _notify(session, user, "Seen", created_ago=5, is_read=True)
        await _notify(session, other, "Not mine")
        headers = auth_headers(user)

        everything = await client.get("/api/v1/notifications", headers=headers)
        unread = await client.get("/api/v1/notifications", params={"unread": "true"}, headers=headers)

        assert [n["title"] for n in everything.json()["notifications"]] == ["Newer", "Seen", "Older"]
        assert everything.json()["unreadCount"] == 2
        assert unread.json()["pagination"]["total"] == 2

    async def test_mark_one_read(self, client: AsyncClient, make_user, auth_headers, session):
        user = await make_user()
        other = await make_user()
        notification = await _notify(session, user, "Welcome")
        notification_id = notification.id

        by_other = await client.patch(f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(other))
        by_owner = await client.patch(f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(user))

        assert by_other.status_code == 404
        assert by_owner.json()["isRead"] is True
        assert by_owner.json()["readAt"] is not None

    async def test_mark_all_read(self, client: AsyncClient, make_user, auth_headers, session):
        user = await make_user()
        await _notify(session, user, "One")
        await _notify(session, user, "Two")
        await _notify(session, user, "Three", is_read=True)
        headers = auth_headers(user)

        response = await client.patch("/api/v1/notifications/read-all", headers=headers)
        count = await client.get("/api/v1/notifications/unread-count", headers=headers)

        assert response.json() == {"message": "All notifications marked as read", "updated": 2}
        assert count.json() == {"unreadCount": 0}
