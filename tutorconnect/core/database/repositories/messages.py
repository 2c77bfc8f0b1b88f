"""
Message repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.messages import Message
from ..utils import LIKE_ESCAPE, contains_pattern
from .base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for direct messages."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Message)

    async def list_for_user(
        self,
        user_id: str,
        *,
        direction: Optional[str] = None,
        unread_only: bool = False,
        since: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Message], int]:
        """Messages sent or received by the user, newest first.

        Args:
            user_id: Mailbox owner
            direction: ``sent`` or ``received``; both when omitted
            unread_only: Only unread messages addressed to the user
            since: Only messages created after this instant
            search: Case-insensitive substring matched on subject and content
            limit: Page size
            offset: Rows to skip
        """
        if direction == "sent":
            stmt = select(Message).where(Message.sender_id == user_id)
        elif direction == "received":
            stmt = select(Message).where(Message.recipient_id == user_id)
        else:
            stmt = select(Message).where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))

        if unread_only:
            stmt = stmt.where(Message.recipient_id == user_id, Message.is_read == False)  # noqa: E712
        if since is not None:
            stmt = stmt.where(Message.created_at > since)
        if search:
            pattern = contains_pattern(search)
            stmt = stmt.where(
                or_(
                    func.lower(Message.content).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(func.coalesce(Message.subject, "")).like(pattern, escape=LIKE_ESCAPE),
                )
            )

        total = int((await self.session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())
        stmt = stmt.order_by(Message.created_at.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Message).where(
            Message.recipient_id == user_id,
            Message.is_read == False,  # noqa: E712
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def conversation(self, user_id: str, other_id: str, limit: int = 50, offset: int = 0) -> List[Message]:
        """Messages between two users in chronological order.

        The page is taken from the newest end so ``limit`` keeps the latest
        messages, then returned oldest first.
        """
        stmt = (
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == user_id, Message.recipient_id == other_id),
                    and_(Message.sender_id == other_id, Message.recipient_id == user_id),
                )
            )
            .order_by(Message.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def mark_read(self, message: Message) -> Message:
        if not message.is_read:
            message.is_read = True
            message.read_at = utc_now()
            self.session.add(message)
            await self.session.commit()
            await self.session.refresh(message)
        return message

    async def mark_conversation_read(self, recipient_id: str, sender_id: str) -> int:
        """Mark every unread message from ``sender_id`` to ``recipient_id`` as read."""
        result = await self.session.execute(
            update(Message)
            .where(
                Message.sender_id == sender_id,
                Message.recipient_id == recipient_id,
                Message.is_read == False,  # noqa: E712
            )
            .values(is_read=True, read_at=utc_now())
        )
        await self.session.commit()
        return result.rowcount or 0
