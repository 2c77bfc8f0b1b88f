"""
Study assistant chat repository.

This module provides data access operations for assistant conversations and
their message history.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.ai_chat import AIChatMessage, AIChatSession, AIMessageType
from .base import BaseRepository


class AIChatRepository(BaseRepository[AIChatSession]):
    """Repository for assistant chat sessions and messages."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AIChatSession)

    async def get_owned(self, session_id: str, user_id: str, active_only: bool = True) -> Optional[AIChatSession]:
        """Return the chat session only when ``user_id`` owns it."""
        chat = await self.get_by_id(session_id)
        if chat is None or chat.user_id != user_id:
            return None
        if active_only and not chat.is_active:
            return None
        return chat

    async def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> Tuple[List[AIChatSession], int]:
        """Active sessions of the user, most recently updated first."""
        base = select(AIChatSession).where(
            AIChatSession.user_id == user_id,
            AIChatSession.is_active == True,  # noqa: E712
        )
        total = int((await self.session.execute(select(func.count()).select_from(base.subquery()))).scalar_one())
        stmt = base.order_by(AIChatSession.updated_at.desc()).limit(limit).offset(offset)  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def messages(self, session_id: str, limit: Optional[int] = None) -> List[AIChatMessage]:
        """Messages of a session in chronological order.

        With ``limit`` only the most recent ``limit`` messages are returned.
        """
        if limit is None:
            stmt = select(AIChatMessage).where(AIChatMessage.session_id == session_id).order_by(AIChatMessage.created_at)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        stmt = (
            select(AIChatMessage)
            .where(AIChatMessage.session_id == session_id)
            .order_by(AIChatMessage.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def last_messages(self, session_ids: List[str]) -> Dict[str, AIChatMessage]:
        """Latest message per session, keyed by session id."""
        if not session_ids:
            return {}
        stmt = (
            select(AIChatMessage)
            .where(AIChatMessage.session_id.in_(session_ids))  # type: ignore[attr-defined]
            .order_by(AIChatMessage.created_at)
        )
        result = await self.session.execute(stmt)
        latest: Dict[str, AIChatMessage] = {}
        for message in result.scalars().all():
            latest[message.session_id] = message
        return latest

    async def add_message(self, message: AIChatMessage) -> AIChatMessage:
        """Persist a message and bump the parent session's ``updated_at``."""
        self.session.add(message)
        chat = await self.get_by_id(message.session_id)
        if chat is not None:
            chat.updated_at = utc_now()
            self.session.add(chat)
        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def stats(self, user_id: str) -> Dict[str, float]:
        """Usage totals of the user's conversations."""
        sessions_stmt = select(func.count()).select_from(AIChatSession).where(AIChatSession.user_id == user_id)
        total_sessions = int((await self.session.execute(sessions_stmt)).scalar_one())

        messages_stmt = select(
            func.count(AIChatMessage.id),
            func.coalesce(func.sum(AIChatMessage.tokens_used), 0),
        ).where(AIChatMessage.user_id == user_id)
        total_messages, total_tokens = (await self.session.execute(messages_stmt)).one()

        latency_stmt = select(func.avg(AIChatMessage.response_time_ms)).where(
            AIChatMessage.user_id == user_id,
            AIChatMessage.message_type == AIMessageType.ASSISTANT.value,
        )
        avg_latency = (await self.session.execute(latency_stmt)).scalar_one()

        return {
            "total_sessions": total_sessions,
            "total_messages": int(total_messages or 0),
            "total_tokens": int(total_tokens or 0),
            "avg_response_time_ms": round(float(avg_latency or 0), 2),
        }
