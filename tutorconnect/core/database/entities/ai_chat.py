"""
Study assistant chat entity models.

This module contains the database entities for the AI study assistant
conversations. A session groups the messages of one conversation; deleting a
session only flips ``is_active`` so history stays auditable.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now

DEFAULT_CHAT_TITLE = "New Chat"


class AIMessageType(str, Enum):
    """Author of an assistant chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class AIChatSession(Base, table=True):
    """Conversation with the study assistant.

    Table: ai_chat_sessions
    """

    __tablename__ = "ai_chat_sessions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    title: str = Field(default=DEFAULT_CHAT_TITLE, max_length=255)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"AIChatSession(id={self.id}, title={self.title}, user={self.user_id})"


class AIChatMessage(Base, table=True):
    """Single turn in an assistant conversation.

    Table: ai_chat_messages
    """

    __tablename__ = "ai_chat_messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    session_id: str = Field(foreign_key="ai_chat_sessions.id", index=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)

    message_type: str = Field(max_length=16)
    content: str

    model_used: Optional[str] = Field(default=None, max_length=100)
    tokens_used: Optional[int] = Field(default=None)
    response_time_ms: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AIChatMessage(id={self.id}, type={self.message_type}, session_id={self.session_id})"
