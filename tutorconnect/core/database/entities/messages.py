"""
Direct message entity models.

Messages are one-way records from a sender to a recipient, optionally tied to a
tutoring session. ``is_read``/``read_at`` are only ever set by the recipient.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class MessageType(str, Enum):
    """Kind of message."""

    DIRECT = "direct"
    SESSION = "session"
    SYSTEM = "system"


class Message(Base, table=True):
    """Message exchanged between two users.

    Table: messages
    """

    __tablename__ = "messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    sender_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    recipient_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    session_id: Optional[str] = Field(default=None, foreign_key="tutoring_sessions.id", max_length=36)

    subject: Optional[str] = Field(default=None, max_length=255)
    content: str
    message_type: str = Field(default=MessageType.DIRECT.value, max_length=16)

    is_read: bool = Field(default=False, index=True)
    read_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Message(id={self.id}, sender={self.sender_id}, recipient={self.recipient_id})"
