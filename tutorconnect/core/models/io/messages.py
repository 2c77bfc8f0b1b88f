"""
Direct message I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from tutorconnect.core.database.entities.messages import MessageType

from .common import APIModel, Pagination
from .users import UserSummary


class MessageCreate(APIModel):
    recipient_id: str
    content: str = Field(min_length=1, max_length=2000)
    subject: Optional[str] = Field(default=None, max_length=255)
    session_id: Optional[str] = None
    message_type: MessageType = MessageType.DIRECT


class MessageRead(APIModel):
    id: str
    sender_id: str
    recipient_id: str
    session_id: Optional[str] = None
    subject: Optional[str] = None
    content: str
    message_type: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    sender: Optional[UserSummary] = None
    recipient: Optional[UserSummary] = None


class MessageList(APIModel):
    messages: List[MessageRead]
    pagination: Pagination


class UnreadCount(APIModel):
    unread_count: int


class Conversation(APIModel):
    user: UserSummary
    messages: List[MessageRead]
