"""
Study assistant chat I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import APIModel, PagePagination


class ChatSessionCreate(APIModel):
    title: Optional[str] = Field(default=None, max_length=255)


class ChatSessionUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class ChatSessionRead(APIModel):
    id: str
    title: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_message: Optional[str] = None
    last_message_type: Optional[str] = None


class ChatSessionList(APIModel):
    sessions: List[ChatSessionRead]
    pagination: PagePagination


class ChatMessageCreate(APIModel):
    message: Optional[str] = None


class ChatMessageRead(APIModel):
    id: str
    session_id: str
    message_type: str
    content: str
    model_used: Optional[str] = None
    tokens_used: Optional[int] = None
    response_time_ms: Optional[int] = None
    created_at: datetime


class ChatMessageList(APIModel):
    messages: List[ChatMessageRead]


class ChatExchange(APIModel):
    success: bool
    user_message: ChatMessageRead
    ai_message: ChatMessageRead
    session: ChatSessionRead
    error: Optional[str] = None


class ChatStats(APIModel):
    total_sessions: int
    total_messages: int
    total_tokens: int
    avg_response_time_ms: float
