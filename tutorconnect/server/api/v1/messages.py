"""
Message API Endpoints.

One-to-one messaging between users. Clients either poll (``/unread-count`` and
``?since=`` keep polling cheap) or keep ``/stream`` open, a Server-Sent Events
feed that receives every message addressed to the caller as soon as it is
stored.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import List, Literal, Optional, Sequence

from fastapi import APIRouter, HTTPException, Query, Request, status
from sse_starlette.sse import EventSourceResponse

from tutorconnect.core.database.base import to_utc_naive
from tutorconnect.core.database.entities.messages import Message, MessageType
from tutorconnect.core.database.entities.tutoring_sessions import TutoringSession
from tutorconnect.core.database.repositories import MessageRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse, Pagination
from tutorconnect.core.models.io.messages import Conversation, MessageCreate, MessageList, MessageRead, UnreadCount
from tutorconnect.core.models.io.users import UserSummary
from tutorconnect.server.services.accounts import load_user_summaries
from tutorconnect.server.services.bookings import publish_message
from tutorconnect.server.services.deps import CurrentUser, SessionDep
from tutorconnect.server.services.message_broker import get_message_broker

logger = get_logger(__name__)
router = APIRouter()

STREAM_POLL_SECONDS = 1.0
STREAM_PING_SECONDS = 15


async def _present(session: SessionDep, messages: Sequence[Message]) -> List[MessageRead]:
    users = await load_user_summaries(session, [m.sender_id for m in messages] + [m.recipient_id for m in messages])
    presented = []
    for message in messages:
        item = MessageRead.model_validate(message)
        item.sender = users.get(message.sender_id)
        item.recipient = users.get(message.recipient_id)
        presented.append(item)
    return presented


@router.get(
    "",
    response_model=MessageList,
    summary="List Messages",
    description="Messages sent or received by the caller, newest first. Use `since` for incremental polling.",
)
async def list_messages(
    user: CurrentUser,
    session: SessionDep,
    direction: Optional[Literal["sent", "received"]] = Query(default=None, alias="type"),
    unread: bool = False,
    since: Optional[datetime] = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> MessageList:
    rows, total = await MessageRepository(session).list_for_user(
        user.id,
        direction=direction,
        unread_only=unread,
        since=to_utc_naive(since) if since else None,
        limit=limit,
        offset=offset,
    )
    return MessageList(messages=await _present(session, rows), pagination=Pagination.build(total, limit, offset))


@router.get(
    "/unread-count",
    response_model=UnreadCount,
    summary="Unread Message Count",
    description="Number of unread messages addressed to the caller.",
)
async def unread_count(user: CurrentUser, session: SessionDep) -> UnreadCount:
    return UnreadCount(unread_count=await MessageRepository(session).unread_count(user.id))


@router.get(
    "/search",
    response_model=MessageList,
    summary="Search Messages",
    description="Case-insensitive search over subject and content of the caller's messages.",
)
async def search_messages(
    user: CurrentUser,
    session: SessionDep,
    q: str = Query(min_length=1, max_length=200),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> MessageList:
    rows, total = await MessageRepository(session).list_for_user(user.id, search=q.strip(), limit=limit, offset=offset)
    return MessageList(messages=await _present(session, rows), pagination=Pagination.build(total, limit, offset))


@router.get(
    "/stream",
    summary="Stream Incoming Messages",
    description="Server-Sent Events feed pushing a `message` event for every new message addressed to the caller.",
    response_description="text/event-stream of message events.",
)
async def stream_messages(request: Request, user: CurrentUser):
    """
    Stream incoming messages via Server-Sent Events (SSE).

    Each event is named ``message`` and carries the message as JSON, in the same
    shape as ``GET /messages/{id}``. Keep-alive pings are sent while idle. The
    subscription is dropped when the client disconnects.
    """
    broker = get_message_broker()
    queue = broker.subscribe(user.id)
    logger.info(f"Starting message stream for user: {user.id}")

    async def event_generator():
        try:
            while True:
                if await request.is_disconnected():
                    logger.info(f"Client disconnected from message stream: {user.id}")
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=STREAM_POLL_SECONDS)
                except asyncio.TimeoutError:
                    continue
                yield {"event": event.get("type", "message"), "data": json.dumps(event.get("message", event))}
        finally:
            broker.unsubscribe(user.id, queue)

    return EventSourceResponse(event_generator(), ping=STREAM_PING_SECONDS)


@router.get(
    "/conversation/{other_user_id}",
    response_model=Conversation,
    summary="Get Conversation",
    description="Messages exchanged with another user, oldest first. Marks their messages to the caller as read.",
    responses={404: {"description": "User not found"}},
)
async def get_conversation(
    other_user_id: str,
    user: CurrentUser,
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> Conversation:
    other = await UserRepository(session).get_by_id(other_user_id)
    if other is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    repo = MessageRepository(session)
    marked = await repo.mark_conversation_read(recipient_id=user.id, sender_id=other_user_id)
    if marked:
        logger.debug(f"Marked {marked} message(s) from {other_user_id} as read for {user.id}")
    messages = await repo.conversation(user.id, other_user_id, limit=limit, offset=offset)
    return Conversation(user=UserSummary.model_validate(other), messages=await _present(session, messages))


@router.post(
    "",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Message",
    description="Send a message to another active user, optionally about a session both take part in.",
    responses={
        400: {"description": "Recipient not found or inactive"},
        403: {"description": "Not a participant of the session"},
    },
)
async def send_message(data: MessageCreate, user: CurrentUser, session: SessionDep) -> MessageRead:
    if data.recipient_id == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send a message to yourself")
    if await UserRepository(session).get_active_by_id(data.recipient_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Recipient not found or inactive")
    if data.session_id:
        booking = await session.get(TutoringSession, data.session_id)
        if booking is None or not booking.is_participant(user.id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a participant of this session")

    message = await MessageRepository(session).create(
        Message(
            sender_id=user.id,
            recipient_id=data.recipient_id,
            session_id=data.session_id,
            subject=data.subject,
            content=data.content,
            message_type=MessageType(data.message_type).value,
        )
    )
    delivered = publish_message(message)
    logger.info(f"Message {message.id} sent from {user.id} to {data.recipient_id} (live streams: {delivered})")
    return (await _present(session, [message]))[0]


@router.get(
    "/{message_id}",
    response_model=MessageRead,
    summary="Get Message",
    description="A message the caller sent or received. Reading it as the recipient marks it read.",
    responses={404: {"description": "Message not found"}},
)
async def get_message(message_id: str, user: CurrentUser, session: SessionDep) -> MessageRead:
    repo = MessageRepository(session)
    message = await repo.get_by_id(message_id)
    if message is None or user.id not in (message.sender_id, message.recipient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if message.recipient_id == user.id:
        message = await repo.mark_read(message)
    return (await _present(session, [message]))[0]


@router.patch(
    "/{message_id}/read",
    response_model=MessageRead,
    summary="Mark Message Read",
    description="Mark a received message as read.",
    responses={404: {"description": "Message not found"}},
)
async def mark_message_read(message_id: str, user: CurrentUser, session: SessionDep) -> MessageRead:
    repo = MessageRepository(session)
    message = await repo.get_by_id(message_id)
    if message is None or message.recipient_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    message = await repo.mark_read(message)
    return (await _present(session, [message]))[0]


@router.delete(
    "/{message_id}",
    response_model=MessageResponse,
    summary="Delete Message",
    description="Delete a message the caller sent.",
    responses={404: {"description": "Message not found"}},
)
async def delete_message(message_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    repo = MessageRepository(session)
    message = await repo.get_by_id(message_id)
    if message is None or message.sender_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    await repo.delete(message.id)
    return MessageResponse(message="Message deleted successfully")
