"""
Study Assistant Chat API Endpoints.

Conversations with the AI study assistant. Each user owns their chat sessions;
someone else's session is reported as missing. The assistant itself lives in
``server.services.study_assistant`` and is injected so tests can swap the model.
"""

from __future__ import annotations

from typing import Annotated, List, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tutorconnect.core.database.entities.ai_chat import (
    DEFAULT_CHAT_TITLE,
    AIChatMessage,
    AIChatSession,
    AIMessageType,
)
from tutorconnect.core.database.repositories import AIChatRepository, UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.ai_chat import (
    ChatExchange,
    ChatMessageCreate,
    ChatMessageList,
    ChatMessageRead,
    ChatSessionCreate,
    ChatSessionList,
    ChatSessionRead,
    ChatSessionUpdate,
    ChatStats,
)
from tutorconnect.core.models.io.common import MessageResponse, PagePagination
from tutorconnect.server.services.deps import CurrentUser, SessionDep
from tutorconnect.server.services.study_assistant import (
    AssistantProfile,
    HistoryTurn,
    MessageValidationError,
    StudyAssistant,
    get_study_assistant,
    validate_message,
)

logger = get_logger(__name__)
router = APIRouter()

HISTORY_WINDOW = 10
PREVIEW_LENGTH = 100

AssistantDep = Annotated[StudyAssistant, Depends(get_study_assistant)]


async def _get_chat_or_404(repo: AIChatRepository, session_id: str, user: CurrentUser) -> AIChatSession:
    chat = await repo.get_owned(session_id, user.id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat session not found")
    return chat


async def _present_sessions(repo: AIChatRepository, chats: Sequence[AIChatSession]) -> List[ChatSessionRead]:
    latest = await repo.last_messages([chat.id for chat in chats])
    presented = []
    for chat in chats:
        item = ChatSessionRead.model_validate(chat)
        last = latest.get(chat.id)
        if last is not None:
            item.last_message = last.content[:PREVIEW_LENGTH]
            item.last_message_type = last.message_type
        presented.append(item)
    return presented


async def _assistant_profile(session: SessionDep, user: CurrentUser) -> AssistantProfile:
    student = await UserRepository(session).get_student_profile(user.id)
    return AssistantProfile(
        first_name=user.first_name,
        role=user.role,
        bio=user.bio,
        academic_level=student.academic_level if student else None,
        learning_style=student.learning_style if student else None,
        learning_goals=student.learning_goals if student else None,
        joined_at=user.created_at,
    )


@router.get(
    "/sessions",
    response_model=ChatSessionList,
    summary="List Chat Sessions",
    description="The caller's active chat sessions, most recently used first, with a preview of the last message.",
)
async def list_chat_sessions(
    user: CurrentUser,
    session: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ChatSessionList:
    repo = AIChatRepository(session)
    chats, total = await repo.list_for_user(user.id, limit=limit, offset=(page - 1) * limit)
    return ChatSessionList(
        sessions=await _present_sessions(repo, chats),
        pagination=PagePagination.build(total, page, limit),
    )


@router.post(
    "/sessions",
    response_model=ChatSessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Chat Session",
)
async def create_chat_session(data: ChatSessionCreate, user: CurrentUser, session: SessionDep) -> ChatSessionRead:
    title = (data.title or "").strip() or DEFAULT_CHAT_TITLE
    chat = await AIChatRepository(session).create(AIChatSession(user_id=user.id, title=title))
    logger.info(f"Chat session {chat.id} created for user {user.id}")
    return ChatSessionRead.model_validate(chat)


@router.put(
    "/sessions/{session_id}",
    response_model=ChatSessionRead,
    summary="Update Chat Session",
    description="Rename a chat session or change its active flag.",
    responses={400: {"description": "No valid fields to update"}, 404: {"description": "Chat session not found"}},
)
async def update_chat_session(
    session_id: str, data: ChatSessionUpdate, user: CurrentUser, session: SessionDep
) -> ChatSessionRead:
    repo = AIChatRepository(session)
    chat = await repo.get_owned(session_id, user.id, active_only=False)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat session not found")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    if "title" in changes:
        chat.title = changes["title"].strip() or chat.title
    if "is_active" in changes:
        chat.is_active = changes["is_active"]
    chat = await repo.update(chat)
    return (await _present_sessions(repo, [chat]))[0]


@router.delete(
    "/sessions/{session_id}",
    response_model=MessageResponse,
    summary="Delete Chat Session",
    description="Hide a chat session. Its messages are kept.",
    responses={404: {"description": "Chat session not found"}},
)
async def delete_chat_session(session_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    repo = AIChatRepository(session)
    chat = await _get_chat_or_404(repo, session_id, user)
    chat.is_active = False
    await repo.update(chat)
    logger.info(f"Chat session {session_id} deactivated by {user.id}")
    return MessageResponse(message="Chat session deleted successfully")


@router.get(
    "/sessions/{session_id}/messages",
    response_model=ChatMessageList,
    summary="List Chat Messages",
    description="Every message of a chat session, oldest first.",
    responses={404: {"description": "Chat session not found"}},
)
async def list_chat_messages(session_id: str, user: CurrentUser, session: SessionDep) -> ChatMessageList:
    repo = AIChatRepository(session)
    chat = await _get_chat_or_404(repo, session_id, user)
    return ChatMessageList(messages=[ChatMessageRead.model_validate(m) for m in await repo.messages(chat.id)])


@router.post(
    "/sessions/{session_id}/messages",
    response_model=ChatExchange,
    summary="Ask The Study Assistant",
    description=(
        "Store the user's message, ask the assistant with the recent conversation as context and store its reply. "
        "When the assistant is unavailable the stored reply is an apology and `success` is false."
    ),
    responses={400: {"description": "Message rejected"}, 404: {"description": "Chat session not found"}},
)
async def send_chat_message(
    session_id: str,
    data: ChatMessageCreate,
    user: CurrentUser,
    session: SessionDep,
    assistant: AssistantDep,
) -> ChatExchange:
    repo = AIChatRepository(session)
    chat = await _get_chat_or_404(repo, session_id, user)
    try:
        content = validate_message(data.message)
    except MessageValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    previous = await repo.messages(chat.id, limit=HISTORY_WINDOW)
    user_message = await repo.add_message(
        AIChatMessage(
            session_id=chat.id,
            user_id=user.id,
            message_type=AIMessageType.USER.value,
            content=content,
        )
    )

    reply = await assistant.reply(
        content,
        [HistoryTurn(message_type=m.message_type, content=m.content) for m in previous],
        await _assistant_profile(session, user),
    )
    ai_message = await repo.add_message(
        AIChatMessage(
            session_id=chat.id,
            user_id=user.id,
            message_type=AIMessageType.ASSISTANT.value,
            content=reply.content,
            model_used=reply.model,
            tokens_used=reply.tokens_used,
            response_time_ms=reply.response_time_ms,
        )
    )

    if not previous and chat.title == DEFAULT_CHAT_TITLE:
        chat.title = await assistant.generate_title(content)
        chat = await repo.update(chat)
        logger.debug(f"Chat session {chat.id} titled '{chat.title}'")
    else:
        await session.refresh(chat)

    if not reply.success:
        logger.warning(f"Study assistant fallback for chat {chat.id}: {reply.error}")
    return ChatExchange(
        success=reply.success,
        user_message=ChatMessageRead.model_validate(user_message),
        ai_message=ChatMessageRead.model_validate(ai_message),
        session=(await _present_sessions(repo, [chat]))[0],
        error=reply.error,
    )


@router.get(
    "/stats",
    response_model=ChatStats,
    summary="Study Assistant Usage",
    description="Totals of the caller's chat sessions, messages, tokens and average reply time.",
)
async def chat_stats(user: CurrentUser, session: SessionDep) -> ChatStats:
    return ChatStats(**await AIChatRepository(session).stats(user.id))
