"""
Study assistant.

Wraps a Pydantic AI ``Agent`` over an OpenAI-compatible chat model (Groq by
default) and adds the product rules around it:

- ``validate_message`` screens user input before anything is persisted.
- The system prompt is personalized from the caller's profile and role.
- Only the three most recent earlier turns are replayed as history.
- Provider failures never surface as HTTP errors; the caller gets a fixed
  apology with ``success=False`` instead.

With no model configured (no ``AI_API_KEY``) the assistant runs in fallback
mode and always answers with the apology. Tests inject
``pydantic_ai.models.test.TestModel`` or ``FunctionModel``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence

from pydantic_ai import Agent, ModelSettings
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.monitoring import log_error, log_llm_call
from tutorconnect.server.core.config import AIAssistantConfig, settings

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 2000
BANNED_TOKENS = ("spam", "test123", "asdfgh")
HISTORY_TURNS = 3
DEFAULT_TITLE = "Study Help Session"
TITLE_MAX_LENGTH = 255

FALLBACK_REPLY = (
    "I apologize, but I'm experiencing some technical difficulties right now. "
    "Please try asking your question again in a moment. If the problem persists, "
    "you can always reach out to one of our human tutors for assistance!"
)

ROLE_FUNCTIONS = {
    "student": (
        "- Answer academic questions across all subjects with clear explanations\n"
        "- Provide step-by-step guidance for learning concepts\n"
        "- Offer study tips and effective learning strategies\n"
        "- Help with homework and assignments (guide, don't solve directly)\n"
        "- Build on previous conversations to maintain learning continuity"
    ),
    "tutor": (
        "- Provide teaching strategies and pedagogical advice\n"
        "- Help with lesson planning and curriculum ideas\n"
        "- Offer guidance on student engagement techniques\n"
        "- Suggest assessment and evaluation methods"
    ),
}
DEFAULT_FUNCTIONS = (
    "- Provide comprehensive educational support\n"
    "- Answer questions across academic and educational domains"
)
ROLE_FOCUS = {
    "student": "Focus on learning techniques and academic success.",
    "tutor": "Focus on teaching effectiveness and student outcomes.",
    "admin": "Focus on platform management and user support.",
}


class MessageValidationError(ValueError):
    """Raised when a chat message is rejected before reaching the model."""


@dataclass(frozen=True)
class AssistantProfile:
    """What the assistant knows about the person it is talking to."""

    first_name: str
    role: str
    bio: Optional[str] = None
    academic_level: Optional[str] = None
    learning_style: Optional[str] = None
    learning_goals: Optional[str] = None
    joined_at: Optional[datetime] = None


@dataclass(frozen=True)
class HistoryTurn:
    message_type: str
    content: str


@dataclass(frozen=True)
class AssistantReply:
    """Outcome of one assistant call."""

    success: bool
    content: str
    model: str
    tokens_used: int
    response_time_ms: int
    error: Optional[str] = None


def validate_message(message: Any) -> str:
    """
    Validate and normalize a chat message.

    Returns:
        str: The trimmed message

    Raises:
        MessageValidationError: When the message is missing, blank, too long
            or contains a banned token
    """
    if not isinstance(message, str) or not message:
        raise MessageValidationError("Message is required")
    trimmed = message.strip()
    if not trimmed:
        raise MessageValidationError("Message cannot be empty")
    if len(trimmed) > MAX_MESSAGE_LENGTH:
        raise MessageValidationError(f"Message is too long (max {MAX_MESSAGE_LENGTH} characters)")
    lowered = trimmed.lower()
    if any(token in lowered for token in BANNED_TOKENS):
        raise MessageValidationError("Message contains inappropriate content")
    return trimmed


def build_system_prompt(profile: AssistantProfile) -> str:
    """Personalized instructions for the assistant."""
    role = profile.role or "student"
    lines = [
        "You are TutorConnect AI, a personalized study assistant that supports people on the "
        "TutorConnect tutoring platform.",
        "",
        "User profile:",
        f"- Name: {profile.first_name or 'Student'}",
        f"- Role: {role.capitalize()}",
    ]
    if profile.joined_at is not None:
        lines.append(f"- Joined TutorConnect: {profile.joined_at.date().isoformat()}")
    if profile.academic_level:
        lines.append(f"- Academic level: {profile.academic_level}")
    if profile.learning_style:
        lines.append(f"- Learning style: {profile.learning_style}")
    if profile.learning_goals:
        lines.append(f"- Goals: {profile.learning_goals}")
    if profile.bio:
        lines.append(f"- Bio: {profile.bio}")

    lines += [
        "",
        "Your primary functions:",
        ROLE_FUNCTIONS.get(role, DEFAULT_FUNCTIONS),
        "",
        "Guidelines:",
        f"- {ROLE_FOCUS.get(role, 'Provide balanced educational support.')}",
        "- Break complex topics into simple parts and use examples.",
        "- Never invent facts, statistics or personal details; say so when you are not certain.",
        "- Never hand out answers to what looks like a test or graded assignment.",
        f"- Address the user as {profile.first_name or 'Student'} when appropriate and keep replies concise.",
    ]
    return "\n".join(lines)


def build_history(turns: Sequence[HistoryTurn]) -> List[ModelMessage]:
    """Replay the most recent turns as Pydantic AI messages."""
    history: List[ModelMessage] = []
    for turn in list(turns)[-HISTORY_TURNS:]:
        if turn.message_type == "user":
            history.append(ModelRequest(parts=[UserPromptPart(content=turn.content)]))
        else:
            history.append(ModelResponse(parts=[TextPart(content=turn.content)]))
    return history


def clean_title(raw: Optional[str]) -> str:
    title = (raw or "").strip().strip("\"'").strip()
    title = title.splitlines()[0].strip() if title else ""
    return title[:TITLE_MAX_LENGTH] or DEFAULT_TITLE


def total_tokens(result: Any) -> int:
    """Token count of an agent run; ``usage`` is a method on older Pydantic AI releases."""
    usage = result.usage
    if callable(usage):
        usage = usage()
    return int(getattr(usage, "total_tokens", None) or 0)


def build_default_model(config: AIAssistantConfig) -> Optional[OpenAIChatModel]:
    """Chat model for the configured provider, or None when no API key is set."""
    if not config.api_key:
        logger.info("AI_API_KEY is not set; study assistant runs in fallback mode")
        return None
    provider = OpenAIProvider(base_url=config.base_url, api_key=config.api_key)
    return OpenAIChatModel(config.model, provider=provider)


class StudyAssistant:
    """Conversational study helper backed by a Pydantic AI agent."""

    def __init__(
        self,
        *,
        model: Any | None = None,
        model_name: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        """
        Args:
            model: Pydantic AI model. ``None`` puts the assistant in fallback mode.
            model_name: Name recorded on stored replies; defaults to the model's own name.
            temperature: Sampling temperature for replies
            max_tokens: Upper bound on reply tokens
        """
        self._model = model
        self.model_name = model_name or getattr(model, "model_name", None) or "unavailable"
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def available(self) -> bool:
        return self._model is not None

    async def reply(
        self, message: str, history: Sequence[HistoryTurn], profile: AssistantProfile
    ) -> AssistantReply:
        """
        Answer ``message`` in the context of the earlier conversation.

        Never raises for provider problems; failures come back as the fallback reply.
        """
        if self._model is None:
            return AssistantReply(
                success=False,
                content=FALLBACK_REPLY,
                model=self.model_name,
                tokens_used=0,
                response_time_ms=0,
                error="Study assistant is not configured",
            )

        agent: Agent = Agent(
            self._model,
            instructions=build_system_prompt(profile),
            model_settings=ModelSettings(temperature=self.temperature, max_tokens=self.max_tokens),
        )
        started = time.perf_counter()
        try:
            result = await agent.run(message, message_history=build_history(history))
            content = str(result.output or "").strip()
            tokens = total_tokens(result)
        except Exception as e:
            logger.error(f"Study assistant call failed: {e}", exc_info=True)
            log_error("StudyAssistantError", str(e), {"model": self.model_name, "role": profile.role})
            return AssistantReply(
                success=False,
                content=FALLBACK_REPLY,
                model=self.model_name,
                tokens_used=0,
                response_time_ms=0,
                error=str(e),
            )

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if not content:
            logger.warning("Study assistant returned an empty reply")
            return AssistantReply(
                success=False,
                content=FALLBACK_REPLY,
                model=self.model_name,
                tokens_used=tokens,
                response_time_ms=elapsed_ms,
                error="No response generated",
            )

        log_llm_call(self.model_name, tokens, elapsed_ms)
        return AssistantReply(
            success=True,
            content=content,
            model=self.model_name,
            tokens_used=tokens,
            response_time_ms=elapsed_ms,
        )

    async def generate_title(self, first_message: str) -> str:
        """Short conversation title derived from the opening question."""
        if self._model is None:
            return DEFAULT_TITLE
        agent: Agent = Agent(self._model, model_settings=ModelSettings(temperature=0.3, max_tokens=20))
        prompt = (
            "Generate a short, descriptive title (max 6 words) for a study session based on this "
            f'question: "{first_message}". Return only the title, nothing else.'
        )
        try:
            result = await agent.run(prompt)
        except Exception as e:
            logger.warning(f"Title generation failed: {e}")
            return DEFAULT_TITLE
        return clean_title(str(result.output or ""))


# Global singleton
_assistant: Optional[StudyAssistant] = None


def get_study_assistant() -> StudyAssistant:
    global _assistant
    if _assistant is None:
        config = settings.ai
        _assistant = StudyAssistant(
            model=build_default_model(config),
            model_name=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
    return _assistant
