"""
Unit tests for the study assistant.

The model is replaced with Pydantic AI's ``TestModel`` and ``FunctionModel`` so
no provider is ever called.
"""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pydantic_ai.messages import ModelRequest, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from tutorconnect.server.core.config import AIAssistantConfig
from tutorconnect.server.services.study_assistant import (
    DEFAULT_TITLE,
    FALLBACK_REPLY,
    AssistantProfile,
    HistoryTurn,
    MessageValidationError,
    StudyAssistant,
    build_default_model,
    build_history,
    build_system_prompt,
    clean_title,
    total_tokens,
    validate_message,
)

PROFILE = AssistantProfile(first_name="Ada", role="student", academic_level="High School")


class TestValidateMessage:
    def test_trims_message(self):
        assert validate_message("  What is a derivative?  ") == "What is a derivative?"

    @pytest.mark.parametrize(
        "message,reason",
        [
            (None, "required"),
            ("", "required"),
            ("   ", "empty"),
            ("x" * 2001, "too long"),
            ("this is SPAM", "inappropriate"),
        ],
    )
    def test_rejects(self, message, reason):
        with pytest.raises(MessageValidationError, match=reason):
            validate_message(message)

    def test_accepts_maximum_length(self):
        assert len(validate_message("x" * 2000)) == 2000


class TestPrompting:
    def test_system_prompt_includes_profile(self):
        profile = AssistantProfile(
            first_name="Ada",
            role="student",
            academic_level="College",
            learning_style="visual",
            joined_at=datetime(2024, 3, 1),
        )
        prompt = build_system_prompt(profile)

        assert "- Name: Ada" in prompt
        assert "- Role: Student" in prompt
        assert "- Academic level: College" in prompt
        assert "- Learning style: visual" in prompt
        assert "2024-03-01" in prompt
        assert "learning techniques" in prompt

    def test_tutor_prompt_focuses_on_teaching(self):
        prompt = build_system_prompt(AssistantProfile(first_name="Grace", role="tutor"))
        assert "lesson planning" in prompt
        assert "teaching effectiveness" in prompt

    def test_history_keeps_last_three_turns(self):
        turns = [HistoryTurn("user" if n % 2 == 0 else "assistant", f"turn {n}") for n in range(6)]
        history = build_history(turns)

        assert len(history) == 3
        assert isinstance(history[0], ModelResponse)
        assert isinstance(history[1], ModelRequest)
        assert history[-1].parts[0].content == "turn 5"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('"Calculus Basics"', "Calculus Basics"),
            ("Derivatives\nExtra words", "Derivatives"),
            ("", DEFAULT_TITLE),
            (None, DEFAULT_TITLE),
        ],
    )
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected

    def test_no_model_without_api_key(self):
        assert build_default_model(AIAssistantConfig()) is None


class TestTotalTokens:
    def test_usage_attribute(self):
        result = SimpleNamespace(usage=SimpleNamespace(total_tokens=42))
        assert total_tokens(result) == 42

    def test_usage_method(self):
        result = SimpleNamespace(usage=lambda: SimpleNamespace(total_tokens=7))
        assert total_tokens(result) == 7

    def test_missing_count_is_zero(self):
        assert total_tokens(SimpleNamespace(usage=SimpleNamespace(total_tokens=None))) == 0


class TestStudyAssistantReply:
    async def test_reply_from_model(self):
        assistant = StudyAssistant(model=TestModel(custom_output_text="A derivative measures change."))

        reply = await assistant.reply("What is a derivative?", [], PROFILE)

        assert reply.success is True
        assert reply.content == "A derivative measures change."
        assert reply.tokens_used > 0
        assert reply.error is None

    async def test_history_and_instructions_reach_model(self):
        seen = {}

        def respond(messages, info: AgentInfo) -> ModelResponse:
            seen["messages"] = messages
            return ModelResponse(parts=[TextPart(content="Sure.")])

        assistant = StudyAssistant(model=FunctionModel(respond))
        history = [HistoryTurn("user", "Hi"), HistoryTurn("assistant", "Hello Ada")]

        reply = await assistant.reply("Explain limits", history, PROFILE)

        assert reply.success is True
        # Two replayed turns plus the new request
        assert len(seen["messages"]) == 3
        assert "TutorConnect AI" in (seen["messages"][-1].instructions or "")

    async def test_provider_failure_returns_fallback(self):
        def explode(messages, info):
            raise RuntimeError("provider down")

        assistant = StudyAssistant(model=FunctionModel(explode), model_name="llama")

        reply = await assistant.reply("Explain limits", [], PROFILE)

        assert reply.success is False
        assert reply.content == FALLBACK_REPLY
        assert reply.model == "llama"
        assert "provider down" in reply.error

    async def test_usage_failure_returns_fallback(self):
        assistant = StudyAssistant(model=TestModel(custom_output_text="Sure."), model_name="llama")

        with patch(
            "tutorconnect.server.services.study_assistant.total_tokens", side_effect=AttributeError("no usage")
        ):
            reply = await assistant.reply("Explain limits", [], PROFILE)

        assert reply.success is False
        assert reply.content == FALLBACK_REPLY
        assert reply.error == "no usage"

    async def test_unconfigured_assistant_returns_fallback(self):
        assistant = StudyAssistant()

        reply = await assistant.reply("Explain limits", [], PROFILE)

        assert assistant.available is False
        assert reply.success is False
        assert reply.content == FALLBACK_REPLY


class TestGenerateTitle:
    async def test_title_from_model(self):
        assistant = StudyAssistant(model=TestModel(custom_output_text='"Understanding Derivatives"'))
        assert await assistant.generate_title("What is a derivative?") == "Understanding Derivatives"

    async def test_default_title_without_model(self):
        assert await StudyAssistant().generate_title("What is a derivative?") == DEFAULT_TITLE
