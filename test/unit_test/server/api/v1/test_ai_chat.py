"""
API tests for the study assistant chat.

The assistant dependency is overridden with a ``FunctionModel`` backed
assistant, so replies and titles are deterministic and no provider is called.
"""

import pytest
from httpx import AsyncClient
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from tutorconnect.core.database.entities.ai_chat import AIChatSession
from tutorconnect.server.main import app
from tutorconnect.server.services.study_assistant import FALLBACK_REPLY, StudyAssistant, get_study_assistant

pytestmark = pytest.mark.asyncio


def _is_title_request(messages) -> bool:
    return any("Return only the title" in str(getattr(part, "content", "")) for part in messages[-1].parts)


@pytest.fixture
def model_calls(client):
    """Install a scripted assistant and record how many messages each call carried."""
    calls = []

    def respond(messages, info: AgentInfo) -> ModelResponse:
        if _is_title_request(messages):
            return ModelResponse(parts=[TextPart(content='"Derivative Basics"')])
        calls.append(len(messages))
        return ModelResponse(parts=[TextPart(content=f"Answer {len(calls)}")])

    assistant = StudyAssistant(model=FunctionModel(respond), model_name="scripted")
    app.dependency_overrides[get_study_assistant] = lambda: assistant
    return calls


class TestChatSessions:
    async def test_create_defaults_title(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        headers = auth_headers(user)

        untitled = await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)
        titled = await client.post("/api/v1/ai-chat/sessions", json={"title": "  Algebra  "}, headers=headers)

        assert untitled.status_code == 201
        assert untitled.json()["title"] == "New Chat"
        assert titled.json()["title"] == "Algebra"

    async def test_list_only_own_active_sessions(self, client: AsyncClient, make_user, auth_headers, session):
        user = await make_user()
        other = await make_user()
        session.add_all(
            [
                AIChatSession(user_id=user.id, title="Mine"),
                AIChatSession(user_id=user.id, title="Hidden", is_active=False),
                AIChatSession(user_id=other.id, title="Theirs"),
            ]
        )
        await session.commit()

        response = await client.get("/api/v1/ai-chat/sessions", headers=auth_headers(user))

        assert [s["title"] for s in response.json()["sessions"]] == ["Mine"]
        assert response.json()["pagination"]["total"] == 1

    async def test_rename_and_reactivate(self, client: AsyncClient, make_user, auth_headers, session):
        user = await make_user()
        chat = AIChatSession(user_id=user.id, title="Old", is_active=False)
        session.add(chat)
        await session.commit()
        headers = auth_headers(user)

        response = await client.put(
            f"/api/v1/ai-chat/sessions/{chat.id}", json={"title": "Renamed", "isActive": True}, headers=headers
        )
        empty = await client.put(f"/api/v1/ai-chat/sessions/{chat.id}", json={}, headers=headers)

        assert response.json()["title"] == "Renamed"
        assert response.json()["isActive"] is True
        assert empty.status_code == 400

    async def test_delete_hides_session(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        other = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)).json()["id"]

        by_other = await client.delete(f"/api/v1/ai-chat/sessions/{chat_id}", headers=auth_headers(other))
        by_owner = await client.delete(f"/api/v1/ai-chat/sessions/{chat_id}", headers=headers)
        messages = await client.get(f"/api/v1/ai-chat/sessions/{chat_id}/messages", headers=headers)

        assert by_other.status_code == 404
        assert by_owner.json()["message"] == "Chat session deleted successfully"
        assert messages.status_code == 404


class TestAskAssistant:
    async def test_first_message_titles_session(self, client: AsyncClient, make_user, auth_headers, model_calls):
        user = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)).json()["id"]

        response = await client.post(
            f"/api/v1/ai-chat/sessions/{chat_id}/messages", json={"message": "  What is a derivative?  "}, headers=headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["userMessage"]["content"] == "What is a derivative?"
        assert data["userMessage"]["messageType"] == "user"
        assert data["aiMessage"]["content"] == "Answer 1"
        assert data["aiMessage"]["modelUsed"] == "scripted"
        assert data["session"]["title"] == "Derivative Basics"
        assert data["session"]["lastMessage"] == "Answer 1"
        assert data["error"] is None

    async def test_follow_up_carries_history(self, client: AsyncClient, make_user, auth_headers, model_calls):
        user = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={"title": "Calculus"}, headers=headers)).json()["id"]
        url = f"/api/v1/ai-chat/sessions/{chat_id}/messages"

        await client.post(url, json={"message": "What is a derivative?"}, headers=headers)
        second = await client.post(url, json={"message": "And an integral?"}, headers=headers)
        history = await client.get(url, headers=headers)

        # The second call replays the first question and answer
        assert model_calls == [1, 3]
        assert second.json()["session"]["title"] == "Calculus"
        assert [m["messageType"] for m in history.json()["messages"]] == ["user", "assistant", "user", "assistant"]

    @pytest.mark.parametrize(
        "payload,detail",
        [
            ({}, "Message is required"),
            ({"message": "   "}, "Message cannot be empty"),
            ({"message": "x" * 2001}, "Message is too long (max 2000 characters)"),
            ({"message": "buy spam now"}, "Message contains inappropriate content"),
        ],
    )
    async def test_rejected_messages(self, client: AsyncClient, make_user, auth_headers, payload, detail):
        user = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)).json()["id"]

        response = await client.post(f"/api/v1/ai-chat/sessions/{chat_id}/messages", json=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == detail

    async def test_unconfigured_assistant_stores_apology(self, client: AsyncClient, make_user, auth_headers):
        user = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)).json()["id"]

        response = await client.post(
            f"/api/v1/ai-chat/sessions/{chat_id}/messages", json={"message": "Help with fractions"}, headers=headers
        )

        data = response.json()
        assert data["success"] is False
        assert data["aiMessage"]["content"] == FALLBACK_REPLY
        assert data["error"] == "Study assistant is not configured"

    async def test_unknown_session(self, client: AsyncClient, make_user, auth_headers, model_calls):
        user = await make_user()

        response = await client.post(
            "/api/v1/ai-chat/sessions/missing/messages", json={"message": "Hi"}, headers=auth_headers(user)
        )

        assert response.status_code == 404
        assert model_calls == []


class TestChatStats:
    async def test_usage_totals(self, client: AsyncClient, make_user, auth_headers, model_calls):
        user = await make_user()
        headers = auth_headers(user)
        chat_id = (await client.post("/api/v1/ai-chat/sessions", json={}, headers=headers)).json()["id"]
        await client.post(f"/api/v1/ai-chat/sessions/{chat_id}/messages", json={"message": "Hi"}, headers=headers)

        response = await client.get("/api/v1/ai-chat/stats", headers=headers)

        data = response.json()
        assert data["totalSessions"] == 1
        assert data["totalMessages"] == 2
        assert data["totalTokens"] > 0
        assert data["avgResponseTimeMs"] >= 0
