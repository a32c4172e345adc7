"""Tests for the HTTP API."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from server.api.routers.ChatRouter import chat_router
from server.api.routers.KnowledgeRouter import knowledge_router
from server.api.services.ChatService import ChatService
from server.api.services.prompts import GREETING_MESSAGE, QUICK_QUESTIONS, RESET_MESSAGE
from shared.models.knowledge import SyncReport
from shared.storage.TranscriptStore import TranscriptStore
from fakes import FakeLLMClient, FakeRetrievalService


class FakeSyncService:
    def __init__(self, report: SyncReport | None = None, error: Exception | None = None):
        self.report = report or SyncReport(fetched=3, updated=1, skipped=2)
        self.error = error
        self.runs = 0

    async def do_sync(self) -> SyncReport:
        self.runs += 1
        if self.error:
            raise self.error
        return self.report


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app(helper_config, tmp_path, monkeypatch):
    monkeypatch.setenv("TRANSCRIPT_DIR", str(tmp_path))
    monkeypatch.setenv("APP_API_KEY", "secret")

    app = FastAPI()
    app.include_router(chat_router)
    app.include_router(knowledge_router)
    app.state.logging = helper_config.get_logger()
    app.state.config = helper_config
    app.state.retrieval_service = FakeRetrievalService(context="Title: T\nContent: C\nURL: U")
    app.state.sync_service = FakeSyncService()
    app.state.chat_service = ChatService(
        helper_config=helper_config,
        retrieval_service=app.state.retrieval_service,
        llm_client=FakeLLMClient(reply="こたえ"),
        transcript_store=TranscriptStore(helper_config=helper_config),
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

class TestChatRouter:
    def test_quick_questions(self, client):
        response = client.get("/chat/quick-questions")
        assert response.status_code == 200
        assert response.json() == {"questions": QUICK_QUESTIONS}

    def test_history_of_new_session_has_greeting(self, client):
        response = client.get("/chat/abc")
        assert response.status_code == 200
        assert response.json() == {
            "session_id": "abc",
            "messages": [{"role": "assistant", "content": GREETING_MESSAGE}],
        }

    def test_post_message_returns_updated_transcript(self, client):
        response = client.post("/chat", json={"session_id": "abc", "message": "節税は？"})
        assert response.status_code == 200
        messages = response.json()["messages"]
        assert [m["role"] for m in messages] == ["assistant", "user", "assistant"]
        assert messages[-1]["content"] == "こたえ"

        history = client.get("/chat/abc").json()["messages"]
        assert history == messages

    def test_reset(self, client):
        client.post("/chat", json={"session_id": "abc", "message": "節税は？"})
        response = client.delete("/chat/abc")
        assert response.status_code == 200
        assert response.json()["messages"] == [{"role": "assistant", "content": RESET_MESSAGE}]

    def test_invalid_session_id_is_rejected(self, client):
        response = client.post("/chat", json={"session_id": "../../etc", "message": "hi"})
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Knowledge
# ---------------------------------------------------------------------------

class TestKnowledgeRouter:
    def test_sync_requires_api_key(self, client):
        assert client.post("/knowledge/sync").status_code == 401
        assert client.post("/knowledge/sync", headers={"X-API-Key": "wrong"}).status_code == 401

    def test_sync_returns_report(self, client, app):
        response = client.post("/knowledge/sync", headers={"X-API-Key": "secret"})
        assert response.status_code == 200
        assert response.json() == {"fetched": 3, "updated": 1, "skipped": 2, "excluded": 0, "failed": 0}
        assert app.state.sync_service.runs == 1

    def test_sync_failure_maps_to_502(self, client, app):
        app.state.sync_service = FakeSyncService(error=RuntimeError("cms down"))
        response = client.post("/knowledge/sync", headers={"X-API-Key": "secret"})
        assert response.status_code == 502

    def test_unconfigured_api_key_is_503(self, client, monkeypatch):
        monkeypatch.delenv("APP_API_KEY")
        response = client.post("/knowledge/sync", headers={"X-API-Key": "secret"})
        assert response.status_code == 503

    def test_context(self, client, app):
        response = client.post("/knowledge/context", json={"query": "節税"}, headers={"X-API-Key": "secret"})
        assert response.status_code == 200
        assert response.json() == {"query": "節税", "context": "Title: T\nContent: C\nURL: U"}
        assert app.state.retrieval_service.queries == ["節税"]


def test_health(tmp_path, monkeypatch):
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    from server.api.api_app import app as main_app

    response = TestClient(main_app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
