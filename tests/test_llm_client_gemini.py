"""Tests for the Gemini generation client."""

import json

import httpx
import pytest
import respx

from shared.clients.errors import ClientRequestError, MalformedResponseError
from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini
from shared.models.chat import Message

CHAT_URL = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash-preview-09-2025:generateContent"


def _reply(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}


@pytest.fixture
def llm_env(monkeypatch):
    monkeypatch.setenv("LLM_GEMINI_API_KEY", "llm-key")


class TestPayload:
    def test_maps_assistant_to_model_role(self, helper_config, llm_env):
        client = LLMClientGemini(helper_config=helper_config)
        payload = client.get_chat_payload(
            "persona",
            [Message(role="assistant", content="こんにちは"), Message(role="user", content="節税は？")],
        )
        assert payload == {
            "systemInstruction": {"parts": [{"text": "persona"}]},
            "contents": [
                {"role": "model", "parts": [{"text": "こんにちは"}]},
                {"role": "user", "parts": [{"text": "節税は？"}]},
            ],
        }

    def test_has_credentials(self, helper_config, monkeypatch):
        assert LLMClientGemini(helper_config=helper_config).has_credentials() is False
        monkeypatch.setenv("LLM_GEMINI_API_KEY", "llm-key")
        assert LLMClientGemini(helper_config=helper_config).has_credentials() is True


class TestExtract:
    def test_joins_parts(self, helper_config, llm_env):
        client = LLMClientGemini(helper_config=helper_config)
        data = {"candidates": [{"content": {"parts": [{"text": "結論"}, {"text": "です"}]}}]}
        assert client.extract_chat_response(data) == "結論です"

    def test_no_candidates_is_malformed(self, helper_config, llm_env):
        client = LLMClientGemini(helper_config=helper_config)
        with pytest.raises(MalformedResponseError):
            client.extract_chat_response({"candidates": []})

    def test_blank_text_is_malformed(self, helper_config, llm_env):
        client = LLMClientGemini(helper_config=helper_config)
        with pytest.raises(MalformedResponseError):
            client.extract_chat_response(_reply("   "))


class TestDoChat:
    @pytest.mark.asyncio
    async def test_returns_reply(self, helper_config, recording_sleep, llm_env):
        with respx.mock(assert_all_called=False) as router:
            route = router.post(CHAT_URL).mock(return_value=httpx.Response(200, json=_reply("こたえ")))
            client = LLMClientGemini(helper_config=helper_config, sleep=recording_sleep)
            await client.boot()
            try:
                reply = await client.do_chat("persona", [Message(role="user", content="質問")])
            finally:
                await client.close()

        assert reply == "こたえ"
        request = route.calls.last.request
        assert request.url.params["key"] == "llm-key"
        assert json.loads(request.content)["systemInstruction"]["parts"][0]["text"] == "persona"

    @pytest.mark.asyncio
    async def test_retries_five_times_then_raises(self, helper_config, recording_sleep, llm_env):
        with respx.mock(assert_all_called=False) as router:
            route = router.post(CHAT_URL).mock(return_value=httpx.Response(503))
            client = LLMClientGemini(helper_config=helper_config, sleep=recording_sleep)
            await client.boot()
            try:
                with pytest.raises(ClientRequestError) as exc_info:
                    await client.do_chat("persona", [Message(role="user", content="質問")])
            finally:
                await client.close()

        assert exc_info.value.status_code == 503
        assert route.call_count == 6
        assert recording_sleep.delays == [1.0, 2.0, 4.0, 8.0, 16.0]

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, helper_config, recording_sleep, llm_env):
        with respx.mock(assert_all_called=False) as router:
            router.post(CHAT_URL).mock(side_effect=[httpx.Response(500), httpx.Response(200, json=_reply("ok"))])
            client = LLMClientGemini(helper_config=helper_config, sleep=recording_sleep)
            await client.boot()
            try:
                reply = await client.do_chat("persona", [Message(role="user", content="質問")])
            finally:
                await client.close()

        assert reply == "ok"
        assert recording_sleep.delays == [1.0]
