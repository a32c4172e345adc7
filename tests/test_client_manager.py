"""Tests for engine-based client construction."""

import pytest

from shared.clients.ClientManager import ClientManager
from shared.clients.cms.wordpress.CMSClientWordpress import CMSClientWordpress
from shared.clients.embed.gemini.EmbedClientGemini import EmbedClientGemini
from shared.clients.knowledge.firestore.KnowledgeClientFirestore import KnowledgeClientFirestore
from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini


@pytest.fixture
def full_env(monkeypatch):
    monkeypatch.setenv("CMS_WORDPRESS_BASE_URL", "https://blog.example")
    monkeypatch.setenv("KNOWLEDGE_FIRESTORE_PROJECT_ID", "demo")


@pytest.mark.parametrize("client_type,expected", [
    ("cms", CMSClientWordpress),
    ("embed", EmbedClientGemini),
    ("llm", LLMClientGemini),
    ("knowledge", KnowledgeClientFirestore),
])
def test_default_engines(helper_config, full_env, client_type, expected):
    client = ClientManager(helper_config=helper_config, client_type=client_type).get_client()
    assert isinstance(client, expected)


def test_engine_name_is_case_insensitive(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "GEMINI")
    client = ClientManager(helper_config=helper_config, client_type="embed").get_client()
    assert client.get_engine_name() == "gemini"


def test_unknown_engine_raises(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "nonexistent")
    with pytest.raises(ValueError):
        ClientManager(helper_config=helper_config, client_type="embed")


def test_unknown_client_type_raises(helper_config):
    with pytest.raises(ValueError):
        ClientManager(helper_config=helper_config, client_type="vectordb")


def test_missing_required_setting_fails_fast(helper_config):
    with pytest.raises(ValueError):
        ClientManager(helper_config=helper_config, client_type="cms")
