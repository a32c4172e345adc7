"""Shared fixtures for the blog mentor bridge tests."""

import logging

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

# every setting the clients read; cleared so a developer's shell cannot leak in
_MANAGED_ENV_KEYS = [
    "CMS_ENGINE", "EMBED_ENGINE", "LLM_ENGINE", "KNOWLEDGE_ENGINE",
    "CMS_WORDPRESS_BASE_URL", "CMS_WORDPRESS_PAGE_SIZE", "CMS_WORDPRESS_API_KEY",
    "EMBED_GEMINI_BASE_URL", "EMBED_GEMINI_API_KEY", "EMBED_MODEL", "EMBED_MAX_RETRIES",
    "LLM_GEMINI_BASE_URL", "LLM_GEMINI_API_KEY", "LLM_CHAT_MODEL", "LLM_MAX_RETRIES",
    "KNOWLEDGE_FIRESTORE_BASE_URL", "KNOWLEDGE_FIRESTORE_AUTH_URL", "KNOWLEDGE_FIRESTORE_TOKEN_URL",
    "KNOWLEDGE_FIRESTORE_API_KEY", "KNOWLEDGE_FIRESTORE_PROJECT_ID", "KNOWLEDGE_FIRESTORE_DATABASE",
    "KNOWLEDGE_FIRESTORE_COLLECTION",
    "SYNC_EXCLUDE_MARKER", "SYNC_ON_STARTUP", "APP_API_KEY",
    "TRANSCRIPT_DIR", "TRANSCRIPT_STORAGE_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config():
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(float(delay))


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
