"""Tests for the logging helpers."""

import logging

from shared.logging.logging_setup import ApiKeyRedactFilter, ColorLogger


def _record(msg, *args) -> logging.LogRecord:
    return logging.LogRecord("httpx", logging.INFO, __file__, 1, msg, args, None)


def test_redact_filter_masks_configured_keys(monkeypatch):
    monkeypatch.setenv("EMBED_GEMINI_API_KEY", "AIzaSecret")
    record = _record("POST %s", "https://host/models/x:embedContent?key=AIzaSecret")

    assert ApiKeyRedactFilter().filter(record) is True
    assert record.getMessage() == "POST https://host/models/x:embedContent?key=***"


def test_redact_filter_without_keys_leaves_message(monkeypatch):
    monkeypatch.delenv("EMBED_GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("LLM_GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("KNOWLEDGE_FIRESTORE_API_KEY", raising=False)
    record = _record("GET %s", "https://host/?key=abc")

    ApiKeyRedactFilter().filter(record)
    assert record.getMessage() == "GET https://host/?key=abc"


def test_color_logger_passes_color_as_extra(caplog):
    logger = ColorLogger(logging.getLogger("tests.color"))
    with caplog.at_level(logging.INFO, logger="tests.color"):
        logger.info("done %d", 3, color="green")

    assert caplog.records[0].getMessage() == "done 3"
    assert caplog.records[0].color == "green"
