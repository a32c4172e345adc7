"""File-backed transcript persistence, one JSON blob per chat session."""

import os
import re

from pydantic import TypeAdapter, ValidationError

from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import SESSION_ID_PATTERN, Message

_MESSAGES_ADAPTER = TypeAdapter(list[Message])
_SESSION_ID_RE = re.compile(SESSION_ID_PATTERN)


class TranscriptStore:
    """Stores the whole message sequence of a session as a single blob.

    The blob is overwritten on every save; nothing is appended in place.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._directory = helper_config.get_string_val("TRANSCRIPT_DIR", default=os.path.join("data", "transcripts"))
        self._storage_key = helper_config.get_string_val("TRANSCRIPT_STORAGE_KEY", default="mentor_chat_history")
        os.makedirs(self._directory, exist_ok=True)

    def _get_path(self, session_id: str) -> str:
        if not _SESSION_ID_RE.fullmatch(session_id or ""):
            raise ValueError(f"Invalid session id '{session_id}'")
        return os.path.join(self._directory, f"{self._storage_key}_{session_id}.json")

    def load(self, session_id: str) -> list[Message]:
        """Return the stored transcript, or an empty one if missing or unreadable."""
        path = self._get_path(session_id)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                return _MESSAGES_ADAPTER.validate_json(f.read())
        except (ValidationError, ValueError, OSError) as exc:
            self.logging.warning("Ignoring unreadable transcript for session %s: %s", session_id, exc)
            return []

    def save(self, session_id: str, messages: list[Message]) -> None:
        """Overwrite the stored transcript with ``messages``."""
        path = self._get_path(session_id)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "wb") as f:
            f.write(_MESSAGES_ADAPTER.dump_json(messages))
        os.replace(tmp_path, path)

    def clear(self, session_id: str) -> None:
        path = self._get_path(session_id)
        if os.path.exists(path):
            os.remove(path)
