"""Chat service: the server side of the mentor widget.

Keeps a linear, append-only transcript per session, grounds each answer in
the posts picked by RetrievalService and asks the generation backend for the
reply.
"""

import asyncio

from server.api.services.RetrievalService import RetrievalService
from server.api.services.prompts import (
    APOLOGY_MESSAGE,
    GREETING_MESSAGE,
    QUICK_QUESTIONS,
    RESET_MESSAGE,
    SETUP_NOTICE,
    build_system_prompt,
)
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse, Message
from shared.storage.TranscriptStore import TranscriptStore


class ChatService:
    """Orchestrates transcript persistence, retrieval and generation for one message."""

    def __init__(
        self,
        helper_config: HelperConfig,
        retrieval_service: RetrievalService,
        llm_client: LLMClientInterface,
        transcript_store: TranscriptStore,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._retrieval = retrieval_service
        self._llm = llm_client
        self._transcripts = transcript_store

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_chat(self, session_id: str, text: str) -> ChatResponse:
        """Answer ``text`` and return the updated transcript.

        Blank input leaves the transcript untouched. Without generation
        credentials only the setup notice is appended. Generation failures
        append an apology instead of raising.
        """
        messages = await self.get_history(session_id)
        if not text.strip():
            return ChatResponse(session_id=session_id, messages=messages)

        if not self._llm.has_credentials():
            self.logging.warning("Generation API key missing, answering session %s with the setup notice.", session_id)
            messages.append(Message(role="assistant", content=SETUP_NOTICE))
            await self._save(session_id, messages)
            return ChatResponse(session_id=session_id, messages=messages)

        messages.append(Message(role="user", content=text))
        await self._save(session_id, messages)

        knowledge = await self._retrieval.do_retrieve(text)
        try:
            reply = await self._llm.do_chat(build_system_prompt(knowledge), messages)
            messages.append(Message(role="assistant", content=reply))
        except Exception as exc:
            self.logging.error("Generation failed for session %s: %s", session_id, exc)
            messages.append(Message(role="assistant", content=APOLOGY_MESSAGE))

        await self._save(session_id, messages)
        return ChatResponse(session_id=session_id, messages=messages)

    async def get_history(self, session_id: str) -> list[Message]:
        """Stored transcript, seeded with the greeting when empty."""
        messages = await asyncio.to_thread(self._transcripts.load, session_id)
        if not messages:
            messages = [Message(role="assistant", content=GREETING_MESSAGE)]
        return messages

    async def do_reset(self, session_id: str) -> ChatResponse:
        """Clear the transcript and reseed it with the reset greeting."""
        await asyncio.to_thread(self._transcripts.clear, session_id)
        messages = [Message(role="assistant", content=RESET_MESSAGE)]
        await self._save(session_id, messages)
        self.logging.info("Transcript of session %s reset.", session_id)
        return ChatResponse(session_id=session_id, messages=messages)

    def get_quick_questions(self) -> list[str]:
        return list(QUICK_QUESTIONS)

    async def _save(self, session_id: str, messages: list[Message]) -> None:
        # file I/O off the event loop
        await asyncio.to_thread(self._transcripts.save, session_id, list(messages))
