"""Pydantic models for the chat widget API."""

from typing import Literal

from pydantic import BaseModel, Field

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


class Message(BaseModel):
    """A single transcript entry."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Incoming message from the widget."""

    session_id: str = Field(..., pattern=SESSION_ID_PATTERN)
    message: str


class ChatResponse(BaseModel):
    """The full transcript after the request was handled."""

    session_id: str
    messages: list[Message]


class ContextRequest(BaseModel):
    """Debug request for the context block a query would receive."""

    query: str


class ContextResponse(BaseModel):
    query: str
    context: str
