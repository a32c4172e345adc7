"""Internal Pydantic models for Gemini generateContent responses."""

from pydantic import BaseModel, Field


class _Part(BaseModel):
    text: str | None = None


class _Content(BaseModel):
    parts: list[_Part] = Field(default_factory=list)
    role: str | None = None


class _Candidate(BaseModel):
    content: _Content | None = None
    finishReason: str | None = None


class _GenerateContentResponse(BaseModel):
    candidates: list[_Candidate] = Field(default_factory=list)
