"""Internal Pydantic models for Gemini embedContent responses."""

from pydantic import BaseModel, Field


class _ContentEmbedding(BaseModel):
    values: list[float] = Field(..., min_length=1)


class _EmbedContentResponse(BaseModel):
    embedding: _ContentEmbedding
