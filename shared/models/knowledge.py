"""Pydantic models for blog posts cached in the knowledge store."""

import hashlib
import math

from pydantic import BaseModel, field_validator


def compute_content_hash(title: str, body: str) -> str:
    """SHA-256 hex digest over the sanitized title and body of a post."""
    return hashlib.sha256(f"{title}\n{body}".encode("utf-8")).hexdigest()


class KnowledgePost(BaseModel):
    """A blog post as cached in the knowledge store.

    Attributes:
        id:           Post identifier assigned by the CMS, as a string.
        title:        Sanitized post title.
        excerpt:      Sanitized excerpt, at most 200 characters plus ellipsis.
        body:         Sanitized body, at most 1000 characters plus ellipsis.
        link:         Public URL of the post.
        embedding:    Cached embedding of title + body. None until computed or
                      when the embedding call failed.
        updated_at:   ISO-8601 timestamp of the last upsert.
        content_hash: Digest of title + body at the time the embedding was
                      computed. A differing digest marks the embedding stale.
    """

    id: str
    title: str = ""
    excerpt: str = ""
    body: str = ""
    link: str = ""
    embedding: list[float] | None = None
    updated_at: str | None = None
    content_hash: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def get_context_text(self) -> str:
        """Body when present, else the excerpt."""
        return self.body or self.excerpt


class ScoredPost(BaseModel):
    """A cached post with its cosine similarity to the query."""

    post: KnowledgePost
    score: float = 0.0

    @field_validator("score", mode="before")
    @classmethod
    def _nan_to_zero(cls, value):
        if value is None:
            return 0.0
        if isinstance(value, float) and math.isnan(value):
            return 0.0
        return value


class SyncReport(BaseModel):
    """Outcome counters of one synchroniser run."""

    fetched: int = 0
    updated: int = 0
    skipped: int = 0
    excluded: int = 0
    failed: int = 0
