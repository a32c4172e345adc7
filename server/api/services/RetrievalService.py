"""Retrieval service: selects the blog posts used to ground a chat answer.

Ranking falls through three tiers:
  1. cosine similarity between the query embedding and cached post embeddings
  2. keyword match of query tokens against title and body
  3. the first posts in store order
"""

import re

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.knowledge.KnowledgeClientInterface import KnowledgeClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_helper import cosine_similarity
from shared.models.knowledge import KnowledgePost, ScoredPost

SEMANTIC_TOP_K = 4
KEYWORD_TOP_K = 3
FALLBACK_TOP_K = 2
CONTEXT_SEPARATOR = "\n\n---\n\n"
STORE_UNAVAILABLE_CONTEXT = "過去のブログ記事を参照して回答してください。"

# whitespace plus ASCII and Japanese punctuation
_TOKEN_SPLIT_PATTERN = re.compile(r"[\s,、。?？!！]+")


def tokenize_query(query: str) -> list[str]:
    """Lowercase ``query`` and split it into keyword tokens longer than one character."""
    return [token for token in _TOKEN_SPLIT_PATTERN.split(query.lower()) if len(token) > 1]


def format_context(posts: list[KnowledgePost]) -> str:
    """Render posts as the context block injected into the system prompt."""
    blocks = [
        f"Title: {post.title}\nContent: {post.get_context_text()}\nURL: {post.link}"
        for post in posts
    ]
    return CONTEXT_SEPARATOR.join(blocks)


class RetrievalService:
    """Ranks cached posts against a user query and formats the winners as context."""

    def __init__(
        self,
        helper_config: HelperConfig,
        knowledge_client: KnowledgeClientInterface,
        embed_client: EmbedClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._knowledge = knowledge_client
        self._embed = embed_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_retrieve(self, query: str) -> str:
        """Build the context block for ``query``.

        Never raises: if the store cannot be read, a fixed instruction is
        returned so the generation step still runs with degraded context.
        """
        try:
            posts = await self._knowledge.do_scan_posts()
            query_embedding = await self._embed.do_embed(query)
        except Exception as exc:
            self.logging.error("Retrieval failed, answering without blog context: %s", exc)
            return STORE_UNAVAILABLE_CONTEXT

        if not posts:
            self.logging.warning("Knowledge store is empty, answering without blog context.")
            return STORE_UNAVAILABLE_CONTEXT

        selected = self.select_posts(posts, query, query_embedding)
        return format_context(selected)

    def select_posts(self, posts: list[KnowledgePost], query: str, query_embedding: list[float] | None) -> list[KnowledgePost]:
        """Apply the semantic → keyword → first-posts fallback chain."""
        if query_embedding:
            ranked = self.rank_by_similarity(posts, query_embedding)[:SEMANTIC_TOP_K]
            if ranked:
                self.logging.info(
                    "Selected %d posts by similarity for query %r (best score %.3f)",
                    len(ranked), query[:80], ranked[0].score,
                )
                return [scored.post for scored in ranked]

        matches = self.match_keywords(posts, query)[:KEYWORD_TOP_K]
        if matches:
            self.logging.info("Selected %d posts by keyword for query %r", len(matches), query[:80])
            return matches

        self.logging.info("No semantic or keyword match for query %r, using the first %d posts", query[:80], FALLBACK_TOP_K)
        return posts[:FALLBACK_TOP_K]

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def rank_by_similarity(self, posts: list[KnowledgePost], query_embedding: list[float]) -> list[ScoredPost]:
        """Score every post with an embedding and sort best first.

        Posts whose embedding has a different dimensionality than the query are
        skipped. Equal scores keep store order.
        """
        scored: list[ScoredPost] = []
        for post in posts:
            if not post.has_embedding():
                continue
            if len(post.embedding) != len(query_embedding):
                self.logging.warning(
                    "Skipping post id=%s: embedding has %d dimensions, query has %d.",
                    post.id, len(post.embedding), len(query_embedding),
                )
                continue
            scored.append(ScoredPost(post=post, score=cosine_similarity(query_embedding, post.embedding)))
        return sorted(scored, key=lambda item: item.score, reverse=True)

    def match_keywords(self, posts: list[KnowledgePost], query: str) -> list[KnowledgePost]:
        """Posts whose title or body contains at least one query token, in store order."""
        tokens = tokenize_query(query)
        if not tokens:
            return []
        matches = []
        for post in posts:
            haystack = f"{post.title}\n{post.body}".lower()
            if any(token in haystack for token in tokens):
                matches.append(post)
        return matches
