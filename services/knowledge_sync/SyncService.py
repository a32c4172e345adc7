"""Synchronisation service.

Reads the latest posts from the CMS, sanitizes them, computes embeddings for
posts that have none (or whose content changed), and upserts the records into
the knowledge store.
"""

from datetime import datetime, timezone

from shared.clients.cms.CMSClientInterface import CMSClientInterface
from shared.clients.cms.models.Post import CMSPost
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.knowledge.KnowledgeClientInterface import KnowledgeClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.text_helper import BODY_LIMIT, EXCERPT_LIMIT, sanitize, strip_tags
from shared.models.knowledge import KnowledgePost, SyncReport, compute_content_hash


def _build_record(post: CMSPost) -> KnowledgePost:
    """Turn a raw CMS post into the sanitized record stored in the knowledge store.

    The embedding is left empty and updated_at unset; both are filled by the caller.
    """
    title = strip_tags(post.title).strip()
    body = sanitize(post.content, BODY_LIMIT)
    return KnowledgePost(
        id=post.id,
        title=title,
        excerpt=sanitize(post.excerpt, EXCERPT_LIMIT),
        body=body,
        link=post.link,
        content_hash=compute_content_hash(title, body),
    )


def _needs_embedding(cached: KnowledgePost | None, record: KnowledgePost) -> bool:
    """True when the cached record is missing, has no embedding, or is stale."""
    if cached is None or not cached.has_embedding():
        return True
    # records written before hashes existed are trusted as-is
    if cached.content_hash is None:
        return False
    return cached.content_hash != record.content_hash


class SyncService:
    """Mirrors the CMS's latest posts into the knowledge store."""

    def __init__(
        self,
        helper_config: HelperConfig,
        cms_client: CMSClientInterface,
        knowledge_client: KnowledgeClientInterface,
        embed_client: EmbedClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._cms_client = cms_client
        self._knowledge_client = knowledge_client
        self._embed_client = embed_client
        self._exclude_marker = helper_config.get_string_val("SYNC_EXCLUDE_MARKER", default="除外")

    ##########################################
    ############### CORE SYNC ################
    ##########################################

    async def do_sync(self) -> SyncReport:
        """Sync the latest CMS posts into the knowledge store.

        Posts are handled one after another to stay below the embedding
        API's rate limits. A failing post is logged and counted, the run
        continues with the next one.

        Returns:
            SyncReport: Counters of the run.

        Raises:
            Exception: If the CMS listing itself cannot be fetched.
        """
        self.logging.info(
            "Syncing CMS '%s' → knowledge store '%s'",
            self._cms_client.get_engine_name(), self._knowledge_client.get_engine_name(),
        )
        posts = await self._cms_client.do_fetch_posts()
        report = SyncReport(fetched=len(posts))

        for post in posts:
            if self._exclude_marker and self._exclude_marker in post.title:
                self.logging.info("Skipping post id=%s: title carries the exclusion marker.", post.id)
                report.excluded += 1
                continue
            try:
                updated = await self._sync_post(post)
            except Exception as exc:
                self.logging.error("Sync failed for post id=%s ('%s'): %s", post.id, post.title[:60], exc)
                report.failed += 1
                continue
            if updated:
                report.updated += 1
            else:
                report.skipped += 1

        self.logging.info(
            "Sync complete: %d fetched, %d updated, %d up to date, %d excluded, %d errors.",
            report.fetched, report.updated, report.skipped, report.excluded, report.failed,
            color="green" if not report.failed else "yellow",
        )
        return report

    ##########################################
    ############## POST SYNC #################
    ##########################################

    async def _sync_post(self, post: CMSPost) -> bool:
        """Embed and upsert a single post if its cached record needs it.

        Returns:
            bool: True if the record was (re)written, False if it was up to date.

        Raises:
            Exception: If the knowledge store lookup or upsert fails.
        """
        cached = await self._knowledge_client.do_get_post(post.id)
        record = _build_record(post)

        if not _needs_embedding(cached, record):
            self.logging.debug("Post id=%s is up to date.", post.id)
            return False

        embedding = await self._embed_client.do_embed(f"{record.title}\n{record.body}")
        if embedding is None:
            self.logging.warning("No embedding for post id=%s ('%s'); storing it without one.", post.id, record.title[:60])

        record.embedding = embedding
        record.updated_at = datetime.now(timezone.utc).isoformat()
        await self._knowledge_client.do_upsert_post(record)

        self.logging.info("Synced post id=%s ('%s').", post.id, record.title[:60])
        return True
