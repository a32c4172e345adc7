"""Sync runner entry point.

Mirrors the blog's latest posts into the knowledge store, computing the
embeddings the retriever ranks against.

Usage:
    python -m services.knowledge_sync.knowledge_sync
"""

import asyncio
import sys

from services.knowledge_sync.SyncService import SyncService
from shared.clients.ClientManager import ClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


async def main() -> int:
    """Run one synchronisation pass. Returns the process exit code."""
    logger = setup_logging(log_file_name="sync.log")
    config = HelperConfig(logger=logger)

    cms_client = ClientManager(helper_config=config, client_type="cms").get_client()
    knowledge_client = ClientManager(helper_config=config, client_type="knowledge").get_client()
    embed_client = ClientManager(helper_config=config, client_type="embed").get_client()
    clients = [cms_client, knowledge_client, embed_client]

    try:
        for client in clients:
            try:
                await client.boot()
            except Exception as e:
                logger.error("Error booting %s client %s: %s. Aborting.", client.get_client_type().upper(), client.get_engine_name(), e)
                return 1

        for client in (cms_client, knowledge_client):
            if not await client.do_healthcheck():
                logger.error("%s client %s failed its healthcheck. Aborting.", client.get_client_type().upper(), client.get_engine_name())
                return 1

        if not embed_client.has_credentials():
            logger.warning("Embedding API key missing. Posts will be stored without embeddings.")

        sync_service = SyncService(
            helper_config=config,
            cms_client=cms_client,
            knowledge_client=knowledge_client,
            embed_client=embed_client,
        )
        try:
            report = await sync_service.do_sync()
        except Exception as e:
            logger.error("Sync aborted: %s", e)
            return 1
        return 0 if not report.failed else 2
    finally:
        for client in clients:
            await client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
