"""FastAPI application entry point for the blog mentor bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.api.routers.ChatRouter import chat_router
from server.api.routers.KnowledgeRouter import knowledge_router
from server.api.services.ChatService import ChatService
from server.api.services.RetrievalService import RetrievalService
from services.knowledge_sync.SyncService import SyncService
from shared.clients.ClientManager import ClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.storage.TranscriptStore import TranscriptStore

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = logging
    app.state.config = HelperConfig(logger=logging)

    cms_client = ClientManager(helper_config=app.state.config, client_type="cms").get_client()
    knowledge_client = ClientManager(helper_config=app.state.config, client_type="knowledge").get_client()
    embed_client = ClientManager(helper_config=app.state.config, client_type="embed").get_client()
    llm_client = ClientManager(helper_config=app.state.config, client_type="llm").get_client()
    clients = [cms_client, knowledge_client, embed_client, llm_client]

    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    logging.info("All clients booted successfully.")

    # unhealthy backends are logged; the chat still answers with degraded context
    for client in clients:
        if client.has_credentials():
            await client.do_healthcheck()

    # Wire up services
    app.state.sync_service = SyncService(
        helper_config=app.state.config,
        cms_client=cms_client,
        knowledge_client=knowledge_client,
        embed_client=embed_client,
    )
    app.state.retrieval_service = RetrievalService(
        helper_config=app.state.config,
        knowledge_client=knowledge_client,
        embed_client=embed_client,
    )
    app.state.chat_service = ChatService(
        helper_config=app.state.config,
        retrieval_service=app.state.retrieval_service,
        llm_client=llm_client,
        transcript_store=TranscriptStore(helper_config=app.state.config),
    )

    if app.state.config.get_bool_val("SYNC_ON_STARTUP", default=True):
        try:
            await app.state.sync_service.do_sync()
        except Exception as exc:
            logging.error("Startup sync failed: %s. Serving with the cached posts.", exc)

    logging.info("Blog mentor bridge ready.", color="green")
    yield

    logging.info("Shutting down, closing all clients...")
    for client in clients:
        await client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="Blog Mentor Bridge",
    description=(
        "Chat backend for a blog's AI mentor widget. Answers are grounded in the "
        "blog's posts, ranked by embedding similarity with keyword fallback."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(knowledge_router)


@app.get("/health", tags=["Health"])
async def health() -> dict:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting Blog Mentor Bridge v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", os.getcwd()),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
