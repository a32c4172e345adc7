"""Operator endpoints for syncing and inspecting the post cache."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from shared.dependencies.auth import verify_api_key
from shared.models.chat import ContextRequest, ContextResponse

knowledge_router = APIRouter(prefix="/knowledge", tags=["Knowledge"], dependencies=[Depends(verify_api_key)])


@knowledge_router.post("/sync")
async def handle_sync(request: Request) -> JSONResponse:
    """Run one synchroniser pass and return its counters.

    Raises:
        HTTPException: 502 if the CMS listing could not be fetched.
    """
    sync_service = request.app.state.sync_service
    try:
        report = await sync_service.do_sync()
    except Exception as exc:
        request.app.state.logging.error("Manual sync failed: %s", exc)
        raise HTTPException(status_code=502, detail=f"Sync failed: {exc}")
    return JSONResponse(content=report.model_dump())


@knowledge_router.post("/context")
async def handle_context(request: Request, body: ContextRequest) -> JSONResponse:
    """Return the context block the retriever builds for a query."""
    context = await request.app.state.retrieval_service.do_retrieve(body.query)
    return JSONResponse(content=ContextResponse(query=body.query, context=context).model_dump())
