"""Endpoints the mentor widget talks to."""

from fastapi import APIRouter, Path, Request
from fastapi.responses import JSONResponse

from shared.models.chat import SESSION_ID_PATTERN, ChatRequest, ChatResponse

chat_router = APIRouter(prefix="/chat", tags=["Chat"])


@chat_router.get("/quick-questions")
async def handle_quick_questions(request: Request) -> JSONResponse:
    """Return the quick-reply suggestions shown under the transcript."""
    return JSONResponse(content={"questions": request.app.state.chat_service.get_quick_questions()})


@chat_router.get("/{session_id}")
async def handle_history(
    request: Request,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
) -> JSONResponse:
    """Return the stored transcript of a session, greeting included when new."""
    messages = await request.app.state.chat_service.get_history(session_id)
    result = ChatResponse(session_id=session_id, messages=messages)
    return JSONResponse(content=result.model_dump())


@chat_router.post("")
async def handle_chat(request: Request, body: ChatRequest) -> JSONResponse:
    """Answer a user message and return the updated transcript.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (ChatRequest): Session id and the user's message.

    Returns:
        JSONResponse: The transcript after the assistant's reply was appended.
    """
    request.app.state.logging.info("Chat message received: session=%s length=%d", body.session_id, len(body.message))
    result = await request.app.state.chat_service.do_chat(body.session_id, body.message)
    return JSONResponse(content=result.model_dump())


@chat_router.delete("/{session_id}")
async def handle_reset(
    request: Request,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
) -> JSONResponse:
    """Clear a session's transcript and reseed the reset greeting."""
    result = await request.app.state.chat_service.do_reset(session_id)
    return JSONResponse(content=result.model_dump())
