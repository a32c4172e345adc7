"""FastAPI authentication dependency for operator-only routes."""

import secrets

from fastapi import HTTPException, Request


async def verify_api_key(request: Request) -> None:
    """Verify the X-API-Key header against APP_API_KEY.

    Raises:
        HTTPException: 401 if the key is missing or wrong, 503 if no key is configured.
    """
    config = request.app.state.config
    try:
        expected_key = config.get_string_val("APP_API_KEY")
    except ValueError:
        raise HTTPException(status_code=503, detail="APP_API_KEY is not configured on the server.")
    provided_key = request.headers.get("X-API-Key")
    if not provided_key or not secrets.compare_digest(provided_key, expected_key):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")
