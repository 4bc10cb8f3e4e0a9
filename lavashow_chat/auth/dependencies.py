"""
FastAPI dependency functions for request access control.

- verify_api_key: the chat widget sends a shared secret in the x-api-key header
- enforce_rate_limit: fixed-window request limit per client address
"""

import logging
import secrets
from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from lavashow_chat.auth.rate_limit import get_rate_limiter
from lavashow_chat.config import settings

logger = logging.getLogger(__name__)


async def verify_api_key(x_api_key: Annotated[str | None, Header()] = None) -> None:
    """
    Verify the shared API key sent by the chat widget.

    Args:
        x_api_key: Value of the x-api-key header

    Raises:
        HTTPException: 401 if the key is missing or does not match API_KEY

    Usage:
        @router.post("/chat", dependencies=[Depends(verify_api_key)])
        async def chat(...):
            pass
    """
    if not x_api_key:
        logger.warning("Missing x-api-key header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "details": "Missing API key"}
        )

    if not settings.API_KEY or not secrets.compare_digest(x_api_key, settings.API_KEY):
        logger.warning("Invalid API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "details": "Invalid API key"}
        )


async def enforce_rate_limit(request: Request) -> None:
    """
    Reject the request with 429 once the client address used up its window.

    Raises:
        HTTPException: 429 with a Retry-After header
    """
    client_id = request.client.host if request.client else "unknown"
    limiter = get_rate_limiter()

    allowed, retry_after = limiter.hit(client_id)
    if not allowed:
        logger.warning(f"Rate limit exceeded for client {client_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "rate_limited",
                "details": "Too many requests, please try again later."
            },
            headers={"Retry-After": str(retry_after)}
        )
