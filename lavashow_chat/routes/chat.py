"""
FastAPI routes for the chat widget.

Endpoints:
- GET /chat: Public status check for the chat path
- POST /chat: Answer a visitor message (requires x-api-key)

POST /chat flow:
1. Rate limit per client address (429 when exceeded)
2. API key check (401 when missing or invalid)
3. Request body validated by ChatRequest (422 on failure)
4. ChatService.handle_message: retrieval, pricing, Gemini, context update
5. LLM failures mapped to 500 with a visitor-safe message
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from lavashow_chat.agents.concierge.prompts import ERROR_MESSAGES
from lavashow_chat.auth.dependencies import enforce_rate_limit, verify_api_key
from lavashow_chat.schemas.chat import ChatRequest, ChatResponse, ChatStatusResponse
from lavashow_chat.services.chat_service import (
    ChatService,
    LLMRateLimitError,
    LLMServiceError,
    get_chat_service,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(
    prefix="/chat",
    tags=["chat"]
)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get(
    "",
    response_model=ChatStatusResponse,
    summary="Chat server status",
    description="Public status check used by the chat widget before it opens.",
)
async def chat_status() -> ChatStatusResponse:
    return ChatStatusResponse(
        status="OK",
        message="Lava Show chat server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.post(
    "",
    response_model=ChatResponse,
    status_code=200,
    summary="Ask the Lava Show assistant",
    description="""
    Answers a visitor question using the Lava Show knowledge base and Gemini.

    **Authentication:** Required (x-api-key header)

    **Widget Flow:**
    1. First message: send without session_id
    2. Keep the returned session_id and send it with every following message
    3. Pricing questions also return a structured `pricing` breakdown
    4. `cached` is true when the same question was answered in this session
       within the last hour
    """,
    dependencies=[Depends(enforce_rate_limit), Depends(verify_api_key)],
)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Answer one visitor message.

    Raises:
        HTTPException 500: With a visitor-safe message when Gemini fails
    """
    try:
        return await chat_service.handle_message(
            message=request.message,
            session_id=request.session_id,
            language=request.language,
        )

    except LLMRateLimitError as e:
        logger.error(f"Chat failed, LLM rate limited: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "llm_rate_limited", "details": ERROR_MESSAGES["rate_limited"]}
        )

    except LLMServiceError as e:
        logger.error(f"Chat failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "llm_error", "details": ERROR_MESSAGES["general"]}
        )
