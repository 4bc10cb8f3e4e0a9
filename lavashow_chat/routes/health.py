"""
Health check routes for the Lava Show chat backend.

These endpoints are PUBLIC (no API key required) and provide simple status
checks for load balancers, monitoring, and deployment verification.

- GET /health: liveness ({"status": "ok"})
- GET /: status plus non-secret configuration flags
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from lavashow_chat.config import settings
from lavashow_chat.schemas.chat import ServiceStatusResponse
from lavashow_chat.schemas.health import HealthResponse
from lavashow_chat.utils.logging import get_logger

logger = get_logger(__name__)

# Create router with no prefix (mounted at root level in main.py)
router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint (no authentication required). "
        "Returns a simple status indicator for monitoring and load balancing."
    ),
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "status": "ok"
        }
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok")


@router.get(
    "/",
    response_model=ServiceStatusResponse,
    summary="Service status",
    description="Reports whether the Gemini key and the widget API key are configured.",
    status_code=200,
)
async def service_status() -> ServiceStatusResponse:
    return ServiceStatusResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        llm_configured=bool(settings.GOOGLE_API_KEY),
        api_key_configured=bool(settings.API_KEY),
    )
