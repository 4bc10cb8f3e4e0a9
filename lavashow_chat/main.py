"""
FastAPI application entry point for the Lava Show chat backend.

This module creates the FastAPI app instance, registers all routers and
manages the background sweep of session contexts and cached answers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lavashow_chat.auth.rate_limit import get_rate_limiter
from lavashow_chat.config import settings
from lavashow_chat.routes.chat import router as chat_router
from lavashow_chat.routes.health import router as health_router
from lavashow_chat.services.chat_service import get_chat_service
from lavashow_chat.services.knowledge_service import validate_topic_rules
from lavashow_chat.services.session_store import SweepScheduler
from lavashow_chat.utils.logging import preview

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _sweep_expired() -> None:
    removed = get_chat_service().sweep()
    get_rate_limiter().sweep()
    logger.info(f"Periodic sweep removed {removed} expired entries")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: validate knowledge key paths, start the store sweep.
    Shutdown: stop the sweep task.
    """
    validate_topic_rules()

    scheduler = SweepScheduler(_sweep_expired, interval=settings.CACHE_TTL_SECONDS)
    scheduler.start()

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Gemini API key configured: {bool(settings.GOOGLE_API_KEY)}")
    logger.info(f"API key configured: {bool(settings.API_KEY)}")
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")
    logger.info(
        f"Rate limiting: {settings.RATE_LIMIT_WINDOW_MINUTES} minutes, "
        f"{settings.RATE_LIMIT_MAX_REQUESTS} requests"
    )

    try:
        yield
    finally:
        await scheduler.stop()
        logger.info("Store sweep stopped")


# Create FastAPI app
app = FastAPI(
    title="Lava Show Chat API",
    description="Chat middleware answering Lava Show visitor questions with Gemini",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


def _jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-JSON context values stringified."""
    return [
        {key: (str(value) if key == "ctx" else value) for key, value in error.items()}
        for error in exc.errors()
    ]


# Custom validation error handler to log detailed errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log detailed validation errors for debugging.

    This helps diagnose 422 errors from the chat widget.
    """
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )
    logger.error(f"Request body preview: {preview(str(await request.body()))}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": _jsonable_errors(exc),
        }
    )


# Configure CORS from settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "x-api-key"],
)

# Register routers
app.include_router(health_router)
app.include_router(chat_router)

logger.info("FastAPI app initialized successfully")
