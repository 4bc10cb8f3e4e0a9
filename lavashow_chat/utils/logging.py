"""
Logging utilities for the Lava Show chat backend.

Provides standardized logger configuration.

RULES:
- NEVER log the GOOGLE_API_KEY or the widget API_KEY
- NEVER log full visitor messages; log a short preview instead (see preview())

Acceptable logging:
- High-level events (e.g., "Knowledge matches: 3", "Using cached response")
- Classification and pricing decisions
- LLM retry attempts and sanitized error messages
"""

import logging
from typing import Optional

PREVIEW_LENGTH = 50


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from lavashow_chat.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def preview(text: Optional[str], length: int = PREVIEW_LENGTH) -> str:
    """Return a truncated, log-safe preview of visitor text."""
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + "..."
