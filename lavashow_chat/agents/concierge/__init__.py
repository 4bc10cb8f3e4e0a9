"""
Concierge - Knowledge-Grounded LLM

Prompt templates and canned responses for the Lava Show virtual assistant.

Architecture:
- Pattern: Retrieval (rule-based) + single LLM call
- Model: Gemini 2.5 Flash
- Temperature: 0.7 (conversational)
- Output: Plain text, post-processed by services/response_formatter.py
"""

from lavashow_chat.agents.concierge.prompts import (
    ACKNOWLEDGEMENT_PATTERN,
    CONCIERGE_SYSTEM_PROMPT,
    ERROR_MESSAGES,
    FOLLOW_UP_BY_QUERY_TYPE,
    FOLLOW_UPS,
    GREETING_MESSAGES,
    GREETING_RESPONSES,
    TERMINOLOGY,
    FollowUp,
    build_concierge_system_prompt,
    build_concierge_user_prompt,
    find_offered_follow_up,
    is_acknowledgement,
    is_greeting,
    resolve_language,
)

__all__ = [
    "ACKNOWLEDGEMENT_PATTERN",
    "CONCIERGE_SYSTEM_PROMPT",
    "ERROR_MESSAGES",
    "FOLLOW_UP_BY_QUERY_TYPE",
    "FOLLOW_UPS",
    "GREETING_MESSAGES",
    "GREETING_RESPONSES",
    "TERMINOLOGY",
    "FollowUp",
    "build_concierge_system_prompt",
    "build_concierge_user_prompt",
    "find_offered_follow_up",
    "is_acknowledgement",
    "is_greeting",
    "resolve_language",
]
