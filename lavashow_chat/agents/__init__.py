"""
AI Components for the Lava Show chat backend.

1. Concierge (Knowledge-Grounded LLM)
   - Single Gemini call per visitor question
   - Knowledge snippets selected by the rule-based matcher are embedded
     in the system prompt; the model answers ONLY from them
   - Service layer: lavashow_chat/services/chat_service.py
   - Prompt templates: lavashow_chat/agents/concierge/prompts.py
"""

from lavashow_chat.agents.concierge import (
    CONCIERGE_SYSTEM_PROMPT,
    build_concierge_system_prompt,
    build_concierge_user_prompt,
)

__all__ = [
    "CONCIERGE_SYSTEM_PROMPT",
    "build_concierge_system_prompt",
    "build_concierge_user_prompt",
]
