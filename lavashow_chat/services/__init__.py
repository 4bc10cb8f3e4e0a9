"""
Service layer for the Lava Show chat backend.

Retrieval core (pure, synchronous):
- synonym_service: canonical term expansion
- query_classifier: single-label query type
- knowledge_service: multi-label knowledge matching and retrieve()
- pricing_service: ticket price breakdowns
- context_service: conversation context updates

Orchestration:
- chat_service: greeting/follow-up/cache handling and the Gemini call
- session_store: TTL stores, session locks and the sweep task
- response_formatter: answer post-processing
"""

from .context_service import record_exchange, update_context, update_context_from_message
from .knowledge_service import match_knowledge, retrieve, validate_topic_rules
from .pricing_service import calculate_pricing, compute_pricing
from .query_classifier import classify_query
from .synonym_service import expand_terms

__all__ = [
    "expand_terms",
    "classify_query",
    "match_knowledge",
    "retrieve",
    "validate_topic_rules",
    "calculate_pricing",
    "compute_pricing",
    "update_context_from_message",
    "update_context",
    "record_exchange",
]
