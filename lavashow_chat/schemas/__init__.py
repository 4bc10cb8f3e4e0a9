"""
Pydantic schemas for the Lava Show chat backend.

- knowledge: retrieval results (KnowledgeMatch, QueryClassification)
- context: per-session ConversationContext
- pricing: ticket price breakdowns
- chat / health: HTTP request and response contracts
"""

from .context import BookingInfo, ChatMessage, ConversationContext, ConversationState, UserPreferences
from .knowledge import KnowledgeMatch, QueryClassification, RetrievalResult
from .pricing import FamilyPackageBreakdown, GroupDiscount, PricingBreakdown, PricingCategory, PricingResult

__all__ = [
    "BookingInfo",
    "ChatMessage",
    "ConversationContext",
    "ConversationState",
    "UserPreferences",
    "KnowledgeMatch",
    "QueryClassification",
    "RetrievalResult",
    "FamilyPackageBreakdown",
    "GroupDiscount",
    "PricingBreakdown",
    "PricingCategory",
    "PricingResult",
]
