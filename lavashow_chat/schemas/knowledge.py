"""
Pydantic schemas for knowledge retrieval results.

These models are produced per request by the retrieval core and are never
persisted. They are embedded in the prompt sent to the LLM.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class KnowledgeMatch(BaseModel):
    """
    A topic-tagged snippet of the knowledge document selected for a message.

    Priority is a coarse relevance signal used to order and trim matches,
    not a strict score. Ties and overlaps are expected.
    """
    type: str = Field(
        ...,
        description="Topic label of the match (usually a knowledge document key)",
        examples=["safety_protocols", "location_link_vik"]
    )
    content: Any = Field(
        ...,
        description="Knowledge document content: prose, nested mapping or list"
    )
    priority: int = Field(
        ...,
        description="Higher values are more relevant"
    )
    context: Optional[str] = Field(
        None,
        description="Why a context-derived match was added",
        examples=["Based on your interest in volcanic science"]
    )


class QueryClassification(BaseModel):
    """Single-label query type with a confidence in [0, 1]."""
    type: str = Field(
        "general",
        description="Query type label",
        examples=["pricing", "booking", "general"]
    )
    confidence: float = Field(
        0.0,
        ge=0.0,
        le=1.0,
        description="Matched substring length divided by message length"
    )


class RetrievalResult(BaseModel):
    """Joint result of the top-level retrieval entry point."""
    relevant_info: List[KnowledgeMatch] = Field(
        default_factory=list,
        description="Matches sorted by descending priority"
    )
    query_type: str = Field(
        "general",
        description="Query Classifier label for the message"
    )
