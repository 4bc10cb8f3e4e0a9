"""
Pydantic schemas for the chat endpoints.

These models define the request/response contracts between the chat widget
and the backend.
"""

from typing import Optional

from pydantic import BaseModel, Field

from lavashow_chat.schemas.pricing import PricingResult


# ============================================================================
# REQUEST MODELS
# ============================================================================

class ChatRequest(BaseModel):
    """
    A visitor message sent by the chat widget.

    The widget keeps the returned session_id and sends it back with every
    following message so the conversation context is preserved.
    """
    message: str = Field(
        ...,
        description="Visitor's natural-language question",
        min_length=1,
        max_length=2000,
        examples=["How much is the premium experience for 2 adults?"]
    )
    session_id: Optional[str] = Field(
        None,
        description="Session identifier returned by a previous response",
        max_length=200,
        examples=["0b7c8f0e-5d7e-4f1e-9d5a-2c1f4f0d9a11"]
    )
    language: Optional[str] = Field(
        None,
        description="Preferred answer language as a locale or language code",
        max_length=20,
        examples=["en", "is-IS", "de"]
    )


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ChatResponse(BaseModel):
    """Assistant answer for one visitor message."""
    message: str = Field(..., description="Post-processed assistant answer")
    session_id: str = Field(..., description="Session identifier to reuse")
    query_type: Optional[str] = Field(
        None,
        description="Query Classifier label (None for greetings and follow-ups)",
        examples=["pricing", "location"]
    )
    pricing: Optional[PricingResult] = Field(
        None,
        description="Ticket price breakdown, present for pricing questions"
    )
    cached: bool = Field(
        False,
        description="True when the answer was served from the response cache"
    )


class ChatStatusResponse(BaseModel):
    """Response for GET /chat."""
    status: str = Field("OK", examples=["OK"])
    message: str = Field(..., examples=["Lava Show chat server is running"])
    timestamp: str


class ServiceStatusResponse(BaseModel):
    """Response for GET / including non-secret configuration flags."""
    status: str = Field("OK", examples=["OK"])
    timestamp: str
    llm_configured: bool
    api_key_configured: bool
