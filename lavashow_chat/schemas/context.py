"""
Per-session conversation context.

A ConversationContext is created lazily on a session's first message and lives
in the session store until it has been idle for one cache TTL window.
It is mutated in place by services.context_service.
"""

import time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single message of the conversation history."""
    role: Literal["user", "assistant"]
    content: str


class BookingInfo(BaseModel):
    """
    Booking intent inferred from visitor messages.

    Every field is write-once: the first detected value wins and is never
    overwritten by later messages.
    """
    group_size: Optional[int] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    package_type: Optional[Literal["classic", "premium"]] = None
    special_requests: Optional[str] = None

    def has_partial_booking(self) -> bool:
        return bool(self.group_size or self.preferred_date or self.package_type)


class UserPreferences(BaseModel):
    """Interests (append-only, deduplicated) and recent query types."""
    interests: List[str] = Field(default_factory=list)
    previous_queries: List[str] = Field(
        default_factory=list,
        description="Last query-type labels, most recent first"
    )


class ConversationState(BaseModel):
    current_topic: Optional[str] = None
    topic_history: List[str] = Field(default_factory=list)
    last_query_type: Optional[str] = None


class ConversationContext(BaseModel):
    """Mutable state for one chat session."""
    messages: List[ChatMessage] = Field(default_factory=list)
    booking_info: BookingInfo = Field(default_factory=BookingInfo)
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
    conversation: ConversationState = Field(default_factory=ConversationState)
    last_interaction: float = Field(default_factory=time.time)

    conversation_started: bool = False
    offered_follow_up: Optional[str] = None
    pending_follow_up: Optional[str] = None
    last_response: Optional[str] = None
