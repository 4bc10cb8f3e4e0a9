"""
Conversation Context updater.

Two entry points mutate a session's ConversationContext in place:

- update_context_from_message(): after retrieval, records the topic, booking
  intent, interests and query-type bucket of a visitor message
- record_exchange(): after an answer is produced, appends the turn to the
  bounded message history and tracks follow-up offers

Booking fields are write-once: the first detected value wins.
"""

import logging
import re
import time
from typing import List, Optional

from lavashow_chat.agents.concierge.prompts import find_offered_follow_up
from lavashow_chat.knowledge.rules import INTEREST_KEYWORDS
from lavashow_chat.schemas.context import ChatMessage, ConversationContext
from lavashow_chat.schemas.knowledge import KnowledgeMatch
from lavashow_chat.utils.constants import (
    MAX_CONTEXT_MESSAGES,
    MAX_PREVIOUS_QUERIES,
    MAX_TOPIC_HISTORY,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DETECTORS
# =============================================================================

GROUP_SIZE_PATTERNS = (
    re.compile(r'\b(?:group|party|team|family) of (\d+)\b'),
    re.compile(r'\b(\d+)\s*(?:people|persons|guests|visitors|pax|of us)\b'),
    re.compile(r'\b(\d+)\s*tickets?\b'),
)

_MONTH = (
    r'(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|'
    r'aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)'
)
_WEEKDAY = r'(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)'
DATE_PATTERN = re.compile(
    r'\b(today|tonight|tomorrow|this weekend|next week|next ' + _WEEKDAY + r'|' + _WEEKDAY
    + r'|\d{1,2}(?:st|nd|rd|th)?\s+(?:of\s+)?' + _MONTH
    + r'|' + _MONTH + r'\s+\d{1,2}(?:st|nd|rd|th)?'
    + r'|\d{1,2}/\d{1,2}(?:/\d{2,4})?)\b'
)
TIME_PATTERN = re.compile(
    r'\b(\d{1,2}(?::\d{2})?\s*(?:am|pm)|\d{1,2}:\d{2}|morning|afternoon|evening|noon)\b'
)
PACKAGE_PATTERNS = (
    ('premium', re.compile(r'premium|vip|backstage|\bs[eé]r\b')),
    ('classic', re.compile(r'classic|\bsaman\b')),
)
SPECIAL_REQUEST_PATTERN = re.compile(
    r'\b(wheelchair|stroller|pram|hearing aid|allerg\w*|dietary|vegan|vegetarian|'
    r'birthday|anniversary|proposal)\b'
)

# Query-type buckets, first match wins
QUERY_BUCKETS = (
    ('pricing', re.compile(r'price|cost|how much|fee|discount|cheap|expensive')),
    ('booking', re.compile(r'book|reserv|ticket|availab|schedule|cancel|when')),
    ('location', re.compile(r'where|location|address|direction|reykjav|\bvik\b|\bvík\b')),
    ('safety', re.compile(r'safe|danger|emergency|protect|risk')),
    ('educational', re.compile(r'science|how does|temperature|lava|volcan|melt|learn')),
)
DEFAULT_BUCKET = 'general'


def _detect_group_size(message: str) -> Optional[int]:
    for pattern in GROUP_SIZE_PATTERNS:
        match = pattern.search(message)
        if match:
            size = int(match.group(1))
            if size > 0:
                return size
    return None


def _detect_package(message: str) -> Optional[str]:
    for package, pattern in PACKAGE_PATTERNS:
        if pattern.search(message):
            return package
    return None


def _search_group(pattern: re.Pattern, message: str) -> Optional[str]:
    match = pattern.search(message)
    return match.group(1) if match else None


def classify_bucket(message: str) -> str:
    """Coarse query-type bucket stored as conversation.last_query_type."""
    for bucket, pattern in QUERY_BUCKETS:
        if pattern.search(message):
            return bucket
    return DEFAULT_BUCKET


# =============================================================================
# UPDATES
# =============================================================================

def _update_booking_info(context: ConversationContext, message: str) -> None:
    booking = context.booking_info

    if booking.group_size is None:
        booking.group_size = _detect_group_size(message)
    if booking.preferred_date is None:
        booking.preferred_date = _search_group(DATE_PATTERN, message)
    if booking.preferred_time is None:
        booking.preferred_time = _search_group(TIME_PATTERN, message)
    if booking.package_type is None:
        booking.package_type = _detect_package(message)
    if booking.special_requests is None:
        booking.special_requests = _search_group(SPECIAL_REQUEST_PATTERN, message)


def _update_interests(context: ConversationContext, message: str) -> None:
    interests = context.user_preferences.interests
    for interest, keywords in INTEREST_KEYWORDS.items():
        if interest not in interests and any(keyword in message for keyword in keywords):
            interests.append(interest)


def update_context_from_message(
    context: ConversationContext,
    message: str,
    knowledge_matches: List[KnowledgeMatch],
) -> ConversationContext:
    """
    Record what a visitor message reveals about the session.

    Args:
        context: Session context (mutated in place)
        message: Visitor message (any case)
        knowledge_matches: Matches for the message, highest priority first

    Returns:
        The same context object
    """
    text = message.lower()
    conversation = context.conversation

    if knowledge_matches:
        conversation.current_topic = knowledge_matches[0].type
        conversation.topic_history.append(conversation.current_topic)
        del conversation.topic_history[:-MAX_TOPIC_HISTORY]

    _update_booking_info(context, text)
    _update_interests(context, text)

    bucket = classify_bucket(text)
    conversation.last_query_type = bucket
    previous_queries = context.user_preferences.previous_queries
    previous_queries.insert(0, bucket)
    del previous_queries[MAX_PREVIOUS_QUERIES:]

    context.last_interaction = time.time()

    logger.debug(
        f"Context updated: topic={conversation.current_topic}, "
        f"query_type={bucket}, interests={context.user_preferences.interests}"
    )
    return context


# Outbound entry point used by the chat layer
update_context = update_context_from_message


def record_exchange(
    context: ConversationContext,
    user_message: str,
    assistant_message: str,
) -> ConversationContext:
    """
    Append one question/answer turn and track follow-up offers.

    An offer is only valid for the next visitor message: an answer that does
    not contain a follow-up trigger clears any previous offer.
    """
    context.messages.append(ChatMessage(role="user", content=user_message))
    context.messages.append(ChatMessage(role="assistant", content=assistant_message))
    del context.messages[:-MAX_CONTEXT_MESSAGES]

    follow_up = find_offered_follow_up(assistant_message)
    context.offered_follow_up = follow_up.trigger if follow_up else None
    context.pending_follow_up = follow_up.key if follow_up else None

    context.last_response = assistant_message
    context.conversation_started = True
    context.last_interaction = time.time()
    return context


def new_context() -> ConversationContext:
    """Create the context for a session's first message."""
    return ConversationContext()
