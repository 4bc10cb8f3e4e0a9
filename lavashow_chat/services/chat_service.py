"""
Chat Service - Knowledge-grounded answers with Gemini

Handles one visitor message end to end.

Flow (handle_message):
1. Response cache lookup (key: "<session_id>:<normalized message>")
2. Under the session lock:
   a. Bare greeting -> canned greeting (no LLM call)
   b. Acknowledgement of an offered follow-up -> templated answer (no LLM call)
   c. Retrieval (synonyms -> classifier -> knowledge matcher)
   d. Pricing breakdown for pricing questions
   e. Gemini call with timeout, retries and exponential backoff
   f. Post-processing (terminology, paragraphs, follow-up offer)
   g. Context update and store, response cache write

Architecture:
- Model: Gemini 2.5 Flash (configurable via GEMINI_MODEL)
- API: Google Gen AI Python SDK (google-genai), async client
- Temperature: 0.7 (conversational)
- Stores: injected TTLStore instances, swept by a background task
"""

import asyncio
import logging
import random
import time
import uuid
from functools import lru_cache
from typing import List, Optional

from google import genai
from google.genai import errors, types

from lavashow_chat.agents.concierge.prompts import (
    FOLLOW_UP_BY_QUERY_TYPE,
    FOLLOW_UPS,
    GREETING_RESPONSES,
    build_concierge_system_prompt,
    build_concierge_user_prompt,
    is_acknowledgement,
    is_greeting,
    resolve_language,
)
from lavashow_chat.config import settings
from lavashow_chat.schemas.chat import ChatResponse
from lavashow_chat.schemas.context import ConversationContext
from lavashow_chat.services.context_service import new_context, record_exchange, update_context
from lavashow_chat.services.knowledge_service import retrieve
from lavashow_chat.services.pricing_service import compute_pricing
from lavashow_chat.services.response_formatter import (
    enforce_terminology,
    format_paragraphs,
    get_max_tokens,
    render_follow_up,
)
from lavashow_chat.services.session_store import InMemoryTTLStore, SessionLocks, TTLStore, sweep_all
from lavashow_chat.utils.logging import preview

logger = logging.getLogger(__name__)

LLM_TEMPERATURE = 0.7
# Prior messages sent with each question (whole user/assistant turns)
PROMPT_HISTORY_MESSAGES = 4
RATE_LIMIT_STATUS = 429

# Initialize Gemini client (lazy initialization)
_gemini_client = None


# =============================================================================
# ERRORS
# =============================================================================

class LLMServiceError(Exception):
    """The LLM did not produce an answer after all retries."""


class LLMRateLimitError(LLMServiceError):
    """The LLM provider rejected the request with a rate limit."""


# =============================================================================
# GEMINI CLIENT
# =============================================================================

def _get_gemini_client():
    """
    Lazy initialization of Gemini client.
    Uses the Google Gen AI SDK.
    """
    global _gemini_client

    if _gemini_client is not None:
        return _gemini_client

    if not settings.GOOGLE_API_KEY:
        logger.warning(
            "GOOGLE_API_KEY not configured. Chat answers will not work. "
            "Please set GOOGLE_API_KEY in your .env file."
        )
        return None

    _gemini_client = genai.Client(api_key=settings.GOOGLE_API_KEY)
    logger.info("Gemini client initialized successfully for chat")
    return _gemini_client


def _is_rate_limit(error: Exception) -> bool:
    return isinstance(error, errors.APIError) and error.code == RATE_LIMIT_STATUS


def _build_contents(context: ConversationContext, user_prompt: str) -> List[types.Content]:
    history = context.messages[-PROMPT_HISTORY_MESSAGES:]
    contents = [
        types.Content(
            role="user" if message.role == "user" else "model",
            parts=[types.Part(text=message.content)],
        )
        for message in history
    ]
    contents.append(types.Content(role="user", parts=[types.Part(text=user_prompt)]))
    return contents


async def generate_answer(
    system_prompt: str,
    contents: List[types.Content],
    max_output_tokens: int,
) -> str:
    """
    Call Gemini with a timeout and exponential backoff.

    Up to LLM_MAX_RETRIES attempts; the delay doubles after each failure
    starting at LLM_INITIAL_RETRY_DELAY_SECONDS.

    Raises:
        LLMRateLimitError: If the last failure was a provider rate limit
        LLMServiceError: For any other failure after all retries
    """
    client = _get_gemini_client()
    if client is None:
        raise LLMServiceError("Gemini client not available")

    config = types.GenerateContentConfig(
        system_instruction=system_prompt,
        temperature=LLM_TEMPERATURE,
        max_output_tokens=max_output_tokens,
    )

    max_retries = settings.LLM_MAX_RETRIES
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=settings.GEMINI_MODEL,
                    contents=contents,
                    config=config,
                ),
                timeout=settings.LLM_TIMEOUT_SECONDS,
            )
            text = response.text
            if not text:
                raise LLMServiceError("Empty response from Gemini API")
            return text

        except Exception as e:
            last_error = e
            logger.error(
                f"Gemini request failed (attempt {attempt}/{max_retries}): "
                f"{type(e).__name__}: {e}"
            )
            if attempt == max_retries:
                break
            delay = settings.LLM_INITIAL_RETRY_DELAY_SECONDS * (2 ** (attempt - 1))
            logger.info(f"Retrying Gemini request in {delay:.1f}s")
            await asyncio.sleep(delay)

    if last_error is not None and _is_rate_limit(last_error):
        raise LLMRateLimitError(f"Rate limited after {max_retries} attempts") from last_error
    raise LLMServiceError(f"Failed after {max_retries} attempts: {last_error}") from last_error


# =============================================================================
# CHAT SERVICE
# =============================================================================

def _cache_key(session_id: str, message: str) -> str:
    return f"{session_id}:{message.lower().strip()}"


def _with_follow_up_offer(answer: str, query_type: str) -> str:
    key = FOLLOW_UP_BY_QUERY_TYPE.get(query_type)
    if key is None:
        return answer
    trigger = FOLLOW_UPS[key].trigger
    if trigger in answer:
        return answer
    return f"{answer}\n\n{trigger}"


class ChatService:
    """
    Chat orchestration over injected stores.

    Args:
        sessions: Store of ConversationContext by session id
        responses: Store of ChatResponse by cache key
        ttl: Entry lifetime in seconds for both stores
        locks: Per-session locks (created when omitted)
    """

    def __init__(
        self,
        sessions: TTLStore,
        responses: TTLStore,
        ttl: float,
        locks: Optional[SessionLocks] = None,
    ):
        self.sessions = sessions
        self.responses = responses
        self.ttl = ttl
        self.locks = locks if locks is not None else SessionLocks()

    def _save(self, session_id: str, context: ConversationContext) -> None:
        self.sessions.set(session_id, context, self.ttl)

    async def handle_message(
        self,
        message: str,
        session_id: Optional[str] = None,
        language: Optional[str] = None,
    ) -> ChatResponse:
        """
        Answer one visitor message.

        Raises:
            LLMRateLimitError / LLMServiceError: From the Gemini call
        """
        session_id = session_id or f"session_{uuid.uuid4().hex}"
        logger.info(f"Incoming message for {session_id}: '{preview(message)}'")

        cache_key = _cache_key(session_id, message)
        cached = self.responses.get(cache_key)
        if cached is not None:
            logger.info("Using cached response")
            return cached.model_copy(update={"cached": True})

        async with self.locks.get(session_id):
            context = self.sessions.get(session_id) or new_context()

            if is_greeting(message):
                greeting = random.choice(GREETING_RESPONSES)
                record_exchange(context, message, greeting)
                self._save(session_id, context)
                return ChatResponse(message=greeting, session_id=session_id)

            if context.pending_follow_up and is_acknowledgement(message):
                follow_up = FOLLOW_UPS.get(context.pending_follow_up)
                if follow_up is not None:
                    logger.info(f"Answering accepted follow-up '{follow_up.key}'")
                    answer = format_paragraphs(render_follow_up(follow_up))
                    record_exchange(context, message, answer)
                    self._save(session_id, context)
                    return ChatResponse(message=answer, session_id=session_id)

            retrieval = retrieve(message, context)
            logger.info(
                f"Knowledge matches: {len(retrieval.relevant_info)} "
                f"{[info.type for info in retrieval.relevant_info]}"
            )

            pricing = None
            if retrieval.query_type == "pricing":
                pricing = compute_pricing(message, context)

            system_prompt = build_concierge_system_prompt(
                retrieval.relevant_info,
                language=resolve_language(language),
            )
            user_prompt = build_concierge_user_prompt(
                message,
                pricing=pricing.model_dump() if pricing else None,
            )

            try:
                raw_answer = await generate_answer(
                    system_prompt,
                    _build_contents(context, user_prompt),
                    get_max_tokens(message),
                )
            except LLMServiceError:
                context.last_interaction = time.time()
                self._save(session_id, context)
                raise

            answer = format_paragraphs(enforce_terminology(raw_answer))
            answer = _with_follow_up_offer(answer, retrieval.query_type)

            update_context(context, message, retrieval.relevant_info)
            record_exchange(context, message, answer)
            self._save(session_id, context)

        response = ChatResponse(
            message=answer,
            session_id=session_id,
            query_type=retrieval.query_type,
            pricing=pricing,
        )
        self.responses.set(cache_key, response, self.ttl)
        return response

    def sweep(self) -> int:
        """Remove expired sessions, cached answers and idle session locks."""
        removed = sweep_all((self.sessions, self.responses))
        self.locks.prune(lambda session_id: self.sessions.get(session_id) is not None)
        return removed


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    """Process-wide ChatService with in-memory stores."""
    return ChatService(
        sessions=InMemoryTTLStore(name="sessions"),
        responses=InMemoryTTLStore(name="responses"),
        ttl=settings.CACHE_TTL_SECONDS,
    )
