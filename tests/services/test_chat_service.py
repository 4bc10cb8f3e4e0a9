"""
Tests for the Chat Service.

The Gemini call is mocked in every test: ChatService tests patch
generate_answer, generate_answer tests patch the client factory.

Covers:
- Greeting and follow-up short-circuits (no LLM call)
- Retrieval, pricing and prompt assembly
- Response cache and per-session locking
- Retries, backoff and error mapping of generate_answer
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors

from lavashow_chat.agents.concierge.prompts import FOLLOW_UPS, GREETING_RESPONSES
from lavashow_chat.config import settings
from lavashow_chat.schemas.context import ChatMessage, ConversationContext
from lavashow_chat.services.chat_service import (
    LLMRateLimitError,
    LLMServiceError,
    generate_answer,
)

GENERATE_ANSWER = "lavashow_chat.services.chat_service.generate_answer"
GET_CLIENT = "lavashow_chat.services.chat_service._get_gemini_client"


def _prompt_text(mock_generate: AsyncMock) -> str:
    """User prompt text of the last generate_answer call."""
    contents = mock_generate.await_args.args[1]
    return contents[-1].parts[0].text


# =============================================================================
# CHAT SERVICE
# =============================================================================

class TestGreetings:

    @pytest.mark.asyncio
    async def test_greeting_skips_llm(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            response = await chat_service.handle_message("Hello!", session_id="s1")

        mock_generate.assert_not_awaited()
        assert response.message in GREETING_RESPONSES
        assert response.query_type is None
        assert len(chat_service.sessions.get("s1").messages) == 2

    @pytest.mark.asyncio
    async def test_new_session_id_when_missing(self, chat_service):
        response = await chat_service.handle_message("hi")
        assert response.session_id.startswith("session_")
        assert chat_service.sessions.get(response.session_id) is not None


class TestAnswers:

    @pytest.mark.asyncio
    async def test_answer_is_post_processed_and_stored(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "Our staff will meet you at the show."
            response = await chat_service.handle_message("Where are you located?", session_id="s1")

        assert response.message == "Our team members will meet you at the show."
        assert response.query_type == "location"
        assert response.pricing is None
        assert response.cached is False

        context = chat_service.sessions.get("s1")
        assert context.conversation.last_query_type == "location"
        assert context.conversation.current_topic is not None
        assert [message.role for message in context.messages] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_knowledge_is_embedded_in_system_prompt(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "We are in Vik."
            await chat_service.handle_message("where is the vik location", session_id="s1")

        system_prompt = mock_generate.await_args.args[0]
        assert "<knowledge_base_data>" in system_prompt
        assert "LOCATION_LINK_VIK" in system_prompt

    @pytest.mark.asyncio
    async def test_language_is_passed_to_prompt(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "Wir sind in Reykjavik."
            await chat_service.handle_message("where are you?", session_id="s1", language="de-DE")

        assert "Always answer in German." in mock_generate.await_args.args[0]

    @pytest.mark.asyncio
    async def test_pricing_question_includes_breakdown(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "That will be 16,770 ISK."
            response = await chat_service.handle_message(
                "How much for 2 adults and 1 child, classic?", session_id="s1"
            )

        assert response.query_type == "pricing"
        assert response.pricing.total_price == 16770
        assert response.pricing.adults.count == 2
        assert '"total_price": 16770' in _prompt_text(mock_generate)
        assert response.message.endswith(FOLLOW_UPS["experiences_info"].trigger)

    @pytest.mark.asyncio
    async def test_prompt_history_uses_last_four_messages(self, chat_service):
        context = ConversationContext()
        for index in range(3):
            context.messages.append(ChatMessage(role="user", content=f"question {index}"))
            context.messages.append(ChatMessage(role="assistant", content=f"answer {index}"))
        chat_service.sessions.set("s1", context, 3600)

        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "Sure."
            await chat_service.handle_message("where are you?", session_id="s1")

        contents = mock_generate.await_args.args[1]
        assert [content.role for content in contents] == ["user", "model", "user", "model", "user"]
        assert contents[0].parts[0].text == "question 1"


class TestFollowUps:

    @pytest.mark.asyncio
    async def test_accepted_follow_up_is_answered_from_template(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "We melt real lava rock in a furnace."
            first = await chat_service.handle_message("how does the lava work?", session_id="s1")
            second = await chat_service.handle_message("Yes!", session_id="s1")

        assert first.message.endswith(FOLLOW_UPS["lava_creation"].trigger)
        assert second.message.startswith("Let me explain our lava creation process.")
        assert mock_generate.await_count == 1
        assert chat_service.sessions.get("s1").pending_follow_up is None

    @pytest.mark.asyncio
    async def test_acknowledgement_without_offer_goes_to_llm(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "Happy to help."
            await chat_service.handle_message("sure", session_id="s1")

        mock_generate.assert_awaited_once()


class TestCacheAndSessions:

    @pytest.mark.asyncio
    async def test_repeated_question_is_cached(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "In Reykjavik and Vik."
            first = await chat_service.handle_message("Where are you located?", session_id="s1")
            second = await chat_service.handle_message("  where are you LOCATED? ", session_id="s1")

        mock_generate.assert_awaited_once()
        assert second.cached is True
        assert second.message == first.message

    @pytest.mark.asyncio
    async def test_cache_is_per_session(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "In Reykjavik and Vik."
            await chat_service.handle_message("where are you?", session_id="s1")
            await chat_service.handle_message("where are you?", session_id="s2")

        assert mock_generate.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_expires(self, chat_service, clock):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "In Reykjavik and Vik."
            await chat_service.handle_message("where are you?", session_id="s1")
            clock.advance(3600)
            response = await chat_service.handle_message("where are you?", session_id="s1")

        assert mock_generate.await_count == 2
        assert response.cached is False

    @pytest.mark.asyncio
    async def test_concurrent_messages_do_not_lose_updates(self, chat_service):
        async def slow_answer(*args, **kwargs):
            await asyncio.sleep(0.01)
            return "Answer."

        with patch(GENERATE_ANSWER, side_effect=slow_answer):
            await asyncio.gather(
                chat_service.handle_message("where are you?", session_id="s1"),
                chat_service.handle_message("is it safe?", session_id="s1"),
            )

        assert len(chat_service.sessions.get("s1").messages) == 4

    @pytest.mark.asyncio
    async def test_llm_failure_keeps_session_without_caching(self, chat_service):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.side_effect = LLMServiceError("down")
            with pytest.raises(LLMServiceError):
                await chat_service.handle_message("where are you?", session_id="s1")

        context = chat_service.sessions.get("s1")
        assert context is not None
        assert context.messages == []
        assert len(chat_service.responses) == 0

    @pytest.mark.asyncio
    async def test_sweep_removes_expired_state(self, chat_service, clock):
        with patch(GENERATE_ANSWER, new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = "In Reykjavik and Vik."
            await chat_service.handle_message("where are you?", session_id="s1")

        clock.advance(3601)

        assert chat_service.sweep() == 2
        assert len(chat_service.locks) == 0


# =============================================================================
# GEMINI CALL
# =============================================================================

def _mock_client(*results):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(side_effect=list(results))
    return client


def _response(text):
    response = MagicMock()
    response.text = text
    return response


class TestGenerateAnswer:

    @pytest.mark.asyncio
    async def test_returns_text(self):
        client = _mock_client(_response("Hello from Gemini"))
        with patch(GET_CLIENT, return_value=client):
            answer = await generate_answer("system", [], 400)

        assert answer == "Hello from Gemini"
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == settings.GEMINI_MODEL
        assert kwargs["config"].max_output_tokens == 400
        assert kwargs["config"].system_instruction == "system"

    @pytest.mark.asyncio
    async def test_retries_with_exponential_backoff(self):
        client = _mock_client(RuntimeError("boom"), RuntimeError("boom"), _response("ok"))
        with patch(GET_CLIENT, return_value=client), \
             patch("lavashow_chat.services.chat_service.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            answer = await generate_answer("system", [], 400)

        assert answer == "ok"
        assert [call.args[0] for call in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_raises_after_all_retries(self):
        client = _mock_client(*[RuntimeError("boom")] * 3)
        with patch(GET_CLIENT, return_value=client), \
             patch("lavashow_chat.services.chat_service.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(LLMServiceError) as exc_info:
                await generate_answer("system", [], 400)

        assert not isinstance(exc_info.value, LLMRateLimitError)
        assert client.aio.models.generate_content.await_count == 3

    @pytest.mark.asyncio
    async def test_empty_text_is_a_failure(self):
        client = _mock_client(*[_response("")] * 3)
        with patch(GET_CLIENT, return_value=client), \
             patch("lavashow_chat.services.chat_service.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(LLMServiceError):
                await generate_answer("system", [], 400)

    @pytest.mark.asyncio
    async def test_rate_limit_error(self):
        quota = {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        client = _mock_client(*[errors.ClientError(429, quota) for _ in range(3)])
        with patch(GET_CLIENT, return_value=client), \
             patch("lavashow_chat.services.chat_service.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(LLMRateLimitError):
                await generate_answer("system", [], 400)

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        async def hang(**kwargs):
            await asyncio.sleep(1)

        client = MagicMock()
        client.aio.models.generate_content = hang
        with patch(GET_CLIENT, return_value=client), \
             patch.object(settings, "LLM_TIMEOUT_SECONDS", 0.01), \
             patch.object(settings, "LLM_MAX_RETRIES", 1):
            with pytest.raises(LLMServiceError) as exc_info:
                await generate_answer("system", [], 400)

        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)

    @pytest.mark.asyncio
    async def test_missing_client(self):
        with patch(GET_CLIENT, return_value=None):
            with pytest.raises(LLMServiceError):
                await generate_answer("system", [], 400)
