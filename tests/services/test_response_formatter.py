"""
Tests for answer post-processing: brand terminology, paragraphs, token
budget and follow-up rendering.
"""

import pytest

from lavashow_chat.agents.concierge.prompts import FOLLOW_UPS, FollowUp
from lavashow_chat.services.response_formatter import (
    enforce_terminology,
    format_paragraphs,
    get_max_tokens,
    render_follow_up,
    render_knowledge,
)


class TestEnforceTerminology:

    def test_replaces_discouraged_terms(self):
        text = "Our staff will guide you through the demonstration"
        assert enforce_terminology(text) == "Our team members will host you through the show"

    def test_replacement_is_not_replaced_again(self):
        # "standard" -> "classic", but the new "classic experience" stays
        assert enforce_terminology("The standard experience") == "The classic experience"

    def test_longest_phrase_first(self):
        assert enforce_terminology("Welcome to the Lava Show!") == "Welcome to the LAVA SHOW!"

    @pytest.mark.parametrize("text", [
        "Please follow the safety guidelines.",
        "Prices are displayed at the door.",
        "Showtime is at noon.",
    ])
    def test_whole_words_only(self, text):
        assert enforce_terminology(text) == text

    def test_case_insensitive(self):
        assert enforce_terminology("STAFF only") == "team members only"

    def test_custom_terminology(self):
        assert enforce_terminology("a volcano", {"volcano": "mountain"}) == "a mountain"

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_input(self, text):
        assert enforce_terminology(text) == text


class TestFormatParagraphs:

    def test_normalizes_newlines(self):
        assert format_paragraphs("a\r\nb  \r\n\r\n\r\n\r\nc") == "a\nb\n\nc"

    def test_short_single_block_unchanged(self):
        text = "One sentence. Two sentences. Three. Four."
        assert format_paragraphs(text) == text

    def test_long_single_block_split_in_three_sentence_paragraphs(self):
        sentences = [
            f"This is sentence number {index} about the molten lava we pour for our guests."
            for index in range(6)
        ]
        result = format_paragraphs(" ".join(sentences))

        paragraphs = result.split("\n\n")
        assert len(paragraphs) == 2
        assert paragraphs[0] == " ".join(sentences[:3])
        assert paragraphs[1] == " ".join(sentences[3:])

    def test_long_answer_with_line_breaks_unchanged(self):
        text = ("A sentence about lava. " * 20).strip() + "\n- a bullet"
        assert format_paragraphs(text) == text

    def test_empty(self):
        assert format_paragraphs("") == ""


class TestGetMaxTokens:

    @pytest.mark.parametrize("message, tokens", [
        ("What safety measures and emergency plans do you have?", 800),
        ("Tell me about safety", 600),
        ("What is the temperature of the lava?", 600),
        ("Where and when?", 500),
        ("Where? When?", 500),
        ("Is it safe?", 400),
        ("hi", 400),
    ])
    def test_budget(self, message, tokens):
        assert get_max_tokens(message) == tokens


class TestRenderKnowledge:

    def test_nested_list(self):
        assert render_knowledge({"a_b": ["x", "y"]}) == "- A b:\n  - x\n  - y"

    def test_nested_mapping(self):
        content = {"name": "Lava", "nested": {"key": 1}}
        assert render_knowledge(content) == "- Name: Lava\n- Nested:\n  - Key: 1"

    def test_scalar(self):
        assert render_knowledge("plain text") == "plain text"


class TestRenderFollowUp:

    def test_fills_template_from_knowledge(self):
        answer = render_follow_up(FOLLOW_UPS["safety_measures"])
        assert answer.startswith("Safety is our top priority.\n\n- ")

    def test_every_follow_up_renders(self):
        for follow_up in FOLLOW_UPS.values():
            assert render_follow_up(follow_up)

    def test_custom_follow_up(self):
        follow_up = FollowUp(
            key="gifts",
            trigger="Want to hear about the shop?",
            sections=("gift_shop",),
            template="Our shop:\n{gift_shop}",
        )
        assert render_follow_up(follow_up).startswith("Our shop:\n- ")
