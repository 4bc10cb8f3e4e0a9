"""
Tests for the Query Classifier.
"""

import re

import pytest

from lavashow_chat.knowledge.rules import QueryTypeRule
from lavashow_chat.services.query_classifier import classify_query


class TestClassifyQuery:

    def test_pricing_question(self):
        result = classify_query("how much does it cost price")
        assert result.type == "pricing"
        assert 0 < result.confidence <= 1

    def test_full_message_match_has_confidence_one(self):
        result = classify_query("hello")
        assert result.type == "greeting"
        assert result.confidence == 1.0

    def test_no_match_defaults_to_general(self):
        result = classify_query("zzz qqq")
        assert result.type == "general"
        assert result.confidence == 0

    def test_empty_message(self):
        result = classify_query("")
        assert result.type == "general"
        assert result.confidence == 0

    def test_longest_relative_match_wins(self):
        # "how much" (pricing) is longer than "how" (educational)
        assert classify_query("how much").type == "pricing"

    def test_ties_keep_first_declared_rule(self):
        rules = (
            QueryTypeRule(type="first", patterns=(re.compile("abc"),)),
            QueryTypeRule(type="second", patterns=(re.compile("abc"),)),
        )
        assert classify_query("abc", rules=rules).type == "first"

    def test_patterns_are_case_insensitive(self):
        assert classify_query("WHERE").type == "location"

    @pytest.mark.parametrize("message", [
        "is it safe",
        "where are you located location",
        "tell me about the science of lava",
        "can i bring my baby child",
        "thanks",
        "zzz",
        "x",
    ])
    def test_confidence_is_bounded_and_zero_means_general(self, message):
        result = classify_query(message)
        assert 0 <= result.confidence <= 1
        if result.confidence == 0:
            assert result.type == "general"
