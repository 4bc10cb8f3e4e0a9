"""
Query Classifier.

Assigns exactly one query-type label to an expanded message. Every pattern of
every rule is tried; confidence is the length of the first match divided by
the message length, and the strictly highest confidence wins (ties keep the
rule declared first).
"""

import logging
from typing import Sequence

from lavashow_chat.knowledge.rules import QUERY_TYPE_RULES, QueryTypeRule
from lavashow_chat.schemas.knowledge import QueryClassification

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TYPE = "general"


def classify_query(
    message: str,
    rules: Sequence[QueryTypeRule] = QUERY_TYPE_RULES,
) -> QueryClassification:
    """
    Classify an expanded message.

    Returns:
        QueryClassification. No match (or an empty message) yields
        type "general" with confidence 0.
    """
    result = QueryClassification(type=DEFAULT_QUERY_TYPE, confidence=0.0)
    if not message:
        return result

    for rule in rules:
        for pattern in rule.patterns:
            match = pattern.search(message)
            if match is None:
                continue
            confidence = len(match.group(0)) / len(message)
            if confidence > result.confidence:
                result = QueryClassification(type=rule.type, confidence=confidence)

    logger.debug(f"Query classified as '{result.type}' (confidence={result.confidence:.2f})")
    return result
