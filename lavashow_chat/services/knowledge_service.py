"""
Knowledge Matcher - rule-based retrieval over the static knowledge document.

Pipeline (retrieve):
1. Lowercase and expand the visitor message (synonym_service)
2. Classify it with a single label (query_classifier)
3. Collect every topic-rule match whose triggers appear in the message
4. FAQ fallback when no topic rule fired
5. Context adjustments (last query type boost, booking and interest supplements)
6. Stable sort by descending priority

Unlike the classifier, matching is multi-label: a message about "safety for
kids in Vík" yields safety, children and location matches together.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from lavashow_chat.knowledge.loader import get_knowledge, load_knowledge_base
from lavashow_chat.knowledge.rules import (
    FAQ_SECTIONS,
    INTEREST_TOPICS,
    TOPIC_RULES,
    BranchGroup,
    MatchSpec,
    TopicRule,
    iter_match_specs,
)
from lavashow_chat.schemas.context import ConversationContext
from lavashow_chat.schemas.knowledge import KnowledgeMatch, RetrievalResult
from lavashow_chat.services.query_classifier import classify_query
from lavashow_chat.services.synonym_service import expand_terms
from lavashow_chat.utils.constants import (
    BOOKING_CONTEXT_PRIORITY,
    FAQ_MATCH_PRIORITY,
    LAST_QUERY_TYPE_BOOST,
)
from lavashow_chat.utils.logging import preview

logger = logging.getLogger(__name__)

BOOKING_CONTEXT_NOTE = "Based on your previous questions about booking"
PRICING_MATCH_TYPES = ("experiences", "booking_policies")


# =============================================================================
# RULE EVALUATION
# =============================================================================

def _contains_any(message: str, triggers: Iterable[str]) -> bool:
    return any(trigger in message for trigger in triggers)


def _build_match(spec: MatchSpec) -> KnowledgeMatch:
    content = spec.literal if spec.path is None else get_knowledge(spec.path)
    return KnowledgeMatch(type=spec.type, content=content, priority=spec.priority)


def _evaluate_rule(message: str, rule: TopicRule) -> List[KnowledgeMatch]:
    """Return the matches of one topic rule, or [] when it does not fire."""
    if not _contains_any(message, rule.triggers):
        return []

    specs = list(rule.matches)
    for sub_rule in rule.sub_rules:
        if isinstance(sub_rule, BranchGroup):
            chosen = next(
                (branch for branch in sub_rule.branches if _contains_any(message, branch.triggers)),
                None,
            )
            specs.extend(chosen.matches if chosen else sub_rule.default)
        elif _contains_any(message, sub_rule.triggers):
            specs.extend(sub_rule.matches)

    return [_build_match(spec) for spec in specs]


def _match_faq(message: str) -> List[KnowledgeMatch]:
    """
    Literal FAQ lookup.

    Every FAQ entry whose lowercased question text is contained in the message
    yields a match of type 'faq' or 'extended_faq' with content
    {category: {question: answer}}.
    """
    knowledge_base = load_knowledge_base()
    matches = []
    for section in FAQ_SECTIONS:
        for category, entries in knowledge_base.get(section, {}).items():
            for entry in entries.values():
                if not isinstance(entry, dict):
                    continue
                question = entry.get("question")
                if question and question.lower() in message:
                    matches.append(KnowledgeMatch(
                        type=section,
                        content={category: {question: entry.get("answer")}},
                        priority=FAQ_MATCH_PRIORITY,
                    ))
    return matches


# =============================================================================
# CONTEXT ADJUSTMENTS
# =============================================================================

def _apply_context(matches: List[KnowledgeMatch], context: ConversationContext) -> None:
    """Boost and supplement matches in place from the conversation context."""
    last_query_type = context.conversation.last_query_type
    if last_query_type:
        for match in matches:
            if match.type == last_query_type:
                match.priority += LAST_QUERY_TYPE_BOOST

    if context.booking_info.has_partial_booking():
        if not any(match.type in PRICING_MATCH_TYPES for match in matches):
            matches.append(KnowledgeMatch(
                type="experiences",
                content=get_knowledge("experiences"),
                priority=BOOKING_CONTEXT_PRIORITY,
                context=BOOKING_CONTEXT_NOTE,
            ))

    for interest in context.user_preferences.interests:
        topic = INTEREST_TOPICS.get(interest)
        if topic is None:
            continue
        if any(match.type == topic.match.type for match in matches):
            continue
        supplement = _build_match(topic.match)
        supplement.context = topic.context
        matches.append(supplement)


# =============================================================================
# PUBLIC API
# =============================================================================

def match_knowledge(
    expanded_message: str,
    context: Optional[ConversationContext] = None,
    rules: Sequence[TopicRule] = TOPIC_RULES,
) -> List[KnowledgeMatch]:
    """
    Select knowledge snippets for an expanded, lowercased message.

    Args:
        expanded_message: Output of expand_terms()
        context: Optional session context used for priority adjustments
        rules: Topic rules to evaluate (defaults to TOPIC_RULES)

    Returns:
        Matches sorted by descending priority. Ties keep insertion order.

    Raises:
        KnowledgeKeyError: If a rule references a missing key path
    """
    matches: List[KnowledgeMatch] = []
    for rule in rules:
        matches.extend(_evaluate_rule(expanded_message, rule))

    if not matches:
        matches = _match_faq(expanded_message)

    if context is not None:
        _apply_context(matches, context)

    matches.sort(key=lambda match: match.priority, reverse=True)
    return matches


def retrieve(
    user_message: str,
    context: Optional[ConversationContext] = None,
) -> RetrievalResult:
    """
    Top-level retrieval entry point used by the chat service.

    Lowercases and expands the message, classifies it, and matches knowledge.
    """
    expanded = expand_terms(user_message.lower())
    classification = classify_query(expanded)
    relevant_info = match_knowledge(expanded, context)

    logger.info(
        f"Retrieved {len(relevant_info)} knowledge matches "
        f"(query_type={classification.type}) for '{preview(user_message)}'"
    )
    return RetrievalResult(relevant_info=relevant_info, query_type=classification.type)


def validate_topic_rules() -> int:
    """
    Resolve every key path referenced by the rule tables.

    Called once at application start-up so a broken path fails the deploy
    instead of a visitor request.

    Returns:
        Number of key paths checked

    Raises:
        KnowledgeKeyError: On the first missing key path
    """
    checked = 0
    for spec in iter_match_specs():
        if spec.path is not None:
            get_knowledge(spec.path)
            checked += 1
    logger.info(f"Validated {checked} knowledge key paths")
    return checked
