"""
Post-processing for assistant answers.

- enforce_terminology: brand wording (discouraged term -> preferred term)
- format_paragraphs: newline normalization and paragraph breaks
- get_max_tokens: output token budget from question complexity
- render_follow_up: canned follow-up answers filled from the knowledge document
"""

import logging
import re
from typing import Any, Dict, List, Optional

from lavashow_chat.agents.concierge.prompts import TERMINOLOGY, FollowUp
from lavashow_chat.knowledge.loader import get_knowledge

logger = logging.getLogger(__name__)


# =============================================================================
# TERMINOLOGY
# =============================================================================

def _terminology_pattern(terminology: Dict[str, str]) -> re.Pattern:
    # Longest phrase first so "lava show" wins over a shorter overlapping term
    phrases = sorted(terminology, key=len, reverse=True)
    alternation = "|".join(re.escape(phrase) for phrase in phrases)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


_TERMINOLOGY_PATTERN = _terminology_pattern(TERMINOLOGY)


def enforce_terminology(text: Optional[str], terminology: Optional[Dict[str, str]] = None) -> Optional[str]:
    """
    Replace discouraged wording with brand terms.

    Matching is whole-word and case-insensitive, done in a single pass so a
    replacement is never itself replaced again.
    """
    if not text:
        return text

    if terminology is None:
        terminology, pattern = TERMINOLOGY, _TERMINOLOGY_PATTERN
    else:
        pattern = _terminology_pattern(terminology)
    lookup = {phrase.lower(): preferred for phrase, preferred in terminology.items()}

    replaced: List[str] = []

    def _replace(match: re.Match) -> str:
        replaced.append(match.group(0))
        return lookup[match.group(0).lower()]

    result = pattern.sub(_replace, text)
    if replaced:
        logger.debug(f"Terminology replaced: {replaced}")
    return result


# =============================================================================
# PARAGRAPHS
# =============================================================================

SENTENCE_SPLIT = re.compile(r'(?<=[.!?])\s+(?=[A-ZÁÉÍÓÚÞÆÖ"\[])')
SENTENCES_PER_PARAGRAPH = 3
LONG_ANSWER_CHARS = 400


def format_paragraphs(text: str) -> str:
    """
    Normalize answer layout for the chat widget.

    - CRLF/CR become LF, trailing spaces are stripped
    - runs of blank lines collapse to a single blank line
    - a long answer written as one block is split into paragraphs of at most
      three sentences (answers that already contain line breaks are left alone)
    """
    if not text:
        return text

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    normalized = "\n".join(line.rstrip() for line in normalized.split("\n"))
    normalized = re.sub(r"\n{3,}", "\n\n", normalized).strip()

    if "\n" in normalized or len(normalized) < LONG_ANSWER_CHARS:
        return normalized

    sentences = SENTENCE_SPLIT.split(normalized)
    if len(sentences) <= SENTENCES_PER_PARAGRAPH:
        return normalized

    paragraphs = [
        " ".join(sentences[i:i + SENTENCES_PER_PARAGRAPH])
        for i in range(0, len(sentences), SENTENCES_PER_PARAGRAPH)
    ]
    return "\n\n".join(paragraphs)


# =============================================================================
# TOKEN BUDGET
# =============================================================================

COMPLEX_TOPICS = (
    'safety', 'technical', 'scientific', 'educational', 'temperature',
    'composition', 'emergency', 'evacuation', 'group booking',
)


def get_max_tokens(user_message: str) -> int:
    """
    Output token budget for a question.

    800 complex multi-part, 600 complex, 500 multi-part, else 400.
    Multi-part means " and " appears or more than one question mark.
    """
    message = user_message.lower()
    is_complex = any(topic in message for topic in COMPLEX_TOPICS)
    is_multi_part = " and " in message or message.count("?") > 1

    if is_complex and is_multi_part:
        return 800
    if is_complex:
        return 600
    if is_multi_part:
        return 500
    return 400


# =============================================================================
# FOLLOW-UP ANSWERS
# =============================================================================

def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()


def render_knowledge(content: Any, indent: int = 0) -> str:
    """Render nested knowledge content as readable, indented bullet text."""
    pad = "  " * indent
    if isinstance(content, dict):
        lines = []
        for key, value in content.items():
            if isinstance(value, (dict, list)):
                lines.append(f"{pad}- {_label(key)}:")
                lines.append(render_knowledge(value, indent + 1))
            else:
                lines.append(f"{pad}- {_label(key)}: {value}")
        return "\n".join(lines)
    if isinstance(content, list):
        return "\n".join(
            render_knowledge(item, indent + 1) if isinstance(item, (dict, list)) else f"{pad}- {item}"
            for item in content
        )
    return f"{pad}{content}"


def render_follow_up(follow_up: FollowUp) -> str:
    """Fill a follow-up template with its knowledge sections."""
    sections = {section: render_knowledge(get_knowledge(section)) for section in follow_up.sections}
    return follow_up.template.format(**sections)
