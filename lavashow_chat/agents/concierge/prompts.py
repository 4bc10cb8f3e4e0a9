"""
Concierge Prompt Templates

Contains the system prompt, the prompt builders and the canned responses used
by the chat service.

Prompt Engineering Pattern:
- System prompt defines the persona and embeds the selected knowledge
- User prompt carries the visitor question, pricing facts and output rules
- Retrieval is done BEFORE the call by the rule-based matcher; the model is
  told to answer only from that data
"""

import json
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from lavashow_chat.schemas.knowledge import KnowledgeMatch

# =============================================================================
# SYSTEM PROMPT
# =============================================================================

CONCIERGE_SYSTEM_PROMPT = """You are Lava Show's virtual assistant. Lava Show is the only place in the world where visitors can safely experience real molten lava up close, with shows in Reykjavík and Vík, Iceland.

<role>
You help visitors with:
- The Classic and Premium experiences and what each includes
- Ticket prices, booking, changes and cancellations
- Locations, directions and the surrounding area
- The science behind the show and the safety measures
- Groups, gift cards and the gift shop
</role>

<rules>
1. Answer ONLY with information from the knowledge base data provided below
2. Be specific and accurate with times, prices and safety information
3. If the data does not cover the question, say so and suggest contacting info@lavashow.com
4. Keep markdown links exactly as provided
5. Be warm, concise and conversational (2-4 short paragraphs at most)
</rules>"""


def _format_knowledge(relevant_info: List[KnowledgeMatch]) -> str:
    sections = []
    for info in relevant_info:
        header = info.type.upper()
        if info.context:
            header += f" ({info.context})"
        body = json.dumps(info.content, indent=2, ensure_ascii=False)
        sections.append(f"{header}:\n{body}")
    return "\n\n".join(sections)


def build_concierge_system_prompt(
    relevant_info: List[KnowledgeMatch],
    language: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Build the system instruction for one visitor question.

    Args:
        relevant_info: Knowledge matches, highest priority first
        language: Human-readable answer language (e.g. "German"); None lets
            the model answer in the visitor's language
        today: Current date (defaults to date.today())

    Returns:
        str: System instruction for Gemini
    """
    today = today or date.today()
    prompt = f"{CONCIERGE_SYSTEM_PROMPT}\n\nToday is {today.strftime('%A, %B %d, %Y')}."

    if language:
        prompt += f"\n\nAlways answer in {language}."
    else:
        prompt += "\n\nAnswer in the same language the visitor writes in."

    if relevant_info:
        prompt += f"\n\n<knowledge_base_data>\n{_format_knowledge(relevant_info)}\n</knowledge_base_data>"

    return prompt


# =============================================================================
# USER PROMPT BUILDER
# =============================================================================

def build_concierge_user_prompt(
    user_message: str,
    pricing: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Build the user turn for one visitor question.

    Args:
        user_message: Visitor question, unmodified
        pricing: Serialized price breakdown for pricing questions (optional)

    Returns:
        str: Formatted user prompt
    """
    pricing_section = ""
    if pricing:
        pricing_section = f"""
<calculated_pricing>
{json.dumps(pricing, indent=2, ensure_ascii=False)}
</calculated_pricing>
Use these calculated prices exactly when you mention totals."""

    return f"""<visitor_question>
{user_message}
</visitor_question>
{pricing_section}
Please provide a natural, conversational response using ONLY the information from the knowledge base data.
Be specific and accurate with details like times, prices, and safety information."""


# =============================================================================
# GREETINGS
# =============================================================================

GREETING_MESSAGES = ('hi', 'hello', 'hey', 'good morning', 'good afternoon', 'good evening')

GREETING_RESPONSES = (
    "Hello! Would you like to know about our unique lava shows, experience packages, or how to get here?",
    "Welcome! I can help you learn about our live lava shows, educational content, or assist with booking. What interests you?",
    "Hi there! I'd be happy to tell you about experiencing real molten lava up close. What would you like to know?",
    "Welcome to Lava Show! Would you like to learn about our experiences, our safety protocols, or how to book?",
)


def is_greeting(message: str) -> bool:
    """True when the whole message is a bare greeting."""
    return message.lower().strip().rstrip('!.') in GREETING_MESSAGES


# =============================================================================
# FOLLOW-UPS
# =============================================================================

@dataclass(frozen=True)
class FollowUp:
    """
    A follow-up offer that can be answered without the LLM.

    `template` placeholders are knowledge document top-level keys listed in
    `sections`.
    """
    key: str
    trigger: str
    sections: Tuple[str, ...]
    template: str


FOLLOW_UPS: Dict[str, FollowUp] = {
    'lava_creation': FollowUp(
        key='lava_creation',
        trigger="Would you like to learn more about how we create the lava show?",
        sections=('show_technical_details', 'educational_content'),
        template=(
            "Let me explain our lava creation process. We use real basaltic tephra from "
            "the 1918 Katla eruption, which we superheat to 1100°C (2000°F).\n\n"
            "{show_technical_details}\n\n{educational_content}"
        ),
    ),
    'experiences_info': FollowUp(
        key='experiences_info',
        trigger="Would you like to know about our different experience packages?",
        sections=('experiences',),
        template=(
            "We offer two main experiences: our Classic Experience (Saman) and our "
            "Premium Experience (Sér).\n\n{experiences}"
        ),
    ),
    'safety_measures': FollowUp(
        key='safety_measures',
        trigger="I can explain more about our safety measures.",
        sections=('safety_protocols',),
        template="Safety is our top priority.\n\n{safety_protocols}",
    ),
}

# Follow-up offered after an LLM answer, by query type
FOLLOW_UP_BY_QUERY_TYPE: Dict[str, str] = {
    'educational': 'lava_creation',
    'safety': 'safety_measures',
    'experiences': 'experiences_info',
    'pricing': 'experiences_info',
}

ACKNOWLEDGEMENT_PATTERN = re.compile(
    r"^(yes|yeah|sure|okay|ok|definitely|please|tell me|id like that|i'd like that|i would|go ahead)$"
)


def is_acknowledgement(message: str) -> bool:
    """True when the whole message accepts an offer ("yes", "sure", ...)."""
    normalized = message.lower().strip().rstrip('!.')
    return ACKNOWLEDGEMENT_PATTERN.match(normalized) is not None


def find_offered_follow_up(response: str) -> Optional[FollowUp]:
    """Return the follow-up whose trigger sentence appears in an answer."""
    for follow_up in FOLLOW_UPS.values():
        if follow_up.trigger in response:
            return follow_up
    return None


# =============================================================================
# BRAND TERMINOLOGY
# =============================================================================

# Discouraged term -> preferred term
TERMINOLOGY: Dict[str, str] = {
    'demonstration': 'show',
    'presentation': 'show',
    'exhibit': 'show',
    'performance': 'show',
    'display': 'show',
    'lava show': 'LAVA SHOW',
    'premium experience': 'Sér',
    'classic experience': 'Saman',
    'standard': 'classic',
    'basic': 'classic',
    'guide': 'host',
    'presenter': 'host',
    'staff': 'team members',
}


# =============================================================================
# ERRORS
# =============================================================================

ERROR_MESSAGES = {
    'rate_limited': "I'm experiencing high traffic. Please try again in a moment.",
    'general': "I apologize, but I'm having trouble processing your request right now. Could you please try again?",
}


# =============================================================================
# LANGUAGE
# =============================================================================

LANGUAGE_NAMES = {
    "en": "English",
    "is": "Icelandic",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "nl": "Dutch",
    "pl": "Polish",
    "da": "Danish",
    "sv": "Swedish",
    "no": "Norwegian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
}


def resolve_language(locale: Optional[str]) -> Optional[str]:
    """
    Map a locale or language code to a human-readable language name.

    Examples:
        - "de" -> "German"
        - "is-IS" -> "Icelandic"
        - None or unknown codes -> None (answer in the visitor's language)
    """
    if not locale:
        return None
    lang_code = locale.replace("_", "-").split("-")[0].lower()
    return LANGUAGE_NAMES.get(lang_code)
