"""
Static rule tables for the retrieval core.

Everything the matcher and classifier know about the vocabulary of visitor
questions lives here, as data:

- SYNONYMS: canonical term -> synonyms (Synonym Expander)
- QUERY_TYPE_RULES: ordered regex rules (Query Classifier)
- TOPIC_RULES: ordered topic rules with sub-rules (Knowledge Matcher)
- INTEREST_TOPICS: accumulated interest tag -> supplemental topic

Matching is plain substring containment on the lowercased, expanded message.
There are no word-boundary checks, so "cost" also fires inside "costume".
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Pattern, Tuple, Union

from lavashow_chat.utils.constants import INTEREST_CONTEXT_PRIORITY


# =============================================================================
# RULE TYPES
# =============================================================================

@dataclass(frozen=True)
class MatchSpec:
    """
    One knowledge match to emit.

    Exactly one of `path` (dotted knowledge document key path) or `literal`
    (inline content such as a markdown link) is set.
    """
    type: str
    priority: int
    path: Optional[str] = None
    literal: Any = None


@dataclass(frozen=True)
class SubRule:
    """Further matches emitted when extra triggers appear inside a fired topic."""
    triggers: Tuple[str, ...]
    matches: Tuple[MatchSpec, ...]


@dataclass(frozen=True)
class BranchGroup:
    """Mutually exclusive sub-rules: the first qualifying branch wins, else default."""
    branches: Tuple[SubRule, ...]
    default: Tuple[MatchSpec, ...] = ()


@dataclass(frozen=True)
class TopicRule:
    name: str
    triggers: Tuple[str, ...]
    matches: Tuple[MatchSpec, ...]
    sub_rules: Tuple[Union[SubRule, BranchGroup], ...] = ()


@dataclass(frozen=True)
class QueryTypeRule:
    type: str
    patterns: Tuple[Pattern[str], ...]


@dataclass(frozen=True)
class InterestTopic:
    match: MatchSpec
    context: str


# =============================================================================
# SYNONYMS
# =============================================================================

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    'price': ('cost', 'fee', 'payment', 'expense', 'charge', 'pay', 'spend', 'money'),
    'schedule': ('timetable', 'times', 'hours', 'when', 'slots', 'show time', 'show times'),
    'book': ('reserve', 'ticket', 'purchase', 'buy', 'booking', 'reservation', 'seat', 'seats'),
    'location': ('where', 'place', 'venue', 'address', 'building', 'direction', 'directions', 'find'),
    'experience': ('show', 'tour', 'visit', 'attraction', 'activity', 'watch', 'see', 'attend'),
    'group': ('team', 'party', 'company', 'class', 'school', 'families', 'friends', 'corporate'),
    'child': ('kid', 'children', 'young', 'youth', 'teenager', 'minor', 'baby', 'infant'),
    'safety': ('secure', 'safe', 'protection', 'danger', 'risk', 'hazard', 'emergency', 'protect'),
    'gift': ('souvenir', 'memento', 'present', 'shop', 'store', 'merchandise', 'buy'),
    'lava': ('magma', 'molten rock', 'volcanic', 'eruption', 'volcano', 'how it works', 'melted'),
}


# =============================================================================
# QUERY TYPES
# =============================================================================
# Declaration order matters: on equal confidence the earlier rule wins.

def _rule(query_type: str, *patterns: str) -> QueryTypeRule:
    return QueryTypeRule(
        type=query_type,
        patterns=tuple(re.compile(p, re.IGNORECASE) for p in patterns),
    )


QUERY_TYPE_RULES: Tuple[QueryTypeRule, ...] = (
    _rule('pricing', r'price|cost|how much|discount|offer|deal|cheap|expensive'),
    _rule('booking', r'book|reserve|when|time|schedule|date|slot|available|cancel|modify'),
    _rule('location', r'where|location|address|direction|find|get there|near|area|city'),
    _rule('safety', r'safety|danger|protect|risk|emergency|secure|hazard|threat'),
    _rule('educational', r'science|how|work|temperature|lava|melt|learn|volcano|explain'),
    _rule('group', r'group|team|class|school|company|corporate|private|event'),
    _rule('experiences', r'experience|package|difference|compare|classic|premium|show'),
    _rule('gift', r'gift|souvenir|shop|buy|purchase|memento|store|merchandise'),
    _rule('children', r'child|kid|young|age|restriction|family|baby|infant|allowed'),
    _rule('greeting', r'hello|hi|hey|greetings|morning|afternoon|evening'),
    _rule('smalltalk', r'how are you|nice|good|glad|happy|thanks|thank you|great'),
)


# =============================================================================
# INLINE LINK CONTENT
# =============================================================================

REYKJAVIK_MAP_URL = (
    "https://www.google.com/maps/dir//Lava+Show+Fiskisl%C3%B3%C3%B0+73+101+Reykjav%C3%ADk"
    "/@64.1569653,-21.9430121,13z/data=!4m8!4m7!1m0!1m5!1m1!1s0x48d6757d1ade5e2d:0x69b61da06072064f"
    "!2m2!1d-21.9429663!2d64.1569391"
)
VIK_MAP_URL = (
    "https://www.google.com/maps/dir//Lava+Show+in+V%C3%ADk+V%C3%ADkurbraut+5+870+870+Vik"
    "/@63.4183709,-19.0101997,14z/data=!4m5!4m4!1m0!1m2!1s0x48d74b1db5e98aa1:0xa197ddd0bfc5ebf1"
)

REYKJAVIK_MAP_LINK = f"[View Reykjavík Location on Google Maps 📍]({REYKJAVIK_MAP_URL})"
VIK_MAP_LINK = f"[View Vík Location on Google Maps 📍]({VIK_MAP_URL})"
REYKJAVIK_BOOKING_LINK = "[Book Reykjavík Experience](https://www.lavashow.com/reykjavik)"
VIK_BOOKING_LINK = "[Book Vík Experience](https://www.lavashow.com/vik)"
EXPERIENCE_LINKS = {
    'classic': "[Book Classic Experience](https://www.lavashow.com/tickets)",
    'premium': "[Book Premium Experience](https://www.lavashow.com/tickets)",
}
BOOK_NOW_LINK = (
    "Ready to experience the world's only live lava show? "
    "[Book Now](https://www.lavashow.com/tickets)"
)
GIFT_CARD_LINK = (
    "Give the gift of an unforgettable volcanic experience. "
    "[Purchase Gift Cards](https://www.lavashow.com/giftcard)"
)


# =============================================================================
# TOPIC RULES
# =============================================================================

MONTHS = (
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
)

TOPIC_RULES: Tuple[TopicRule, ...] = (
    TopicRule(
        name='overview',
        triggers=('what is', 'tell me about', 'overview', 'lava show', 'explain', 'description'),
        matches=(MatchSpec('general_info', 5, path='general_info'),),
        sub_rules=(
            SubRule(
                triggers=('award', 'review', 'rating', 'tripadvisor'),
                matches=(MatchSpec('marketing_highlights', 6, path='marketing_highlights'),),
            ),
        ),
    ),
    TopicRule(
        name='location',
        triggers=(
            'where', 'location', 'address', 'reykjavik', 'vik', 'direction',
            'how to get', 'getting there', 'find you',
        ),
        matches=(MatchSpec('general_info', 8, path='general_info.locations'),),
        sub_rules=(
            BranchGroup(
                branches=(
                    SubRule(
                        triggers=('reykjavik', 'reykjavík'),
                        matches=(
                            MatchSpec('location_link_reykjavik', 9, literal=REYKJAVIK_MAP_LINK),
                            MatchSpec('booking_link_reykjavik', 9, literal=REYKJAVIK_BOOKING_LINK),
                        ),
                    ),
                    SubRule(
                        triggers=('vik', 'vík'),
                        matches=(
                            MatchSpec('location_link_vik', 9, literal=VIK_MAP_LINK),
                            MatchSpec('booking_link_vik', 9, literal=VIK_BOOKING_LINK),
                        ),
                    ),
                ),
                default=(
                    MatchSpec(
                        'location_links', 8,
                        literal={'reykjavik': REYKJAVIK_MAP_LINK, 'vik': VIK_MAP_LINK},
                    ),
                ),
            ),
            SubRule(
                triggers=('area', 'nearby', 'around', 'close to'),
                matches=(
                    MatchSpec('extended_visitor_info', 7, path='extended_visitor_info.local_area'),
                ),
            ),
        ),
    ),
    TopicRule(
        name='educational',
        triggers=('how', 'work', 'temperature', 'heat', 'lava', 'melt', 'science', 'learn', 'explain'),
        matches=(
            MatchSpec('educational_content', 7, path='educational_content'),
            MatchSpec('show_technical_details', 6, path='show_technical_details'),
        ),
        sub_rules=(
            SubRule(
                triggers=('furnace', 'equipment', 'clean', 'slide', 'tool'),
                matches=(MatchSpec('technical_specifications', 8, path='technical_specifications'),),
            ),
        ),
    ),
    TopicRule(
        name='safety',
        triggers=('safe', 'security', 'danger', 'risk', 'protect', 'emergency', 'evacuation'),
        matches=(MatchSpec('safety_protocols', 9, path='safety_protocols'),),
        sub_rules=(
            SubRule(
                triggers=('emergency', 'evacuation', 'procedure'),
                matches=(MatchSpec('emergency_procedures', 10, path='emergency_procedures'),),
            ),
        ),
    ),
    TopicRule(
        name='experiences',
        triggers=(
            'experience', 'package', 'classic', 'premium', 'saman', 'ser', 'sér',
            'ticket', 'admission',
        ),
        matches=(
            MatchSpec('experiences', 8, path='experiences'),
            MatchSpec('experience_links', 8, literal=EXPERIENCE_LINKS),
        ),
        sub_rules=(
            SubRule(
                triggers=('price', 'cost', 'book', 'reserve'),
                matches=(
                    MatchSpec('booking_policies', 7, path='booking_policies'),
                    MatchSpec('booking_link', 9, literal=BOOK_NOW_LINK),
                ),
            ),
        ),
    ),
    TopicRule(
        name='groups',
        triggers=('group', 'private', 'corporate', 'company', 'team', 'school', 'event'),
        matches=(MatchSpec('group_bookings', 8, path='group_bookings'),),
        sub_rules=(
            SubRule(
                triggers=('food', 'drink', 'cater', 'menu'),
                matches=(MatchSpec('special_services', 7, path='special_services.catering'),),
            ),
        ),
    ),
    TopicRule(
        name='gift_shop',
        triggers=('gift', 'souvenir', 'shop', 'buy', 'merchandise', 'lava shard'),
        matches=(MatchSpec('gift_shop', 8, path='gift_shop'),),
    ),
    TopicRule(
        name='gift_cards',
        triggers=(
            'gift card', 'gift certificate', 'gift ticket', 'present card',
            'give as gift', 'buy gift', 'purchase gift',
        ),
        matches=(
            MatchSpec('gift_cards', 8, path='gift_shop.gift_cards'),
            MatchSpec('gift_card_link', 9, literal=GIFT_CARD_LINK),
        ),
    ),
    TopicRule(
        name='scheduling',
        triggers=(
            'open', 'hour', 'time', 'close', 'slot', 'when', 'schedule', 'weekend',
            'weekday', 'today', 'tomorrow', 'morning', 'evening', 'afternoon',
        ) + MONTHS + ('holiday', 'christmas', 'new year'),
        matches=(
            MatchSpec('show_scheduling', 8, path='show_scheduling'),
            MatchSpec('seasonal_info', 7, path='seasonal_info'),
        ),
        sub_rules=(
            SubRule(
                triggers=('season', 'summer', 'winter'),
                matches=(MatchSpec('seasonal_operations', 8, path='seasonal_operations'),),
            ),
        ),
    ),
    TopicRule(
        name='booking_changes',
        triggers=(
            'late', 'delay', 'miss', 'change', 'modify', 'cancel', 'refund',
            'reschedule', 'another time',
        ),
        matches=(
            MatchSpec('booking_management', 8, path='customer_service_protocols.booking_management'),
            MatchSpec('arrival', 7, path='booking_policies.arrival'),
        ),
    ),
    TopicRule(
        name='travel_trade',
        triggers=(
            'agent', 'guide', 'tour operator', 'partner', 'commission', 'resell',
            'bokun', 'trade', 'industry',
        ),
        matches=(MatchSpec('travel_sector', 8, path='travel_sector'),),
        sub_rules=(
            SubRule(
                triggers=('commission', 'payment', 'invoice'),
                matches=(
                    MatchSpec('payment_terms', 9, path='travel_sector.partner_policies.payment_terms'),
                ),
            ),
        ),
    ),
    TopicRule(
        name='accessibility',
        triggers=(
            'wheelchair', 'accessible', 'disability', 'handicap', 'special need',
            'language', 'english', 'translation', 'understand',
        ),
        matches=(MatchSpec('accessibility', 8, path='extended_visitor_info.accessibility'),),
    ),
    TopicRule(
        name='children',
        triggers=(
            'child', 'kid', 'age', 'young', 'family', 'baby', 'minimum',
            'restriction', 'allowed',
        ),
        matches=(
            MatchSpec('children_policy', 8, path='safety_protocols.visitor_safety.children_policy'),
            MatchSpec('family_info', 7, path='educational_program.target_audiences.families'),
        ),
    ),
    TopicRule(
        name='popup_shows',
        triggers=(
            'popup', 'pop-up', 'pop up', 'mobile', 'travel', 'outside',
            'special event', 'custom',
        ),
        matches=(MatchSpec('popup_shows', 8, path='special_services.popup_shows'),),
        sub_rules=(
            SubRule(
                triggers=('private', 'exclusive'),
                matches=(MatchSpec('special_events', 7, path='special_events'),),
            ),
        ),
    ),
    TopicRule(
        name='quality',
        triggers=('quality', 'maintenance', 'clean', 'safety', 'check', 'standard', 'monitor'),
        matches=(
            MatchSpec('quality_control', 6, path='quality_control'),
            MatchSpec('operational_details', 5, path='operational_details'),
        ),
    ),
)

# FAQ sections scanned when no topic rule fires (match type == section key)
FAQ_SECTIONS = ('faq', 'extended_faq')


# =============================================================================
# INTERESTS
# =============================================================================

# Interest tag -> keywords that reveal it in a visitor message
INTEREST_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    'science': ('science', 'scientific', 'geology', 'volcan', 'temperature', 'how it works'),
    'safety': ('safety', 'safe', 'danger', 'protect', 'emergency'),
    'history': ('history', 'katla', 'founder', 'story'),
    'gifts': ('gift', 'souvenir', 'shop'),
    'photography': ('photo', 'camera', 'picture'),
    'family': ('family', 'kids', 'children'),
}

# Interest tag -> topic added when the current message did not match it
INTEREST_TOPICS: Dict[str, InterestTopic] = {
    'science': InterestTopic(
        match=MatchSpec('educational_content', INTEREST_CONTEXT_PRIORITY, path='educational_content'),
        context='Based on your interest in volcanic science',
    ),
    'safety': InterestTopic(
        match=MatchSpec('safety_protocols', INTEREST_CONTEXT_PRIORITY, path='safety_protocols'),
        context='Based on your interest in safety measures',
    ),
    'history': InterestTopic(
        match=MatchSpec('company_history', INTEREST_CONTEXT_PRIORITY, path='company_history'),
        context='Based on your interest in the history of Lava Show',
    ),
    'gifts': InterestTopic(
        match=MatchSpec('gift_shop', INTEREST_CONTEXT_PRIORITY, path='gift_shop'),
        context='Based on your interest in lava souvenirs',
    ),
}


def iter_match_specs():
    """Yield every MatchSpec declared in the tables (used for start-up validation)."""
    for rule in TOPIC_RULES:
        yield from rule.matches
        for sub_rule in rule.sub_rules:
            if isinstance(sub_rule, BranchGroup):
                for branch in sub_rule.branches:
                    yield from branch.matches
                yield from sub_rule.default
            else:
                yield from sub_rule.matches
    for interest in INTEREST_TOPICS.values():
        yield interest.match
