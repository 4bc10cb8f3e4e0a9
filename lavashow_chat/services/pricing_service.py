"""
Pricing Calculator - ticket price breakdowns from free-text visitor counts.

Steps (each resolved once, in order):
1. Package: session booking_info.package_type, else premium keywords, else classic
2. Visitor counts from counted mentions ("2 adults", "3 kids") and ages
   ("10 year old", "7-year-old", "12 yo"); nothing detected -> one adult
3. Premium is 13+ only: remaining children are converted to adults
4. Classic family bundle (flat price) short-circuits per-person pricing
5. Per-category totals from TICKET_RATES
6. Group discount at GROUP_DISCOUNT_THRESHOLD visitors
7. Round half-up to whole ISK, omit zero-count categories

Known behavior: teen counts ("2 teens") and numeric ages are summed
independently, so "2 teenagers, one is 15 years old" counts three adults.
A warning is logged when both kinds of mention appear.
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from lavashow_chat.schemas.context import ConversationContext
from lavashow_chat.schemas.pricing import (
    FamilyPackageBreakdown,
    GroupDiscount,
    PricingBreakdown,
    PricingCategory,
    PricingResult,
)
from lavashow_chat.utils.constants import (
    ADULT_MIN_AGE,
    CURRENCY,
    FAMILY_PACKAGE_MAX_ADULTS,
    FAMILY_PACKAGE_MAX_CHILDREN,
    FAMILY_PACKAGE_NAME,
    FAMILY_PACKAGE_PRICE,
    GROUP_DISCOUNT_PERCENTAGE,
    GROUP_DISCOUNT_THRESHOLD,
    PACKAGE_NAMES,
    TICKET_RATES,
)

logger = logging.getLogger(__name__)

PREMIUM_KEYWORDS = ('premium', 'vip', 'backstage', 'balcony')
CATEGORIES = ('adults', 'children', 'students', 'seniors')

COUNT_PATTERNS = {
    'adults': re.compile(r'\b(\d+)\s*adults?\b'),
    'children': re.compile(r'\b(\d+)\s*(?:children|kids|kid|child)\b'),
    'students': re.compile(r'\b(\d+)\s*students?\b'),
    'seniors': re.compile(r'\b(\d+)\s*seniors?\b'),
}
TEEN_PATTERN = re.compile(r'\b(\d+)\s*(?:teenagers?|teens?)\b')
AGE_PATTERN = re.compile(
    r'(?<![\d,.])\b(\d{1,3})(?:\s*years?\s*old\b|-years?\b|\s*yrs?\s*old\b|\s*yo\b)'
)


# =============================================================================
# PARSING
# =============================================================================

def _detect_package(message: str, context: Optional[ConversationContext]) -> str:
    if context is not None and context.booking_info.package_type:
        return context.booking_info.package_type
    if any(keyword in message for keyword in PREMIUM_KEYWORDS):
        return 'premium'
    return 'classic'


def _sum_matches(pattern: re.Pattern, message: str) -> int:
    return sum(int(value) for value in pattern.findall(message))


def _count_visitors(message: str, package: str) -> Dict[str, int]:
    """Explicit counts plus age-derived counts, summed per category."""
    counts = {category: _sum_matches(pattern, message) for category, pattern in COUNT_PATTERNS.items()}

    teens = _sum_matches(TEEN_PATTERN, message)
    counts['adults'] += teens

    ages = [int(age) for age in AGE_PATTERN.findall(message)]
    if teens and ages:
        logger.warning(
            "Pricing message mentions both teenagers and numeric ages; "
            "both are counted (possible double counting)"
        )

    for age in ages:
        if age >= ADULT_MIN_AGE:
            counts['adults'] += 1
        elif package == 'classic':
            counts['children'] += 1
        else:
            logger.info(
                f"Age {age} counted as adult: {PACKAGE_NAMES[package]} is "
                f"{ADULT_MIN_AGE}+ only"
            )
            counts['adults'] += 1

    if sum(counts.values()) == 0:
        counts['adults'] = 1

    return counts


# =============================================================================
# COMPUTATION
# =============================================================================

def _round_isk(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _per_person_subtotal(counts: Dict[str, int], package: str) -> int:
    rates = TICKET_RATES[package]
    return sum(counts[category] * rates[category] for category in CATEGORIES if counts[category])


def _qualifies_for_family_bundle(message: str, counts: Dict[str, int], package: str) -> bool:
    if package != 'classic':
        return False
    composition_fits = (
        counts['adults'] <= FAMILY_PACKAGE_MAX_ADULTS
        and counts['children'] <= FAMILY_PACKAGE_MAX_CHILDREN
        and counts['students'] == 0
        and counts['seniors'] == 0
    )
    if 'family' in message:
        return composition_fits
    return (
        composition_fits
        and counts['children'] > 0
        and FAMILY_PACKAGE_PRICE < _per_person_subtotal(counts, package)
    )


def calculate_pricing(
    message: str,
    context: Optional[ConversationContext] = None,
) -> PricingResult:
    """
    Compute a ticket price breakdown for a visitor message.

    Never raises on string input: a message without any visitor information
    is priced as one adult.

    Args:
        message: Visitor message (any case)
        context: Session context; booking_info.package_type wins over keywords

    Returns:
        PricingBreakdown, or FamilyPackageBreakdown when the family bundle applies
    """
    text = message.lower()
    package = _detect_package(text, context)
    counts = _count_visitors(text, package)

    if package == 'premium' and counts['children'] > 0:
        logger.info(f"Converting {counts['children']} children to adults for Premium Experience")
        counts['adults'] += counts['children']
        counts['children'] = 0

    if _qualifies_for_family_bundle(text, counts, package):
        logger.info("Family Package applied")
        return FamilyPackageBreakdown(
            package=FAMILY_PACKAGE_NAME,
            base_price=FAMILY_PACKAGE_PRICE,
            total_price=FAMILY_PACKAGE_PRICE,
            details=(
                f"Covers up to {FAMILY_PACKAGE_MAX_ADULTS} adults and "
                f"{FAMILY_PACKAGE_MAX_CHILDREN} children for the {PACKAGE_NAMES['classic']}"
            ),
            currency=CURRENCY,
        )

    rates = TICKET_RATES[package]
    categories = {
        category: PricingCategory(
            count=counts[category],
            price_per_person=rates[category],
            total=counts[category] * rates[category],
        )
        for category in CATEGORIES
        if counts[category]
    }
    subtotal = sum(item.total for item in categories.values())

    group_discount = None
    total_price = subtotal
    headcount = sum(counts.values())
    if headcount >= GROUP_DISCOUNT_THRESHOLD:
        total_price = _round_isk(
            Decimal(subtotal) * (100 - GROUP_DISCOUNT_PERCENTAGE) / Decimal(100)
        )
        group_discount = GroupDiscount(
            percentage=GROUP_DISCOUNT_PERCENTAGE,
            amount=subtotal - total_price,
        )

    logger.info(
        f"Pricing computed: package={package}, headcount={headcount}, "
        f"total={total_price} {CURRENCY}"
    )

    return PricingBreakdown(
        package=package,
        total_price=total_price,
        group_discount=group_discount,
        currency=CURRENCY,
        **categories,
    )


# Name used by the chat layer
compute_pricing = calculate_pricing
