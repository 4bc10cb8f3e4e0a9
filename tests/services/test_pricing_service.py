"""
Tests for the Pricing Calculator.

Rates (ISK): classic adult 6590, child 3590, student/senior 5590;
premium adult 9990, student/senior 8990; family bundle 17990.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

import pytest

from lavashow_chat.schemas.context import ConversationContext
from lavashow_chat.schemas.pricing import FamilyPackageBreakdown, PricingBreakdown
from lavashow_chat.services.pricing_service import calculate_pricing, compute_pricing


class TestScenarios:

    def test_two_adults_one_child_classic(self):
        result = calculate_pricing("2 adults and 1 child, classic", ConversationContext())

        assert isinstance(result, PricingBreakdown)
        assert result.package == "classic"
        assert result.adults.count == 2
        assert result.adults.price_per_person == 6590
        assert result.adults.total == 13180
        assert result.children.count == 1
        assert result.children.total == 3590
        assert result.total_price == 16770
        assert result.group_discount is None
        assert result.currency == "ISK"

    def test_premium_ages_all_counted_as_adults(self):
        result = calculate_pricing("premium, 14 year old and 10 year old", ConversationContext())

        assert isinstance(result, PricingBreakdown)
        assert result.package == "premium"
        assert result.adults.count == 2
        assert result.children is None
        assert result.total_price == 19980

    def test_nothing_detected_defaults_to_one_adult(self):
        result = calculate_pricing("how much are tickets?")
        assert result.adults.count == 1
        assert result.total_price == 6590

    def test_empty_message(self):
        result = calculate_pricing("")
        assert result.adults.count == 1


class TestVisitorCounts:

    def test_students_and_seniors(self):
        result = calculate_pricing("2 students and 1 senior")
        assert result.adults is None
        assert result.students.total == 11180
        assert result.seniors.total == 5590
        assert result.total_price == 16770

    def test_teenagers_count_as_adults(self):
        result = calculate_pricing("2 teenagers")
        assert result.adults.count == 2

    def test_age_thirteen_is_adult(self):
        result = calculate_pricing("a 13 year old and a 12 year old")
        assert result.adults.count == 1
        assert result.children.count == 1
        assert result.total_price == 10180

    @pytest.mark.parametrize("phrase", ["7 years old", "7-year-old", "7 yrs old", "7 yo"])
    def test_age_phrasings(self, phrase):
        result = calculate_pricing(f"1 adult and a {phrase}")
        assert result.children.count == 1

    def test_explicit_and_age_counts_are_summed(self):
        result = calculate_pricing("3 adults plus my 15 year old")
        assert result.adults.count == 4

    def test_teen_and_age_double_count_is_flagged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lavashow_chat.services.pricing_service"):
            result = calculate_pricing("2 teenagers, one is 15 years old")
        assert result.adults.count == 3
        assert "double counting" in caplog.text

    @pytest.mark.parametrize("message", [
        "2 adults, my brother is 3 years older",
        "how much for 2 adults to see 10,000 years old lava",
        "2 adults, the lava is 1.5 years old",
    ])
    def test_numbers_that_are_not_visitor_ages(self, message):
        result = calculate_pricing(message)
        assert result.adults.count == 2
        assert result.children is None
        assert result.total_price == 13180


class TestPackages:

    def test_context_package_wins_over_keywords(self):
        context = ConversationContext()
        context.booking_info.package_type = "premium"
        result = calculate_pricing("3 adults", context)
        assert result.package == "premium"
        assert result.total_price == 29970

    @pytest.mark.parametrize("keyword", ["premium", "VIP", "backstage", "balcony"])
    def test_premium_keywords(self, keyword):
        assert calculate_pricing(f"1 adult with {keyword}").package == "premium"

    def test_premium_converts_children_to_adults(self):
        result = calculate_pricing("premium for 2 adults and 2 kids")
        assert result.adults.count == 4
        assert result.children is None
        assert result.total_price == 39960

    def test_premium_student_rate(self):
        result = calculate_pricing("premium for 1 student")
        assert result.students.price_per_person == 8990


class TestFamilyPackage:

    def test_family_keyword(self):
        result = calculate_pricing("family tickets for 2 adults and 2 kids")
        assert isinstance(result, FamilyPackageBreakdown)
        assert result.package == "Family Package"
        assert result.base_price == 17990
        assert result.total_price == 17990

    def test_composition_cheaper_as_bundle(self):
        # 2 * 6590 + 3 * 3590 = 23950 > 17990
        result = calculate_pricing("2 adults and 3 children")
        assert isinstance(result, FamilyPackageBreakdown)

    def test_composition_cheaper_per_person(self):
        result = calculate_pricing("1 adult and 1 child")
        assert isinstance(result, PricingBreakdown)
        assert result.total_price == 10180

    def test_not_offered_for_premium(self):
        result = calculate_pricing("premium family tickets for 2 adults")
        assert isinstance(result, PricingBreakdown)
        assert result.total_price == 19980

    def test_bundle_has_no_per_category_fields(self):
        result = calculate_pricing("family visit").model_dump()
        for field in ("adults", "children", "students", "seniors"):
            assert field not in result

    def test_family_keyword_over_bundle_size_prices_per_person(self):
        # 6 * 6590 + 4 * 3590 = 53900, less 10% group discount
        result = calculate_pricing("family trip, 6 adults and 4 kids")
        assert isinstance(result, PricingBreakdown)
        assert result.adults.count == 6
        assert result.children.count == 4
        assert result.group_discount.amount == 5390
        assert result.total_price == 48510

    def test_family_keyword_with_seniors_prices_per_person(self):
        result = calculate_pricing("family visit, 2 adults and 1 senior")
        assert isinstance(result, PricingBreakdown)
        assert result.total_price == 18770


class TestGroupDiscount:

    def test_ten_percent_from_ten_visitors(self):
        result = calculate_pricing("12 adults")
        assert result.group_discount.percentage == 10
        assert result.group_discount.amount == 7908
        assert result.total_price == 71172

    def test_no_discount_below_threshold(self):
        assert calculate_pricing("9 adults").group_discount is None

    def test_discount_at_threshold(self):
        result = calculate_pricing("5 adults and 5 seniors")
        assert result.group_discount is not None


class TestInvariants:

    MESSAGES = [
        "2 adults and 1 child, classic",
        "12 adults",
        "premium 4 adults 3 students 4 seniors",
        "7 adults and 4 kids",
        "10 year old",
        "",
    ]

    @pytest.mark.parametrize("message", MESSAGES)
    def test_total_matches_categories_minus_discount(self, message):
        result = calculate_pricing(message)
        assert isinstance(result, PricingBreakdown)

        subtotal = sum(
            category.total
            for category in (result.adults, result.children, result.students, result.seniors)
            if category is not None
        )
        percentage = result.group_discount.percentage if result.group_discount else 0
        expected = Decimal(subtotal) * (100 - percentage) / 100
        assert result.total_price == int(expected.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        assert result.total_price >= 0

    @pytest.mark.parametrize("message", MESSAGES + ["premium, 5 year old and 2 kids"])
    def test_premium_never_has_children(self, message):
        result = calculate_pricing(f"premium {message}")
        assert result.children is None

    def test_idempotent(self):
        context = ConversationContext()
        first = calculate_pricing("2 adults and 1 child", context)
        second = calculate_pricing("2 adults and 1 child", context)
        assert first == second

    def test_compute_pricing_alias(self):
        assert compute_pricing is calculate_pricing
