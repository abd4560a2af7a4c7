"""Unit tests for the tier pricing engine."""

from __future__ import annotations

from decimal import Decimal

import pytest

from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import OfferDesign, OfferGroup, OfferTier
from bundle_offers.domain.pricing import rules
from bundle_offers.domain.pricing.engine import (
    calculate_tier_totals,
    format_price,
    price_offer_group,
    price_tiers,
    sanitize_unit_price,
)


def make_tier(tier_id: str, quantity: int, value: str, order: int, discount_type: str = "percentage", **kw) -> OfferTier:
    return OfferTier(
        id=tier_id, quantity=quantity, discount_type=discount_type, discount_value=Decimal(value), order=order, **kw
    )


def default_tiers() -> tuple[OfferTier, ...]:
    return OfferDefaults().tiers


def test_sample_price_scenario_selects_three_unit_tier():
    """2495 per unit with 0/10/20% tiers: best value is the 3-unit tier at 5988."""
    result = price_tiers(default_tiers(), Decimal("2495"), OfferDesign(auto_select_best_value=True))

    assert result.selected_tier_id == "offer-3"
    assert result.selection_reason == rules.SELECTED_BEST_VALUE
    selected = result.selected_quote
    assert selected.original_total == Decimal("7485.00")
    assert selected.discounted_total == Decimal("5988.00")
    assert selected.savings == Decimal("1497.00")
    assert selected.effective_discount_percent == Decimal("20.00")
    assert selected.price_per_unit == Decimal("1996.00")
    assert result.quotes[1].discounted_total == Decimal("4491.00")


def test_pricing_is_deterministic():
    tiers = default_tiers()
    first = price_tiers(tiers, "2495", OfferDesign())
    second = price_tiers(tiers, "2495", OfferDesign())

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_best_value_tie_goes_to_lower_order():
    tiers = (
        make_tier("offer-2", 3, "15", order=1),
        make_tier("offer-1", 2, "15", order=0),
        make_tier("offer-3", 1, "5", order=2),
    )
    result = price_tiers(tiers, "100", OfferDesign(auto_select_best_value=True))
    assert result.selected_tier_id == "offer-1"


def test_fixed_discount_never_goes_negative():
    tier = make_tier("offer-1", 1, "500", order=0, discount_type="fixed")
    original, discounted = calculate_tier_totals(Decimal("120"), tier)

    assert original == Decimal("120.00")
    assert discounted == Decimal("0.00")


def test_fixed_discount_applies_to_the_bundle_total():
    tier = make_tier("offer-2", 2, "100", order=0, discount_type="fixed")
    assert calculate_tier_totals(Decimal("250"), tier) == (Decimal("500.00"), Decimal("400.00"))


def test_money_rounds_half_up_to_cents():
    tier = make_tier("offer-1", 1, "50", order=0)
    _, discounted = calculate_tier_totals(Decimal("0.05"), tier)
    assert discounted == Decimal("0.03")


def test_shopper_choice_overrides_best_value():
    result = price_tiers(default_tiers(), "2495", OfferDesign(), selected_tier_id="offer-1")

    assert result.selected_tier_id == "offer-1"
    assert result.selection_reason == rules.SELECTED_BY_SHOPPER


def test_shopper_quantity_selects_matching_tier():
    result = price_tiers(default_tiers(), "2495", OfferDesign(), selected_quantity=2)
    assert result.selected_tier_id == "offer-2"


def test_unknown_shopper_choice_falls_back_to_auto_selection():
    result = price_tiers(default_tiers(), "2495", OfferDesign(), selected_tier_id="offer-99")
    assert result.selected_tier_id == "offer-3"
    assert result.selection_reason == rules.SELECTED_BEST_VALUE


def test_preselect_used_when_best_value_is_off():
    tiers = (
        make_tier("offer-1", 1, "0", order=0),
        make_tier("offer-2", 2, "10", order=1, preselect=True),
        make_tier("offer-3", 3, "20", order=2, preselect=True),
    )
    result = price_tiers(tiers, "100", OfferDesign(auto_select_best_value=False))

    assert result.selected_tier_id == "offer-2"
    assert result.selection_reason == rules.SELECTED_PRESELECT


def test_first_tier_by_order_when_nothing_else_applies():
    tiers = (make_tier("offer-2", 2, "10", order=1), make_tier("offer-1", 1, "0", order=0))
    result = price_tiers(tiers, "100", OfferDesign(auto_select_best_value=False))

    assert result.selected_tier_id == "offer-1"
    assert result.selection_reason == rules.SELECTED_FIRST_TIER
    assert [q.tier.id for q in result.quotes] == ["offer-1", "offer-2"]


def test_exactly_one_quote_is_selected():
    result = price_tiers(default_tiers(), "2495", OfferDesign())
    assert sum(q.is_selected for q in result.quotes) == 1


def test_empty_tiers_select_nothing():
    result = price_tiers((), "100")
    assert result.selected_tier_id is None
    assert result.quotes == ()


@pytest.mark.parametrize("value", ["-10", "NaN", "Infinity", "abc", None, "1e27", "1e1000"])
def test_invalid_unit_price_prices_as_zero(value):
    assert sanitize_unit_price(value) == Decimal("0")
    result = price_tiers(default_tiers(), value, OfferDesign())
    assert all(q.discounted_total == Decimal("0.00") for q in result.quotes)
    assert all(q.effective_discount_percent == Decimal("0") for q in result.quotes)


def test_most_popular_badge_hidden_when_disabled():
    result = price_tiers(default_tiers(), "2495", OfferDesign(show_most_popular_badge=False))

    assert result.quotes[1].show_badge is True
    assert result.quotes[2].show_badge is False
    assert result.quotes[2].to_dict()["label"] == ""


def test_price_offer_group_uses_group_design():
    group = OfferGroup(
        id="g-1",
        name="Bundle",
        active=True,
        product_ids=("1",),
        tiers=default_tiers(),
        design=OfferDesign(auto_select_best_value=False),
    )
    result = price_offer_group(group, "2495")
    assert result.selected_tier_id == "offer-1"


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("7485.00"), "₹7,485"),
        (Decimal("5988.5"), "₹5,988.5"),
        (Decimal("1234567.89"), "₹12,34,567.89"),
        (Decimal("100000"), "₹1,00,000"),
        (Decimal("999"), "₹999"),
        (Decimal("0"), "₹0"),
    ],
)
def test_format_price(amount, expected):
    assert format_price(amount) == expected


def test_format_price_custom_symbol():
    assert format_price(Decimal("19.90"), "$") == "$19.9"


def test_largest_accepted_price_and_quantity_still_price():
    tier = make_tier("offer-1", 10_000, "33", 0)
    original, discounted = calculate_tier_totals(Decimal("1e12"), tier)
    assert original == Decimal("10000000000000000.00")
    assert discounted == Decimal("6700000000000000.00")
