"""
Tier pricing engine.

Pure functions only: the editor preview, the storefront endpoint and the CLI
all call ``price_offer_group`` so the selected tier and the totals they show
can never disagree. No I/O and no clock reads happen here.

Selection precedence:
  1. the tier the shopper explicitly picked,
  2. best value (largest discount value, lowest order wins ties) when the
     group's design asks for it,
  3. the first preselected tier by order,
  4. the first tier by order.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Sequence

from bundle_offers.domain.offers.config import MOST_POPULAR_LABEL
from bundle_offers.domain.offers.models import DISCOUNT_PERCENTAGE, OfferDesign, OfferGroup, OfferTier
from bundle_offers.domain.pricing import rules
from bundle_offers.domain.pricing.models import PricingResult, TierQuote

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
# Totals stay well inside the default 28-digit decimal context below this
MAX_UNIT_PRICE = Decimal("1e12")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sanitize_unit_price(value: Any) -> Decimal:
    """Catalog price anomalies (negative, NaN, inf, absurdly large, garbage) price as 0 instead of failing."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning(f"Unparseable unit price {value!r}; pricing at 0")
        return ZERO
    if not price.is_finite() or price < 0:
        logger.warning(f"Invalid unit price {value!r}; pricing at 0")
        return ZERO
    if price > MAX_UNIT_PRICE:
        logger.warning(f"Unit price {value!r} exceeds {MAX_UNIT_PRICE:f}; pricing at 0")
        return ZERO
    return price


def calculate_tier_totals(unit_price: Decimal, tier: OfferTier) -> tuple[Decimal, Decimal]:
    """Return ``(original_total, discounted_total)`` rounded to cents."""
    original = unit_price * tier.quantity
    if tier.discount_type == DISCOUNT_PERCENTAGE:
        discounted = original * (HUNDRED - tier.discount_value) / HUNDRED
    else:
        discounted = max(ZERO, original - tier.discount_value)
    return _money(original), _money(discounted)


def resolve_selected_tier(
    ordered_tiers: Sequence[OfferTier],
    auto_select_best_value: bool,
    selected_tier_id: str | None = None,
    selected_quantity: int | None = None,
) -> tuple[OfferTier | None, str | None]:
    if not ordered_tiers:
        return None, None

    if selected_tier_id is not None:
        for tier in ordered_tiers:
            if tier.id == selected_tier_id:
                return tier, rules.SELECTED_BY_SHOPPER
    if selected_quantity is not None:
        for tier in ordered_tiers:
            if tier.quantity == selected_quantity:
                return tier, rules.SELECTED_BY_SHOPPER

    if auto_select_best_value:
        best = ordered_tiers[0]
        for tier in ordered_tiers[1:]:
            # Strictly greater, so the earliest tier keeps a tie
            if tier.discount_value > best.discount_value:
                best = tier
        return best, rules.SELECTED_BEST_VALUE

    for tier in ordered_tiers:
        if tier.preselect:
            return tier, rules.SELECTED_PRESELECT
    return ordered_tiers[0], rules.SELECTED_FIRST_TIER


def _show_badge(tier: OfferTier, design: OfferDesign) -> bool:
    if not tier.label:
        return False
    return design.show_most_popular_badge or tier.label != MOST_POPULAR_LABEL


def price_tiers(
    tiers: Sequence[OfferTier],
    unit_price: Any,
    design: OfferDesign | None = None,
    selected_tier_id: str | None = None,
    selected_quantity: int | None = None,
) -> PricingResult:
    design = design or OfferDesign()
    price = sanitize_unit_price(unit_price)
    # sorted() is stable, so equal orders keep their stored position
    ordered = sorted(tiers, key=lambda t: t.order)
    selected, reason = resolve_selected_tier(
        ordered, design.auto_select_best_value, selected_tier_id, selected_quantity
    )

    quotes = []
    for tier in ordered:
        original, discounted = calculate_tier_totals(price, tier)
        savings = original - discounted
        effective_pct = _money(savings / original * HUNDRED) if original > 0 else ZERO
        quotes.append(
            TierQuote(
                tier=tier,
                original_total=original,
                discounted_total=discounted,
                savings=savings,
                effective_discount_percent=effective_pct,
                price_per_unit=_money(discounted / tier.quantity),
                is_selected=selected is not None and tier.id == selected.id,
                show_badge=_show_badge(tier, design),
            )
        )
    return PricingResult(
        unit_price=price,
        quotes=tuple(quotes),
        selected_tier_id=selected.id if selected else None,
        selection_reason=reason,
    )


def price_offer_group(
    group: OfferGroup,
    unit_price: Any,
    selected_tier_id: str | None = None,
    selected_quantity: int | None = None,
) -> PricingResult:
    return price_tiers(
        group.tiers,
        unit_price,
        design=group.design,
        selected_tier_id=selected_tier_id,
        selected_quantity=selected_quantity,
    )


def _indian_grouping(digits: str) -> str:
    """Group as en-IN does: the last three digits, then pairs (``12,34,567``)."""
    if len(digits) <= 3:
        return digits
    head, groups = digits[:-3], [digits[-3:]]
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    return ",".join([head] + groups)


def format_price(amount: Decimal, currency_symbol: str = "₹") -> str:
    """Render at most two decimals with en-IN digit grouping, e.g. ``₹1,00,000`` or ``₹5,988.5``."""
    rounded = _money(amount)
    whole, cents = f"{abs(rounded):.2f}".split(".")
    text = _indian_grouping(whole)
    cents = cents.rstrip("0")
    if cents:
        text = f"{text}.{cents}"
    if rounded < 0:
        text = f"-{text}"
    return f"{currency_symbol}{text}"
