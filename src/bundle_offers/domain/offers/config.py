from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from bundle_offers.domain.offers.models import DISCOUNT_PERCENTAGE, OfferDesign, OfferTier

MOST_POPULAR_LABEL = "Most Popular"


def _default_tiers() -> tuple[OfferTier, ...]:
    return (
        OfferTier(id="offer-1", quantity=1, order=0),
        OfferTier(
            id="offer-2",
            quantity=2,
            discount_type=DISCOUNT_PERCENTAGE,
            discount_value=Decimal("10"),
            label="Save 10%",
            order=1,
        ),
        OfferTier(
            id="offer-3",
            quantity=3,
            discount_type=DISCOUNT_PERCENTAGE,
            discount_value=Decimal("20"),
            label=MOST_POPULAR_LABEL,
            order=2,
        ),
    )


@dataclass(frozen=True)
class OfferDefaults:
    group_name: str = "New Quantity Offer"
    tiers: tuple[OfferTier, ...] = field(default_factory=_default_tiers)
    design: OfferDesign = field(default_factory=OfferDesign)
    sample_unit_price: Decimal = Decimal("2495")  # editor preview price when no product is picked
