from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from bundle_offers.domain.offers.models import OfferTier


@dataclass(frozen=True)
class TierQuote:
    """Priced view of one tier for a given unit price."""

    tier: OfferTier
    original_total: Decimal
    discounted_total: Decimal
    savings: Decimal
    effective_discount_percent: Decimal
    price_per_unit: Decimal
    is_selected: bool
    show_badge: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "tierId": self.tier.id,
            "title": self.tier.display_title,
            "quantity": self.tier.quantity,
            "discountType": self.tier.discount_type,
            "discountValue": str(self.tier.discount_value),
            "label": self.tier.label if self.show_badge else "",
            "originalTotal": str(self.original_total),
            "discountedTotal": str(self.discounted_total),
            "savings": str(self.savings),
            "effectiveDiscountPercent": str(self.effective_discount_percent),
            "pricePerUnit": str(self.price_per_unit),
            "isSelected": self.is_selected,
        }


@dataclass(frozen=True)
class PricingResult:
    unit_price: Decimal
    quotes: tuple[TierQuote, ...]
    selected_tier_id: str | None
    selection_reason: str | None

    @property
    def selected_quote(self) -> TierQuote | None:
        for quote in self.quotes:
            if quote.is_selected:
                return quote
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "unitPrice": str(self.unit_price),
            "selectedTierId": self.selected_tier_id,
            "selectionReason": self.selection_reason,
            "tiers": [q.to_dict() for q in self.quotes],
        }
