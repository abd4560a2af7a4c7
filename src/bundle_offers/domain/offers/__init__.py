from __future__ import annotations

from bundle_offers.domain.offers.config import MOST_POPULAR_LABEL, OfferDefaults
from bundle_offers.domain.offers.models import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENTAGE,
    PLACEMENT_ABOVE_BUTTON,
    PLACEMENT_INSIDE_FORM,
    OfferDesign,
    OfferGroup,
    OfferTier,
)
from bundle_offers.domain.offers.operations import (
    add_tier,
    create_draft,
    normalize_for_save,
    normalize_product_ids,
    prepare_for_save,
    remove_tier,
    reorder_tiers,
    update_tier,
    validate_group,
)

__all__ = [
    "DISCOUNT_FIXED",
    "DISCOUNT_PERCENTAGE",
    "MOST_POPULAR_LABEL",
    "PLACEMENT_ABOVE_BUTTON",
    "PLACEMENT_INSIDE_FORM",
    "OfferDefaults",
    "OfferDesign",
    "OfferGroup",
    "OfferTier",
    "add_tier",
    "create_draft",
    "normalize_for_save",
    "normalize_product_ids",
    "prepare_for_save",
    "remove_tier",
    "reorder_tiers",
    "update_tier",
    "validate_group",
]
