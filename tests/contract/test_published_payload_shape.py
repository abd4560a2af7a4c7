"""Contract tests for the storefront-readable offers payload.

Theme markup reads these keys directly, so renaming or dropping any of them
breaks live storefronts.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

from bundle_offers.application.publisher import OfferPublisher
from bundle_offers.adapters.publish.in_memory_channel import InMemoryPublishChannel
from bundle_offers.adapters.store.in_memory_store import InMemoryOfferGroupStore
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import OfferGroup, OfferTier
from bundle_offers.domain.offers.payload import load_schema, validate_published

GROUP_KEYS = {"id", "name", "active", "productIds", "tiers", "design", "placement", "createdAt", "updatedAt"}
TIER_KEYS = {"id", "quantity", "discountType", "discountValue", "label", "preselect", "order", "title"}
DESIGN_KEYS = {
    "template",
    "selectedBgColor",
    "selectedBorderColor",
    "selectedBorderRadius",
    "selectedTagBgColor",
    "selectedTagTextColor",
    "selectedTextColor",
    "selectedTextSize",
    "selectedFontStyle",
    "unselectedBgColor",
    "unselectedBorderColor",
    "unselectedTagBgColor",
    "titleTextSize",
    "titleFontWeight",
    "priceTextSize",
    "priceFontWeight",
    "currencySymbol",
    "hideProductImage",
    "hideComparePrice",
    "disableVariantSelection",
    "useCompareAsOldPrice",
    "appendOfferToTitle",
    "showMostPopularBadge",
    "autoSelectBestValue",
}


def _published_payload() -> list[dict]:
    store = InMemoryOfferGroupStore(clock=lambda: datetime(2024, 6, 1, tzinfo=timezone.utc))
    channel = InMemoryPublishChannel()
    store.create(
        "shop-a.myshopify.com",
        OfferGroup(
            id=None,
            name="Tee bundle",
            active=True,
            product_ids=("111", "222"),
            tiers=OfferDefaults().tiers
            + (OfferTier(id="offer-4", quantity=5, discount_type="fixed", discount_value=Decimal("99.5"), order=3),),
        ),
    )
    outcome = OfferPublisher(store, channel).republish("shop-a.myshopify.com")
    assert outcome.ok
    return json.loads(channel.read("shop-a.myshopify.com"))


def test_payload_is_a_list_of_groups_with_stable_keys():
    payload = _published_payload()

    assert isinstance(payload, list)
    assert set(payload[0].keys()) == GROUP_KEYS
    assert set(payload[0]["design"].keys()) == DESIGN_KEYS


def test_tier_shape_and_types():
    tiers = _published_payload()[0]["tiers"]

    for tier in tiers:
        assert TIER_KEYS <= set(tier.keys())
        assert isinstance(tier["quantity"], int)
        assert isinstance(tier["discountValue"], (int, float))
        assert tier["discountType"] in ("percentage", "fixed")
    assert tiers[1]["discountValue"] == 10
    assert tiers[3]["discountValue"] == 99.5
    assert tiers[0]["title"] == "1 Unit"


def test_product_ids_are_bare_strings():
    payload = _published_payload()
    assert payload[0]["productIds"] == ["111", "222"]


def test_timestamps_are_iso_strings():
    group = _published_payload()[0]
    assert group["createdAt"] == "2024-06-01T00:00:00+00:00"
    assert group["updatedAt"] == group["createdAt"]


def test_payload_validates_against_packaged_schema():
    schema = load_schema()
    assert schema["type"] == "array"
    validate_published(_published_payload())
