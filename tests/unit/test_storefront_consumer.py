"""Unit tests for the storefront consumer."""

from __future__ import annotations

import html
from dataclasses import replace
from decimal import Decimal
from unittest.mock import Mock

import pytest

from bundle_offers.adapters.publish.in_memory_channel import InMemoryPublishChannel
from bundle_offers.application.storefront import StorefrontConsumer, find_group
from bundle_offers.domain.common.errors import PublishFailure
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.domain.offers.payload import encode_published_groups

SHOP = "shop-a.myshopify.com"


def make_group(group_id: str, product_ids, active: bool = True, name: str = "Bundle") -> OfferGroup:
    return OfferGroup(
        id=group_id,
        name=name,
        active=active,
        product_ids=tuple(product_ids),
        tiers=OfferDefaults().tiers,
    )


@pytest.fixture
def consumer() -> StorefrontConsumer:
    return StorefrontConsumer()


def test_first_matching_group_by_position_wins() -> None:
    groups = [make_group("g-1", ["1"]), make_group("g-2", ["2", "3"]), make_group("g-3", ["3"])]
    assert find_group(groups, "3").id == "g-2"


def test_product_id_may_be_a_resource_path() -> None:
    groups = [make_group("g-1", ["123"])]
    assert find_group(groups, "gid://shopify/Product/123").id == "g-1"


def test_inactive_or_tierless_groups_never_match() -> None:
    groups = [make_group("g-1", ["1"], active=False), replace(make_group("g-2", ["1"]), tiers=()), make_group("g-3", ["1"])]
    assert find_group(groups, "1").id == "g-3"


def test_no_match_returns_none() -> None:
    assert find_group([make_group("g-1", ["1"])], "2") is None
    assert find_group([make_group("g-1", ["1"])], "") is None


def test_render_decodes_escaped_blob_and_prices(consumer: StorefrontConsumer) -> None:
    raw = html.escape(encode_published_groups([make_group("g-1", ["111"], name='"Best" & cheapest')]))

    offer = consumer.render(raw, "111", "2495")

    assert offer.group.name == '"Best" & cheapest'
    assert offer.pricing.selected_tier_id == "offer-3"
    assert offer.pricing.selected_quote.discounted_total == Decimal("5988.00")


def test_out_of_range_catalog_price_renders_at_zero(consumer: StorefrontConsumer) -> None:
    raw = encode_published_groups([make_group("g-1", ["1"])])

    offer = consumer.render(raw, "1", "1e27")

    assert offer.group.id == "g-1"
    assert all(q.discounted_total == Decimal("0.00") for q in offer.pricing.quotes)


def test_render_honours_shopper_choice(consumer: StorefrontConsumer) -> None:
    raw = encode_published_groups([make_group("g-1", ["111"])])
    offer = consumer.render(raw, "111", "2495", selected_tier_id="offer-2")
    assert offer.pricing.selected_tier_id == "offer-2"


@pytest.mark.parametrize("raw", ["{broken", "&quot;oops", '[{"id": 1}]'])
def test_malformed_blob_renders_no_offer(consumer: StorefrontConsumer, raw: str) -> None:
    assert consumer.decode_blob(raw) == []
    assert consumer.render(raw, "111", "2495") is None


def test_missing_blob_renders_no_offer(consumer: StorefrontConsumer) -> None:
    assert consumer.render(None, "111", "2495") is None


def test_render_for_shop_reads_the_channel() -> None:
    channel = InMemoryPublishChannel()
    channel.write(SHOP, encode_published_groups([make_group("g-1", ["111"])]))

    offer = StorefrontConsumer(channel).render_for_shop(SHOP, "111", "100")

    assert offer.group.id == "g-1"


def test_render_for_shop_fails_soft_when_channel_errors() -> None:
    channel = Mock()
    channel.read.side_effect = PublishFailure("metafield API down")
    assert StorefrontConsumer(channel).render_for_shop(SHOP, "111", "100") is None


def test_render_for_shop_needs_a_channel(consumer: StorefrontConsumer) -> None:
    with pytest.raises(ValueError):
        consumer.render_for_shop(SHOP, "111", "100")
