"""
Storefront side of the published offers blob.

The blob reaches the product page embedded in markup, so it is decoded
tolerantly: anything that cannot be parsed renders as "no offers" and is
logged, never raised into the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from bundle_offers.domain.common.errors import MalformedBlob, OfferError
from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.domain.offers.operations import normalize_product_ids
from bundle_offers.domain.offers.payload import decode_published_groups
from bundle_offers.domain.pricing.engine import price_offer_group
from bundle_offers.domain.pricing.models import PricingResult
from bundle_offers.ports.publish_channel import PublishChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorefrontOffer:
    """The one group that applies to a product page, priced for that page."""

    group: OfferGroup
    pricing: PricingResult

    def to_dict(self) -> dict[str, Any]:
        return {"group": self.group.to_dict(), "pricing": self.pricing.to_dict()}


def find_group(groups: Iterable[OfferGroup], product_id: Any) -> Optional[OfferGroup]:
    """First group by position that is active, has tiers and targets the product.

    Later matches are ignored: campaigns never stack on one product.
    """
    bare = normalize_product_ids([product_id])
    if not bare:
        return None
    for group in groups:
        if group.active and group.tiers and bare[0] in group.product_ids:
            return group
    return None


class StorefrontConsumer:
    def __init__(self, channel: PublishChannel | None = None) -> None:
        self.channel = channel

    def decode_blob(self, raw: str | None) -> list[OfferGroup]:
        try:
            return decode_published_groups(raw)
        except MalformedBlob as e:
            logger.warning(f"Ignoring malformed offers blob: {e}")
            return []

    def render(
        self,
        raw: str | None,
        product_id: Any,
        unit_price: Any,
        selected_tier_id: str | None = None,
        selected_quantity: int | None = None,
    ) -> Optional[StorefrontOffer]:
        group = find_group(self.decode_blob(raw), product_id)
        if group is None:
            return None
        pricing = price_offer_group(
            group, unit_price, selected_tier_id=selected_tier_id, selected_quantity=selected_quantity
        )
        return StorefrontOffer(group=group, pricing=pricing)

    def render_for_shop(
        self,
        shop: str,
        product_id: Any,
        unit_price: Any,
        selected_tier_id: str | None = None,
        selected_quantity: int | None = None,
    ) -> Optional[StorefrontOffer]:
        """Read the shop's published blob from the channel and render it."""
        if self.channel is None:
            raise ValueError("StorefrontConsumer needs a channel to render by shop")
        try:
            raw = self.channel.read(shop)
        except OfferError as e:
            logger.warning(f"Could not read published offers for {shop}: {e}", extra={"shop": shop})
            return None
        return self.render(raw, product_id, unit_price, selected_tier_id, selected_quantity)
