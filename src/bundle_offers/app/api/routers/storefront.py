"""Router for the storefront offer lookup used by product pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bundle_offers.app.api.dependencies import get_storefront_consumer
from bundle_offers.app.api.models.offers import OfferGroupResponse, PricingResponse, StorefrontOfferResponse
from bundle_offers.application.storefront import StorefrontConsumer

router = APIRouter()


@router.get("/storefront/{shop}/offers", response_model=StorefrontOfferResponse)
def get_storefront_offer(
    shop: str,
    product_id: str = Query(..., description="Bare product id or a gid:// resource id"),
    unit_price: str = Query("0", description="Unit price of the product; invalid values price as 0"),
    selected_tier_id: str | None = Query(None, description="Tier the shopper picked, if any"),
    selected_quantity: int | None = Query(None, ge=1, description="Quantity the shopper picked, if any"),
    consumer: StorefrontConsumer = Depends(get_storefront_consumer),
) -> StorefrontOfferResponse:
    """
    Find the one offer group that applies to a product and price it.

    Always answers 200: a missing or unreadable published blob renders as no
    offer, with ``group`` and ``pricing`` both null.
    """
    offer = consumer.render_for_shop(
        shop,
        product_id,
        unit_price,
        selected_tier_id=selected_tier_id,
        selected_quantity=selected_quantity,
    )
    if offer is None:
        return StorefrontOfferResponse(shop=shop, product_id=product_id)
    return StorefrontOfferResponse(
        shop=shop,
        product_id=product_id,
        group=OfferGroupResponse.from_domain(offer.group),
        pricing=PricingResponse.from_result(offer.pricing, offer.group.design.currency_symbol),
    )
