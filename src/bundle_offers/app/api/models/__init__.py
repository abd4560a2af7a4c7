"""Pydantic models for API requests and responses."""

from bundle_offers.app.api.models.offers import (
    OfferGroupListResponse,
    OfferGroupPayload,
    OfferGroupResponse,
    OfferTierPayload,
    OfferTierResponse,
    PreviewRequest,
    PricingResponse,
    PublishResponse,
    SaveResponse,
    StorefrontOfferResponse,
    TierQuoteResponse,
    ToggleRequest,
)

__all__ = [
    "OfferGroupListResponse",
    "OfferGroupPayload",
    "OfferGroupResponse",
    "OfferTierPayload",
    "OfferTierResponse",
    "PreviewRequest",
    "PricingResponse",
    "PublishResponse",
    "SaveResponse",
    "StorefrontOfferResponse",
    "TierQuoteResponse",
    "ToggleRequest",
]
