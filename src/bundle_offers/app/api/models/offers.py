"""Pydantic models for offer group API requests and responses.

Field names are snake_case in Python and camelCase on the wire, matching the
published storefront shape.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.domain.pricing.engine import format_price
from bundle_offers.domain.pricing.models import PricingResult


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OfferTierPayload(CamelModel):
    """One tier as posted by the editor. Strings from form fields are accepted for numbers."""

    id: str | None = None
    quantity: int | str = 1
    discount_type: str = "percentage"
    discount_value: Decimal | str | None = None
    discount_percent: Decimal | str | None = Field(None, description="Legacy percentage-only field")
    label: str = ""
    preselect: bool = False
    order: int | None = None
    title: str | None = None
    tag_bg_color: str | None = None


class OfferGroupPayload(CamelModel):
    id: str | None = None
    name: str = ""
    active: bool = False
    product_ids: list[str | int] = Field(default_factory=list)
    tiers: list[OfferTierPayload] = Field(default_factory=list)
    design: dict[str, Any] = Field(default_factory=dict, description="Partial design, merged over defaults")
    placement: str = "inside_form"

    def to_domain(self) -> OfferGroup:
        return OfferGroup.from_dict(self.model_dump(by_alias=True, exclude_none=True))


class OfferTierResponse(CamelModel):
    id: str
    quantity: int
    discount_type: str
    discount_value: int | float
    label: str
    preselect: bool
    order: int
    title: str
    tag_bg_color: str | None = None


class OfferGroupResponse(CamelModel):
    id: str | None
    name: str
    active: bool
    product_ids: list[str]
    tiers: list[OfferTierResponse]
    design: dict[str, Any]
    placement: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, group: OfferGroup) -> "OfferGroupResponse":
        return cls.model_validate(group.to_dict())


class OfferGroupListResponse(CamelModel):
    items: list[OfferGroupResponse]


class SaveResponse(CamelModel):
    group: OfferGroupResponse
    created: bool


class ToggleRequest(CamelModel):
    active: bool | None = Field(None, description="Target state; omitted flips the current state")


class PublishResponse(CamelModel):
    shop: str
    ok: bool
    group_count: int = 0
    error: str | None = None


class TierQuoteResponse(CamelModel):
    tier_id: str
    title: str
    quantity: int
    discount_type: str
    discount_value: str
    label: str
    original_total: str
    discounted_total: str
    savings: str
    effective_discount_percent: str
    price_per_unit: str
    is_selected: bool
    formatted_original_total: str
    formatted_discounted_total: str


class PricingResponse(CamelModel):
    unit_price: str
    selected_tier_id: str | None
    selection_reason: str | None
    tiers: list[TierQuoteResponse]

    @classmethod
    def from_result(cls, result: PricingResult, currency_symbol: str) -> "PricingResponse":
        tiers = []
        for quote in result.quotes:
            data = quote.to_dict()
            data["formattedOriginalTotal"] = format_price(quote.original_total, currency_symbol)
            data["formattedDiscountedTotal"] = format_price(quote.discounted_total, currency_symbol)
            tiers.append(TierQuoteResponse.model_validate(data))
        return cls(
            unit_price=str(result.unit_price),
            selected_tier_id=result.selected_tier_id,
            selection_reason=result.selection_reason,
            tiers=tiers,
        )


class PreviewRequest(CamelModel):
    group: OfferGroupPayload
    unit_price: Decimal | str | None = Field(None, description="Defaults to the sample price when omitted")
    selected_tier_id: str | None = None
    selected_quantity: int | None = None


class StorefrontOfferResponse(CamelModel):
    shop: str
    product_id: str
    group: OfferGroupResponse | None = None
    pricing: PricingResponse | None = None
