"""Offer group entities and the dict boundary they are loaded through.

Values arriving from form posts, the record store and the storefront blob are
coerced and validated once in the ``from_dict`` constructors. Everything past
this module works with typed, frozen values only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from bundle_offers.domain.common.errors import ValidationError

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED)

PLACEMENT_INSIDE_FORM = "inside_form"
PLACEMENT_ABOVE_BUTTON = "above_button"
PLACEMENTS = (PLACEMENT_INSIDE_FORM, PLACEMENT_ABOVE_BUTTON)

TEMPLATES = ("classic", "modern", "vertical")
FONT_STYLES = ("normal", "bold", "italic")
FONT_WEIGHTS = (400, 500, 600, 700)

TIER_ID_PREFIX = "offer-"
MAX_TIER_QUANTITY = 10_000


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be an integer, got {value!r}", field=field_name)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"{field_name} must be an integer, got {value!r}", field=field_name)
    return int(number)


def to_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}", field=field_name)
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be finite", field=field_name)
    return number


def parse_timestamp(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _default_title(quantity: int) -> str:
    return f"{quantity} {'Unit' if quantity == 1 else 'Units'}"


def tier_sequence_number(tier_id: str) -> int:
    """Numeric suffix of an ``offer-N`` id; 0 for ids outside that scheme."""
    suffix = tier_id.rsplit("-", 1)[-1]
    return int(suffix) if suffix.isdigit() else 0


@dataclass(frozen=True)
class OfferTier:
    """One quantity rung of an offer group."""

    id: str
    quantity: int
    discount_type: str = DISCOUNT_PERCENTAGE
    discount_value: Decimal = Decimal("0")
    label: str = ""
    preselect: bool = False
    order: int = 0
    title: str | None = None
    tag_bg_color: str | None = None

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        return _default_title(self.quantity)

    def validate(self) -> None:
        if not self.id:
            raise ValidationError("Tier id is required", field="id")
        if self.quantity < 1:
            raise ValidationError(f"Tier {self.id}: quantity must be a positive integer", field="quantity")
        if self.quantity > MAX_TIER_QUANTITY:
            raise ValidationError(f"Tier {self.id}: quantity cannot exceed {MAX_TIER_QUANTITY}", field="quantity")
        if self.discount_type not in DISCOUNT_TYPES:
            raise ValidationError(
                f"Tier {self.id}: discount type must be one of {', '.join(DISCOUNT_TYPES)}",
                field="discountType",
            )
        if self.discount_value < 0:
            raise ValidationError(f"Tier {self.id}: discount value cannot be negative", field="discountValue")
        if self.discount_type == DISCOUNT_PERCENTAGE and self.discount_value > 100:
            raise ValidationError(f"Tier {self.id}: percentage discount cannot exceed 100", field="discountValue")

    @staticmethod
    def from_dict(data: Mapping[str, Any], position: int = 0) -> "OfferTier":
        # Legacy tiers only carry discountPercent
        raw_value = _pick(data, "discountValue", "discount_value", "discountPercent", "discount_percent", default=0)
        quantity = to_int(_pick(data, "quantity", default=1), "quantity")
        title = _pick(data, "title") or None
        if title == _default_title(quantity):
            title = None
        tier = OfferTier(
            id=str(_pick(data, "id", default=f"{TIER_ID_PREFIX}{position + 1}")),
            quantity=quantity,
            discount_type=str(_pick(data, "discountType", "discount_type", default=DISCOUNT_PERCENTAGE)),
            discount_value=to_decimal(raw_value, "discountValue"),
            label=str(_pick(data, "label", default="")),
            preselect=to_bool(_pick(data, "preselect", default=False)),
            order=to_int(_pick(data, "order", default=position), "order"),
            title=title,
            tag_bg_color=_pick(data, "tagBgColor", "tag_bg_color") or None,
        )
        tier.validate()
        return tier

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "quantity": self.quantity,
            "discountType": self.discount_type,
            "discountValue": _json_number(self.discount_value),
            "label": self.label,
            "preselect": self.preselect,
            "order": self.order,
            "title": self.display_title,
        }
        if self.tag_bg_color:
            payload["tagBgColor"] = self.tag_bg_color
        return payload


@dataclass(frozen=True)
class OfferDesign:
    """Presentation options. Pricing only reads ``auto_select_best_value``."""

    template: str = "modern"
    selected_bg_color: str = "#eef2ff"
    selected_border_color: str = "#6366f1"
    selected_border_radius: int = 12
    selected_tag_bg_color: str = "#6366f1"
    selected_tag_text_color: str = "#ffffff"
    selected_text_color: str = "#1f2937"
    selected_text_size: int = 14
    selected_font_style: str = "normal"
    unselected_bg_color: str = "#ffffff"
    unselected_border_color: str = "#e5e7eb"
    unselected_tag_bg_color: str = "#f3f4f6"
    title_text_size: int = 15
    title_font_weight: int = 600
    price_text_size: int = 16
    price_font_weight: int = 700
    currency_symbol: str = "₹"
    hide_product_image: bool = False
    hide_compare_price: bool = False
    disable_variant_selection: bool = False
    use_compare_as_old_price: bool = False
    append_offer_to_title: bool = False
    show_most_popular_badge: bool = True
    auto_select_best_value: bool = True

    def validate(self) -> None:
        if self.template not in TEMPLATES:
            raise ValidationError(f"Unknown design template {self.template!r}", field="design.template")
        if self.selected_font_style not in FONT_STYLES:
            raise ValidationError(
                f"Unknown font style {self.selected_font_style!r}", field="design.selectedFontStyle"
            )
        for name in ("title_font_weight", "price_font_weight"):
            if getattr(self, name) not in FONT_WEIGHTS:
                raise ValidationError(f"Unsupported font weight {getattr(self, name)}", field=f"design.{camel_case(name)}")

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "OfferDesign":
        """Merge a partial design over the defaults, dropping unknown keys."""
        data = data or {}
        values: dict[str, Any] = {}
        for f in fields(OfferDesign):
            raw = _pick(data, camel_case(f.name), f.name)
            if raw is None:
                continue
            if isinstance(f.default, bool):
                values[f.name] = to_bool(raw)
            elif isinstance(f.default, int):
                values[f.name] = to_int(raw, f"design.{camel_case(f.name)}")
            else:
                values[f.name] = str(raw)
        design = OfferDesign(**values)
        design.validate()
        return design

    def to_dict(self) -> dict[str, Any]:
        return {camel_case(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class OfferGroup:
    """A shop-scoped bundle discount campaign.

    ``selected_products`` and ``tier_sequence`` are editor scratch data: they are
    excluded from equality, never persisted and never published.
    """

    id: str | None
    name: str
    active: bool
    product_ids: tuple[str, ...]
    tiers: tuple[OfferTier, ...]
    design: OfferDesign = field(default_factory=OfferDesign)
    placement: str = PLACEMENT_INSIDE_FORM
    created_at: datetime | None = None
    updated_at: datetime | None = None
    selected_products: tuple[Any, ...] = field(default=(), compare=False, repr=False)
    tier_sequence: int = field(default=0, compare=False, repr=False)

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def tiers_in_order(self) -> list[OfferTier]:
        return sorted(self.tiers, key=lambda t: t.order)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "OfferGroup":
        """Build a group from a store row (snake_case) or a UI/blob dict (camelCase)."""
        raw_tiers = _pick(data, "tiers", "offers", default=[])
        if not isinstance(raw_tiers, (list, tuple)):
            raise ValidationError("tiers must be a list", field="tiers")
        tiers = tuple(OfferTier.from_dict(t, position=i) for i, t in enumerate(raw_tiers))
        raw_products = _pick(data, "productIds", "product_ids", default=[])
        if not isinstance(raw_products, (list, tuple)):
            raise ValidationError("productIds must be a list", field="productIds")
        group_id = _pick(data, "id")
        placement = str(_pick(data, "placement", default=PLACEMENT_INSIDE_FORM))
        if placement not in PLACEMENTS:
            raise ValidationError(f"Unknown placement {placement!r}", field="placement")
        return OfferGroup(
            id=str(group_id) if group_id not in (None, "") else None,
            name=str(_pick(data, "name", default="")),
            active=to_bool(_pick(data, "active", default=False)),
            product_ids=tuple(str(p) for p in raw_products),
            tiers=tiers,
            design=OfferDesign.from_dict(_pick(data, "design")),
            placement=placement,
            created_at=parse_timestamp(_pick(data, "createdAt", "created_at")),
            updated_at=parse_timestamp(_pick(data, "updatedAt", "updated_at")),
            tier_sequence=max((tier_sequence_number(t.id) for t in tiers), default=0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "active": self.active,
            "productIds": list(self.product_ids),
            "tiers": [t.to_dict() for t in self.tiers],
            "design": self.design.to_dict(),
            "placement": self.placement,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
