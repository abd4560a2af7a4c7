from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Iterable

from bundle_offers.domain.common.errors import ValidationError
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import (
    PLACEMENT_INSIDE_FORM,
    PLACEMENTS,
    TIER_ID_PREFIX,
    OfferGroup,
    OfferTier,
    camel_case,
    tier_sequence_number,
)

logger = logging.getLogger(__name__)

# gid://shopify/Product/123 -> 123
_RESOURCE_PATH = re.compile(r"^gid://[^/]+/[^/]+/")


def create_draft(defaults: OfferDefaults | None = None) -> OfferGroup:
    """Fresh unsaved group: inactive, default tiers and design, placed inside the form."""
    defaults = defaults or OfferDefaults()
    return OfferGroup(
        id=None,
        name=defaults.group_name,
        active=False,
        product_ids=(),
        tiers=defaults.tiers,
        design=defaults.design,
        placement=PLACEMENT_INSIDE_FORM,
        tier_sequence=max((tier_sequence_number(t.id) for t in defaults.tiers), default=0),
    )


def _next_sequence(group: OfferGroup) -> int:
    issued = max((tier_sequence_number(t.id) for t in group.tiers), default=0)
    return max(issued, group.tier_sequence) + 1


def add_tier(group: OfferGroup) -> OfferGroup:
    """Append a tier one unit above the largest quantity.

    Ids come from a per-group sequence that only moves forward, so an id freed by
    ``remove_tier`` is never handed out again in the same editing session.
    """
    sequence = _next_sequence(group)
    quantity = max((t.quantity for t in group.tiers), default=0) + 1
    order = max((t.order for t in group.tiers), default=-1) + 1
    tier = OfferTier(
        id=f"{TIER_ID_PREFIX}{sequence}",
        quantity=quantity,
        order=order,
    )
    return replace(group, tiers=group.tiers + (tier,), tier_sequence=sequence)


def remove_tier(group: OfferGroup, tier_id: str) -> OfferGroup:
    if not any(t.id == tier_id for t in group.tiers):
        raise ValidationError(f"Tier {tier_id} does not exist in this group", field="tiers")
    if len(group.tiers) <= 1:
        raise ValidationError("An offer group needs at least one tier", field="tiers")
    # Remaining orders are left as they are; gaps are fine.
    return replace(
        group,
        tiers=tuple(t for t in group.tiers if t.id != tier_id),
        tier_sequence=max(group.tier_sequence, tier_sequence_number(tier_id)),
    )


def reorder_tiers(group: OfferGroup, from_index: int, to_index: int) -> OfferGroup:
    """Move one tier and renumber every tier's order to its new 0-based index."""
    count = len(group.tiers)
    for index in (from_index, to_index):
        if not 0 <= index < count:
            raise ValidationError(f"Tier index {index} out of range 0..{count - 1}", field="tiers")
    tiers = list(group.tiers)
    tiers.insert(to_index, tiers.pop(from_index))
    return replace(group, tiers=tuple(replace(t, order=i) for i, t in enumerate(tiers)))


def update_tier(group: OfferGroup, tier_id: str, **changes: Any) -> OfferGroup:
    if "id" in changes or "order" in changes:
        raise ValidationError("Tier id and order cannot be edited directly", field="tiers")
    tiers = []
    found = False
    for tier in group.tiers:
        if tier.id == tier_id:
            found = True
            merged = tier.to_dict()
            merged["title"] = tier.title
            merged.update({camel_case(key): value for key, value in changes.items()})
            tier = OfferTier.from_dict(merged)
        tiers.append(tier)
    if not found:
        raise ValidationError(f"Tier {tier_id} does not exist in this group", field="tiers")
    return replace(group, tiers=tuple(tiers))


def normalize_product_ids(ids: Iterable[Any]) -> tuple[str, ...]:
    """Strip platform resource prefixes, leaving bare ids. Order kept, duplicates dropped."""
    seen: dict[str, None] = {}
    for raw in ids:
        bare = _RESOURCE_PATH.sub("", str(raw).strip())
        if bare:
            seen.setdefault(bare, None)
    return tuple(seen)


def validate_group(group: OfferGroup) -> None:
    if not group.tiers:
        raise ValidationError("An offer group needs at least one tier", field="tiers")
    tier_ids = [t.id for t in group.tiers]
    if len(set(tier_ids)) != len(tier_ids):
        raise ValidationError("Tier ids must be unique within a group", field="tiers")
    orders = [t.order for t in group.tiers]
    if len(set(orders)) != len(orders):
        raise ValidationError("Tier order values must be unique within a group", field="tiers")
    for tier in group.tiers:
        tier.validate()
    group.design.validate()
    if group.placement not in PLACEMENTS:
        raise ValidationError(f"Unknown placement {group.placement!r}", field="placement")


def normalize_for_save(group: OfferGroup, default_name: str) -> OfferGroup:
    """The form a group takes in the record store: trimmed name or placeholder, bare product ids."""
    name = group.name.strip() or default_name
    return replace(group, name=name, product_ids=normalize_product_ids(group.product_ids))


def prepare_for_save(group: OfferGroup, default_name: str) -> OfferGroup:
    """Validate and normalize a group right before it is handed to the record store."""
    validate_group(group)
    normalized = normalize_for_save(group, default_name)
    if normalized.name != group.name or normalized.product_ids != group.product_ids:
        logger.debug(f"Normalized offer group {group.id or '<draft>'} before save")
    return normalized
