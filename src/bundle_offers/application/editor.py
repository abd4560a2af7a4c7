"""
Editor session for one offer group at a time.

The session keeps a working copy and a baseline snapshot of the last known
persisted state. "Unsaved changes" is structural equality between the two
(transient picker data excluded), so it is true exactly when a save would
change what is persisted.

States:
  NO_ACTIVE_GROUP  nothing open
  CLEAN            working copy equals the baseline
  DIRTY            working copy differs, or there is no baseline (new draft)
  SAVING           a save is in flight; edits are still accepted

``save`` runs the whole round trip synchronously. Callers that need the
network call to outlive the view use ``begin_save`` / ``complete_save`` /
``fail_save`` directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional

from bundle_offers.application.offer_service import OfferService, SaveResult
from bundle_offers.domain.common.errors import ValidationError
from bundle_offers.domain.offers import operations
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import OfferDesign, OfferGroup, camel_case

logger = logging.getLogger(__name__)

NO_ACTIVE_GROUP = "NoActiveGroup"
CLEAN = "Clean"
DIRTY = "Dirty"
SAVING = "Saving"


@dataclass(frozen=True)
class SaveTicket:
    """Handle for an in-flight save: what was sent, and which editing session sent it."""

    generation: int
    snapshot: OfferGroup
    sent_from: OfferGroup


class EditorSession:
    def __init__(self, service: OfferService, shop: str, defaults: OfferDefaults | None = None) -> None:
        self.service = service
        self.shop = shop
        self.defaults = defaults or OfferDefaults(group_name=service.settings.default_group_name)
        self.working: Optional[OfferGroup] = None
        self.baseline: Optional[OfferGroup] = None
        self.state = NO_ACTIVE_GROUP
        self.last_error: Optional[Exception] = None
        # Bumped whenever a different group is opened; stale save results are dropped
        self._generation = 0

    @property
    def has_unsaved_changes(self) -> bool:
        if self.working is None:
            return False
        if self.baseline is None:
            return True
        # Compare what a save would send, not the raw form input
        default_name = self.service.settings.default_group_name
        return operations.normalize_for_save(self.working, default_name) != operations.normalize_for_save(
            self.baseline, default_name
        )

    @property
    def can_discard(self) -> bool:
        return self.baseline is not None

    def _refresh_state(self) -> None:
        if self.state == SAVING:
            return
        if self.working is None:
            self.state = NO_ACTIVE_GROUP
        else:
            self.state = DIRTY if self.has_unsaved_changes else CLEAN

    def _open(self, working: OfferGroup, baseline: Optional[OfferGroup]) -> None:
        self._generation += 1
        self.working = working
        self.baseline = baseline
        self.last_error = None
        self.state = NO_ACTIVE_GROUP
        self._refresh_state()

    # -- opening and closing -------------------------------------------------

    def select_group(self, persisted: OfferGroup) -> None:
        if persisted.id is None:
            raise ValidationError("Only persisted groups can be selected; use create_new for drafts", field="id")
        self._open(persisted, persisted)

    def create_new(self) -> None:
        self._open(operations.create_draft(self.defaults), None)

    def close(self) -> None:
        self._generation += 1
        self.working = None
        self.baseline = None
        self.state = NO_ACTIVE_GROUP

    def reload_baseline(self, persisted_groups: Iterable[OfferGroup]) -> None:
        """Adopt a fresh server copy of the open group after an external reload.

        A clean working copy follows the fresh copy; a dirty one keeps its edits
        and is compared against the fresh copy from now on.
        """
        if self.working is None or self.working.id is None:
            return
        fresh = next((g for g in persisted_groups if g.id == self.working.id), None)
        if fresh is None:
            return
        if self.state == CLEAN:
            self.working = replace(fresh, selected_products=self.working.selected_products)
        else:
            self.working = replace(self.working, created_at=fresh.created_at, updated_at=fresh.updated_at)
        self.baseline = fresh
        self._refresh_state()

    # -- mutations -----------------------------------------------------------

    def _require_working(self) -> OfferGroup:
        if self.working is None:
            raise ValidationError("No offer group is open in the editor")
        return self.working

    def apply(self, mutation: Callable[..., OfferGroup], *args: Any, **kwargs: Any) -> OfferGroup:
        """Run a pure ``OfferGroup -> OfferGroup`` mutation on the working copy."""
        updated = mutation(self._require_working(), *args, **kwargs)
        self.working = updated
        self._refresh_state()
        return updated

    def update_fields(self, **changes: Any) -> OfferGroup:
        allowed = {"name", "active", "placement"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Cannot edit {', '.join(sorted(unknown))} directly")
        return self.apply(lambda g: replace(g, **changes))

    def set_products(self, product_ids: Iterable[Any], selected_products: Iterable[Any] = ()) -> OfferGroup:
        ids = operations.normalize_product_ids(product_ids)
        return self.apply(lambda g: replace(g, product_ids=ids, selected_products=tuple(selected_products)))

    def update_design(self, **changes: Any) -> OfferGroup:
        def _merge(group: OfferGroup) -> OfferGroup:
            merged = group.design.to_dict()
            merged.update({camel_case(key): value for key, value in changes.items()})
            return replace(group, design=OfferDesign.from_dict(merged))

        return self.apply(_merge)

    def add_tier(self) -> OfferGroup:
        return self.apply(operations.add_tier)

    def remove_tier(self, tier_id: str) -> OfferGroup:
        return self.apply(operations.remove_tier, tier_id)

    def reorder_tiers(self, from_index: int, to_index: int) -> OfferGroup:
        return self.apply(operations.reorder_tiers, from_index, to_index)

    def update_tier(self, tier_id: str, **changes: Any) -> OfferGroup:
        return self.apply(operations.update_tier, tier_id, **changes)

    # -- discard and save ----------------------------------------------------

    def discard(self) -> None:
        """Reset the working copy to the baseline. No-op for a never-saved draft."""
        if self.baseline is None or self.state == SAVING:
            return
        self.working = replace(self.baseline, selected_products=())
        self._refresh_state()

    def begin_save(self) -> SaveTicket:
        working = self._require_working()
        prepared = operations.prepare_for_save(working, self.service.settings.default_group_name)
        self.state = SAVING
        self.last_error = None
        return SaveTicket(generation=self._generation, snapshot=prepared, sent_from=working)

    def complete_save(self, ticket: SaveTicket, persisted: OfferGroup) -> None:
        if ticket.generation != self._generation:
            logger.info(f"Save of offer group {persisted.id} finished after the editor moved on")
            return
        stored_fields = {
            "id": persisted.id,
            "created_at": persisted.created_at,
            "updated_at": persisted.updated_at,
        }
        # The baseline is what was sent, not a re-read: later edits stay dirty
        self.baseline = replace(ticket.snapshot, **stored_fields)
        if self.working == ticket.sent_from:
            # No edits while in flight: adopt the normalized form that was stored
            self.working = replace(self.baseline, selected_products=self.working.selected_products)
        elif self.working is not None:
            self.working = replace(self.working, **stored_fields)
        self.state = DIRTY
        self._refresh_state()

    def fail_save(self, ticket: SaveTicket, error: Exception) -> None:
        if ticket.generation != self._generation:
            logger.warning(f"Save failed after the editor moved on: {error}")
            return
        self.last_error = error
        self.state = DIRTY

    def save(self) -> SaveResult:
        ticket = self.begin_save()
        deferred: list[tuple[Callable[..., Any], tuple[Any, ...]]] = []
        try:
            result = self.service.save(
                self.shop, ticket.snapshot, schedule=lambda func, *args: deferred.append((func, args))
            )
        except Exception as e:
            self.fail_save(ticket, e)
            raise
        # Publication runs only once the editor has reached Clean and holds the stored id
        self.complete_save(ticket, result.group)
        for func, args in deferred:
            self.service.schedule(func, *args)
        return result
