from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from bundle_offers.domain.common.errors import NotFound
from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.ports.offer_store import OfferGroupStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(groups: list[OfferGroup]) -> list[OfferGroup]:
    groups = sorted(groups, key=lambda g: g.id or "")
    return sorted(groups, key=lambda g: g.updated_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)


class InMemoryOfferGroupStore(OfferGroupStore):
    """Record store kept in process memory, keyed by ``(shop, id)``."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._rows: Dict[Tuple[str, str], OfferGroup] = {}
        self._clock = clock or _utcnow
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def list(self, shop: str) -> list[OfferGroup]:
        return _newest_first([g for (row_shop, _), g in self._rows.items() if row_shop == shop])

    def get(self, shop: str, group_id: str) -> OfferGroup:
        try:
            return self._rows[(shop, group_id)]
        except KeyError:
            raise NotFound(shop, group_id) from None

    def create(self, shop: str, group: OfferGroup) -> OfferGroup:
        now = self._clock()
        persisted = replace(group, id=self._id_factory(), created_at=now, updated_at=now, selected_products=())
        self._rows[(shop, persisted.id)] = persisted
        return persisted

    def update(self, shop: str, group_id: str, group: OfferGroup) -> OfferGroup:
        current = self.get(shop, group_id)
        persisted = replace(
            group,
            id=group_id,
            created_at=current.created_at,
            updated_at=self._clock(),
            selected_products=(),
        )
        self._rows[(shop, group_id)] = persisted
        return persisted

    def delete(self, shop: str, group_id: str) -> None:
        if self._rows.pop((shop, group_id), None) is None:
            raise NotFound(shop, group_id)

    def list_active(self, shop: str) -> list[OfferGroup]:
        return [g for g in self.list(shop) if g.active]
