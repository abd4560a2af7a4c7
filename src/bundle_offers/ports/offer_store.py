from __future__ import annotations

from typing import Protocol

from bundle_offers.domain.offers.models import OfferGroup


class OfferGroupStore(Protocol):
    """Authoritative record store. Every call is scoped by shop; ids never cross shops."""

    def list(self, shop: str) -> list[OfferGroup]: ...

    def get(self, shop: str, group_id: str) -> OfferGroup: ...

    def create(self, shop: str, group: OfferGroup) -> OfferGroup: ...

    def update(self, shop: str, group_id: str, group: OfferGroup) -> OfferGroup: ...

    def delete(self, shop: str, group_id: str) -> None: ...

    def list_active(self, shop: str) -> list[OfferGroup]: ...
