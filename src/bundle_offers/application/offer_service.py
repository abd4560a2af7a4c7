from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from bundle_offers.application.publisher import OfferPublisher, PublishOutcome
from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.domain.offers.operations import prepare_for_save
from bundle_offers.ports.offer_store import OfferGroupStore
from bundle_offers.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Same shape as fastapi.BackgroundTasks.add_task
Scheduler = Callable[..., Any]


def run_inline(func: Callable[..., Any], *args: Any) -> None:
    func(*args)


@dataclass(frozen=True)
class SaveResult:
    group: OfferGroup
    created: bool


class OfferService:
    """Admin-side operations on offer groups.

    Every mutation commits to the record store first and then schedules a
    republish. The mutation's result never depends on the republish: a failed
    publish is logged by the publisher and healed by the next mutation or by
    an explicit ``republish``.
    """

    def __init__(
        self,
        store: OfferGroupStore,
        publisher: OfferPublisher,
        settings: Settings | None = None,
        schedule: Optional[Scheduler] = None,
    ) -> None:
        self.store = store
        self.publisher = publisher
        self.settings = settings or get_settings()
        self.schedule = schedule or run_inline

    def _schedule_publish(self, shop: str, schedule: Optional[Scheduler]) -> None:
        (schedule or self.schedule)(self.publisher.republish, shop)

    def list_groups(self, shop: str) -> list[OfferGroup]:
        return self.store.list(shop)

    def get_group(self, shop: str, group_id: str) -> OfferGroup:
        return self.store.get(shop, group_id)

    def save(self, shop: str, group: OfferGroup, schedule: Optional[Scheduler] = None) -> SaveResult:
        """Create the group when it has no id, otherwise update it by id."""
        prepared = prepare_for_save(group, self.settings.default_group_name)
        if prepared.id is None:
            persisted = self.store.create(shop, prepared)
            created = True
        else:
            persisted = self.store.update(shop, prepared.id, prepared)
            created = False
        logger.info(
            f"{'Created' if created else 'Updated'} offer group {persisted.id} (active={persisted.active})",
            extra={"shop": shop},
        )
        self._schedule_publish(shop, schedule)
        return SaveResult(group=persisted, created=created)

    def set_active(
        self, shop: str, group_id: str, active: bool, schedule: Optional[Scheduler] = None
    ) -> SaveResult:
        current = self.store.get(shop, group_id)
        return self.save(shop, replace(current, active=active), schedule=schedule)

    def delete(self, shop: str, group_id: str, schedule: Optional[Scheduler] = None) -> None:
        self.store.delete(shop, group_id)
        logger.info(f"Deleted offer group {group_id}", extra={"shop": shop})
        self._schedule_publish(shop, schedule)

    def republish(self, shop: str) -> PublishOutcome:
        return self.publisher.republish(shop)
