from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from bundle_offers.domain.common.errors import OfferError
from bundle_offers.domain.offers.payload import encode_published_groups
from bundle_offers.ports.offer_store import OfferGroupStore
from bundle_offers.ports.publish_channel import PublishChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishOutcome:
    shop: str
    ok: bool
    group_count: int = 0
    payload: Optional[str] = None
    error: Optional[str] = None


class OfferPublisher:
    """Overwrites a shop's storefront channel with every active group in the record store.

    Always a full resync from a fresh read, never a delta and never the value a
    caller just wrote: the channel has no versioning, so wholesale overwrite is
    what keeps deleted or deactivated groups from lingering. Failures are
    reported in the outcome and logged; the next successful mutation retries.
    """

    def __init__(self, store: OfferGroupStore, channel: PublishChannel) -> None:
        self.store = store
        self.channel = channel

    def republish(self, shop: str) -> PublishOutcome:
        try:
            groups = [g for g in self.store.list_active(shop) if g.active]
            payload = encode_published_groups(groups)
            self.channel.write(shop, payload)
        except (OfferError, ValueError) as e:
            logger.error(f"Publishing offers failed for {shop}: {e}", extra={"shop": shop})
            return PublishOutcome(shop=shop, ok=False, error=str(e))
        except Exception as e:
            # Channels may leak transport errors; the mutation has already committed
            logger.exception(f"Unexpected error publishing offers for {shop}", extra={"shop": shop})
            return PublishOutcome(shop=shop, ok=False, error=f"{type(e).__name__}: {e}")

        logger.info(f"Published {len(groups)} active offer groups for {shop}", extra={"shop": shop})
        return PublishOutcome(shop=shop, ok=True, group_count=len(groups), payload=payload)
