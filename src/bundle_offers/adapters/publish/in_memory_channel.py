from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from bundle_offers.ports.publish_channel import PublishChannel


class InMemoryPublishChannel(PublishChannel):
    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}
        self.writes: List[Tuple[str, str]] = []

    def write(self, shop: str, payload: str) -> None:
        self._documents[shop] = payload
        self.writes.append((shop, payload))

    def read(self, shop: str) -> Optional[str]:
        return self._documents.get(shop)
