from __future__ import annotations

from typing import Optional, Protocol


class PublishChannel(Protocol):
    """Public-read key/value channel holding one JSON document per shop."""

    def write(self, shop: str, payload: str) -> None: ...

    def read(self, shop: str) -> Optional[str]: ...
