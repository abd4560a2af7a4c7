from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from bundle_offers.domain.common.errors import PublishFailure
from bundle_offers.ports.publish_channel import PublishChannel
from bundle_offers.settings import get_settings

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class FilePublishChannel(PublishChannel):
    """Writes each shop's document to ``<output_dir>/<shop>/<namespace>.<key>.json``."""

    def __init__(self, output_dir: str | None = None, namespace: str | None = None, key: str | None = None) -> None:
        settings = get_settings()
        self.output_dir = Path(output_dir or settings.output_dir)
        self.namespace = namespace or settings.publish_namespace
        self.key = key or settings.publish_key

    def _path(self, shop: str) -> Path:
        return self.output_dir / _UNSAFE.sub("_", shop) / f"{self.namespace}.{self.key}.json"

    def write(self, shop: str, payload: str) -> None:
        path = self._path(shop)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                f.write(payload)
            # Readers see either the old document or the new one, never a partial write
            os.replace(tmp_path, path)
        except OSError as e:
            raise PublishFailure(f"Could not write {path}: {e}") from e
        logger.debug(f"Wrote {len(payload)} bytes to {path}")

    def read(self, shop: str) -> Optional[str]:
        path = self._path(shop)
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise PublishFailure(f"Could not read {path}: {e}") from e
