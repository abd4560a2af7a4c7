from __future__ import annotations

import logging
import sys
from typing import Optional

from bundle_offers.settings import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request at INFO; keep publish calls quiet unless debugging
    if logging.getLevelName(log_level) != logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
