from __future__ import annotations

import html
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from bundle_offers.domain.common.errors import MalformedBlob, ValidationError
from bundle_offers.domain.offers.models import OfferGroup

SCHEMA_PATH = Path(__file__).with_name("published_offers.schema.json")


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_published(data: Any) -> None:
    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as e:
        raise ValueError(f"Published offers failed schema validation: {e.message}") from e


def encode_published_groups(groups: Iterable[OfferGroup]) -> str:
    """Serialize groups in the order given. Same groups in, same bytes out."""
    data = [g.to_dict() for g in groups]
    validate_published(data)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def decode_published_groups(raw: str | None) -> list[OfferGroup]:
    """Parse a published blob as delivered in page markup (one layer of HTML escaping)."""
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(html.unescape(raw))
        validate_published(data)
        return [OfferGroup.from_dict(item) for item in data]
    except (ValueError, ValidationError) as e:
        raise MalformedBlob(str(e)) from e
