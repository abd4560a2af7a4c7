from __future__ import annotations

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from bundle_offers.adapters.databricks.client import DatabricksSqlClient
from bundle_offers.domain.common.errors import NotFound, UnreadableRecord, ValidationError
from bundle_offers.domain.offers.models import OfferGroup, parse_timestamp
from bundle_offers.ports.offer_store import OfferGroupStore
from bundle_offers.settings import Settings, get_settings

logger = logging.getLogger(__name__)

SELECT_COLUMNS = """
            id,
            shop_domain,
            name,
            active,
            product_ids,
            offers,
            design,
            placement,
            created_at,
            updated_at"""


class DatabricksOfferGroupStore(OfferGroupStore):
    """Offer groups persisted in a Databricks table, one row per group.

    Product ids, tiers and design are stored as JSON strings. Every statement
    filters on ``shop_domain`` so a guessed id from another shop never matches.
    """

    def __init__(
        self,
        client: DatabricksSqlClient,
        settings: Settings | None = None,
        table_name: str | None = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.table_name = table_name or f"{self.settings.databricks_table_prefix}quantity_offer_groups"
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _build_table_name(self) -> str:
        """Build fully qualified table name with catalog and schema if specified."""
        parts = []
        if self.settings.databricks_catalog:
            parts.append(self.settings.databricks_catalog)
        if self.settings.databricks_schema:
            parts.append(self.settings.databricks_schema)
        parts.append(self.table_name)
        return ".".join(parts)

    def _parse_json_field(self, value: Any, default: Any) -> Any:
        if value is None or value == "":
            return default
        if isinstance(value, (list, dict)):
            return value
        return json.loads(value)

    def _row_to_group(self, row: dict[str, Any]) -> OfferGroup:
        return OfferGroup.from_dict(
            {
                "id": row["id"],
                "name": row.get("name"),
                "active": row.get("active"),
                "product_ids": self._parse_json_field(row.get("product_ids"), []),
                "offers": self._parse_json_field(row.get("offers"), []),
                "design": self._parse_json_field(row.get("design"), {}),
                "placement": row.get("placement"),
                "created_at": row.get("created_at"),
                "updated_at": row.get("updated_at"),
            }
        )

    def _select(
        self,
        shop: str,
        extra_condition: str = "",
        params: list[Any] | None = None,
        skip_unreadable: bool = False,
    ) -> list[OfferGroup]:
        """Load matching rows. An unreadable row raises ``UnreadableRecord`` unless ``skip_unreadable``."""
        sql = f"""
        SELECT{SELECT_COLUMNS}
        FROM {self._build_table_name()}
        WHERE shop_domain = ?{extra_condition}
        ORDER BY updated_at DESC, id ASC
        """
        rows = self.client.query(sql, [shop] + (params or []))
        groups: list[OfferGroup] = []
        for row in rows:
            try:
                groups.append(self._row_to_group(row))
            except (ValidationError, ValueError, KeyError) as e:
                if not skip_unreadable:
                    raise UnreadableRecord(shop, str(row.get("id")), str(e)) from e
                logger.warning(f"Skipping unreadable offer group row {row.get('id')}: {e}", extra={"shop": shop})
        return groups

    def _require_row(self, shop: str, group_id: str) -> dict[str, Any]:
        """Existence check that does not parse the stored JSON, so broken rows can still be overwritten or removed."""
        sql = f"""
        SELECT id, created_at
        FROM {self._build_table_name()}
        WHERE shop_domain = ? AND id = ?
        """
        rows = self.client.query(sql, [shop, group_id])
        if not rows:
            raise NotFound(shop, group_id)
        return rows[0]

    def _row_params(self, group: OfferGroup) -> list[Any]:
        return [
            group.name,
            group.active,
            json.dumps(list(group.product_ids)),
            json.dumps([t.to_dict() for t in group.tiers]),
            json.dumps(group.design.to_dict()),
            group.placement,
        ]

    def list(self, shop: str) -> list[OfferGroup]:
        # The admin list stays usable around a broken row; publishing and get do not
        return self._select(shop, skip_unreadable=True)

    def list_active(self, shop: str) -> list[OfferGroup]:
        return self._select(shop, " AND active = true")

    def get(self, shop: str, group_id: str) -> OfferGroup:
        groups = self._select(shop, " AND id = ?", [group_id])
        if not groups:
            raise NotFound(shop, group_id)
        return groups[0]

    def create(self, shop: str, group: OfferGroup) -> OfferGroup:
        now = self._clock()
        group_id = str(uuid.uuid4())
        sql = f"""
        INSERT INTO {self._build_table_name()}
            (id, shop_domain, name, active, product_ids, offers, design, placement, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        self.client.execute(sql, [group_id, shop] + self._row_params(group) + [now.isoformat(), now.isoformat()])
        logger.info(f"Created offer group {group_id}", extra={"shop": shop})
        return replace(group, id=group_id, created_at=now, updated_at=now, selected_products=())

    def update(self, shop: str, group_id: str, group: OfferGroup) -> OfferGroup:
        current = self._require_row(shop, group_id)
        now = self._clock()
        sql = f"""
        UPDATE {self._build_table_name()}
        SET name = ?, active = ?, product_ids = ?, offers = ?, design = ?, placement = ?, updated_at = ?
        WHERE id = ? AND shop_domain = ?
        """
        self.client.execute(sql, self._row_params(group) + [now.isoformat(), group_id, shop])
        logger.info(f"Updated offer group {group_id}", extra={"shop": shop})
        return replace(
            group,
            id=group_id,
            created_at=parse_timestamp(current.get("created_at")),
            updated_at=now,
            selected_products=(),
        )

    def delete(self, shop: str, group_id: str) -> None:
        self._require_row(shop, group_id)
        sql = f"DELETE FROM {self._build_table_name()} WHERE id = ? AND shop_domain = ?"
        self.client.execute(sql, [group_id, shop])
        logger.info(f"Deleted offer group {group_id}", extra={"shop": shop})
