from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Runtime settings sourced from environment variables."""

    log_level: str = "INFO"
    runtime_adapters: str = "local"
    publish_adapter: str = "file"
    output_dir: str = "/tmp/bundle-offers-output"
    default_group_name: str = "New Quantity Offer"
    # Storefront channel key: shop + fixed logical name
    publish_namespace: str = "fox_cod"
    publish_key: str = "quantity_offers_json"
    # Databricks settings
    databricks_server_hostname: Optional[str] = None
    databricks_http_path: Optional[str] = None
    databricks_access_token: Optional[str] = None
    databricks_catalog: Optional[str] = None
    databricks_schema: Optional[str] = None
    databricks_table_prefix: str = ""
    # Shopify Admin API settings
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"
    shopify_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            runtime_adapters=os.getenv("RUNTIME_ADAPTERS", cls.runtime_adapters).lower(),
            publish_adapter=os.getenv("PUBLISH_ADAPTER", cls.publish_adapter).lower(),
            output_dir=os.getenv("OUTPUT_DIR", cls.output_dir),
            default_group_name=os.getenv("DEFAULT_GROUP_NAME", cls.default_group_name),
            publish_namespace=os.getenv("PUBLISH_NAMESPACE", cls.publish_namespace),
            publish_key=os.getenv("PUBLISH_KEY", cls.publish_key),
            databricks_server_hostname=os.getenv("DATABRICKS_SERVER_HOSTNAME"),
            databricks_http_path=os.getenv("DATABRICKS_HTTP_PATH"),
            databricks_access_token=os.getenv("DATABRICKS_ACCESS_TOKEN"),
            databricks_catalog=os.getenv("DATABRICKS_CATALOG"),
            databricks_schema=os.getenv("DATABRICKS_SCHEMA"),
            databricks_table_prefix=os.getenv("DATABRICKS_TABLE_PREFIX", cls.databricks_table_prefix),
            shopify_access_token=os.getenv("SHOPIFY_ACCESS_TOKEN"),
            shopify_api_version=os.getenv("SHOPIFY_API_VERSION", cls.shopify_api_version),
            shopify_timeout_seconds=float(os.getenv("SHOPIFY_TIMEOUT_SECONDS", cls.shopify_timeout_seconds)),
        )


def get_settings(_cache: dict[str, Settings] = {}) -> Settings:
    """Provide a simple cached settings object."""

    if "settings" not in _cache:
        _cache["settings"] = Settings.from_env()
    return _cache["settings"]
