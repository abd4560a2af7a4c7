from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bundle_offers.ports.offer_store import OfferGroupStore
    from bundle_offers.ports.publish_channel import PublishChannel

from bundle_offers.adapters.databricks.client import DatabricksSqlClient
from bundle_offers.adapters.databricks.offer_store import DatabricksOfferGroupStore
from bundle_offers.adapters.publish.file_channel import FilePublishChannel
from bundle_offers.adapters.publish.in_memory_channel import InMemoryPublishChannel
from bundle_offers.adapters.publish.shopify_metafield_channel import ShopifyMetafieldChannel
from bundle_offers.adapters.store.in_memory_store import InMemoryOfferGroupStore
from bundle_offers.settings import Settings, get_settings


def _require(settings_pairs: list[tuple[str, object]], what: str) -> None:
    missing = [name for name, value in settings_pairs if not value]
    if missing:
        raise ValueError(f"Missing required {what} settings: {', '.join(missing)}")


def create_adapters(settings: Settings | None = None) -> tuple["OfferGroupStore", "PublishChannel"]:
    """
    Factory function to create the record store and publish channel.

    RUNTIME_ADAPTERS=databricks selects the Databricks record store; anything else
    keeps groups in memory. PUBLISH_ADAPTER picks the storefront channel:
    file (default), memory or shopify.
    """
    settings = settings or get_settings()

    if settings.runtime_adapters == "databricks":
        _require(
            [
                ("DATABRICKS_SERVER_HOSTNAME", settings.databricks_server_hostname),
                ("DATABRICKS_HTTP_PATH", settings.databricks_http_path),
                ("DATABRICKS_ACCESS_TOKEN", settings.databricks_access_token),
            ],
            "Databricks",
        )
        store: OfferGroupStore = DatabricksOfferGroupStore(DatabricksSqlClient(settings), settings)
    else:
        store = InMemoryOfferGroupStore()

    if settings.publish_adapter == "shopify":
        _require([("SHOPIFY_ACCESS_TOKEN", settings.shopify_access_token)], "Shopify")
        channel: PublishChannel = ShopifyMetafieldChannel(settings)
    elif settings.publish_adapter == "memory":
        channel = InMemoryPublishChannel()
    else:
        channel = FilePublishChannel(settings.output_dir, settings.publish_namespace, settings.publish_key)

    return store, channel
