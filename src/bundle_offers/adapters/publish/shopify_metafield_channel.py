"""Shop metafield used as the storefront-readable offers channel.

The metafield is owned by the shop, typed ``json`` and defined with
``PUBLIC_READ`` storefront access, so theme markup can embed it without an
authenticated call.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx

from bundle_offers.domain.common.errors import PublishFailure
from bundle_offers.ports.publish_channel import PublishChannel
from bundle_offers.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFINITION_MUTATION = """
mutation CreateMetafieldDefinition($definition: MetafieldDefinitionInput!) {
  metafieldDefinitionCreate(definition: $definition) {
    createdDefinition { id key }
    userErrors { field message code }
  }
}
"""

SHOP_ID_QUERY = "{ shop { id } }"

SET_MUTATION = """
mutation SetMetafield($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id key }
    userErrors { field message }
  }
}
"""

READ_QUERY = """
query ReadMetafield($namespace: String!, $key: String!) {
  shop { metafield(namespace: $namespace, key: $key) { value } }
}
"""


class ShopifyMetafieldChannel(PublishChannel):
    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        token_provider: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or httpx.Client(timeout=self.settings.shopify_timeout_seconds)
        self.token_provider = token_provider
        self._defined_for: set[str] = set()

    def _token(self, shop: str) -> str:
        token = self.token_provider(shop) if self.token_provider else self.settings.shopify_access_token
        if not token:
            raise PublishFailure(f"No Shopify access token available for {shop}")
        return token

    def _graphql(self, shop: str, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"https://{shop}/admin/api/{self.settings.shopify_api_version}/graphql.json"
        headers = {"X-Shopify-Access-Token": self._token(shop), "Content-Type": "application/json"}
        try:
            response = self.client.post(url, headers=headers, json={"query": query, "variables": variables or {}})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise PublishFailure(f"Shopify returned {e.response.status_code} for {shop}") from e
        except httpx.RequestError as e:
            raise PublishFailure(f"Shopify request failed for {shop}: {e}") from e
        except ValueError as e:
            raise PublishFailure(f"Shopify returned a non-JSON body for {shop}") from e
        if body.get("errors"):
            raise PublishFailure(f"Shopify GraphQL errors for {shop}: {body['errors']}")
        return body.get("data") or {}

    def _ensure_definition(self, shop: str) -> None:
        if shop in self._defined_for:
            return
        data = self._graphql(
            shop,
            DEFINITION_MUTATION,
            {
                "definition": {
                    "name": "Bundle Offers JSON",
                    "namespace": self.settings.publish_namespace,
                    "key": self.settings.publish_key,
                    "type": "json",
                    "ownerType": "SHOP",
                    "access": {"storefront": "PUBLIC_READ"},
                }
            },
        )
        errors = (data.get("metafieldDefinitionCreate") or {}).get("userErrors") or []
        # TAKEN means the definition already exists, which is the steady state
        unexpected = [e for e in errors if e.get("code") != "TAKEN"]
        if unexpected:
            logger.warning(f"Metafield definition not created for {shop}: {unexpected}")
        self._defined_for.add(shop)

    def write(self, shop: str, payload: str) -> None:
        self._ensure_definition(shop)
        shop_gid = ((self._graphql(shop, SHOP_ID_QUERY).get("shop")) or {}).get("id")
        if not shop_gid:
            raise PublishFailure(f"Could not resolve shop id for {shop}")
        data = self._graphql(
            shop,
            SET_MUTATION,
            {
                "metafields": [
                    {
                        "ownerId": shop_gid,
                        "namespace": self.settings.publish_namespace,
                        "key": self.settings.publish_key,
                        "value": payload,
                        "type": "json",
                    }
                ]
            },
        )
        errors = (data.get("metafieldsSet") or {}).get("userErrors") or []
        if errors:
            raise PublishFailure(f"Metafield write rejected for {shop}: {errors}")

    def read(self, shop: str) -> Optional[str]:
        data = self._graphql(
            shop, READ_QUERY, {"namespace": self.settings.publish_namespace, "key": self.settings.publish_key}
        )
        metafield = (data.get("shop") or {}).get("metafield")
        return metafield.get("value") if metafield else None
