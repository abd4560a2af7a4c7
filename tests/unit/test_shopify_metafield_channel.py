"""Unit tests for ShopifyMetafieldChannel using an httpx mock transport."""

from __future__ import annotations

import json

import httpx
import pytest

from bundle_offers.adapters.publish.shopify_metafield_channel import ShopifyMetafieldChannel
from bundle_offers.domain.common.errors import PublishFailure
from bundle_offers.settings import Settings

SHOP = "shop-a.myshopify.com"


@pytest.fixture
def settings() -> Settings:
    return Settings(shopify_access_token="shpat_test", shopify_api_version="2024-10")


class FakeAdminApi:
    """Answers the Admin GraphQL calls the channel makes and records them."""

    def __init__(self, set_errors=None, definition_errors=None, status_code: int = 200) -> None:
        self.requests: list[dict] = []
        self.set_errors = set_errors or []
        self.definition_errors = definition_errors or []
        self.status_code = status_code
        self.stored: str | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append({"url": str(request.url), "headers": request.headers, "body": body})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"errors": "unavailable"})
        query = body["query"]
        if "metafieldDefinitionCreate" in query:
            data = {"metafieldDefinitionCreate": {"createdDefinition": None, "userErrors": self.definition_errors}}
        elif "metafieldsSet" in query:
            if not self.set_errors:
                self.stored = body["variables"]["metafields"][0]["value"]
            data = {"metafieldsSet": {"metafields": [], "userErrors": self.set_errors}}
        elif "metafield(" in query:
            metafield = {"value": self.stored} if self.stored is not None else None
            data = {"shop": {"metafield": metafield}}
        else:
            data = {"shop": {"id": "gid://shopify/Shop/42"}}
        return httpx.Response(200, json={"data": data})


def make_channel(settings: Settings, api: FakeAdminApi) -> ShopifyMetafieldChannel:
    return ShopifyMetafieldChannel(settings, client=httpx.Client(transport=httpx.MockTransport(api)))


def test_write_sets_public_json_metafield(settings: Settings) -> None:
    api = FakeAdminApi()
    channel = make_channel(settings, api)

    channel.write(SHOP, '[{"id":"g-1"}]')

    definition, shop_query, set_call = api.requests
    assert definition["url"] == f"https://{SHOP}/admin/api/2024-10/graphql.json"
    assert definition["headers"]["X-Shopify-Access-Token"] == "shpat_test"
    assert definition["body"]["variables"]["definition"]["access"] == {"storefront": "PUBLIC_READ"}
    metafield = set_call["body"]["variables"]["metafields"][0]
    assert metafield == {
        "ownerId": "gid://shopify/Shop/42",
        "namespace": "fox_cod",
        "key": "quantity_offers_json",
        "value": '[{"id":"g-1"}]',
        "type": "json",
    }


def test_definition_is_ensured_once_per_shop(settings: Settings) -> None:
    api = FakeAdminApi(definition_errors=[{"field": ["key"], "message": "Key is in use", "code": "TAKEN"}])
    channel = make_channel(settings, api)

    channel.write(SHOP, "[]")
    channel.write(SHOP, "[]")

    definition_calls = [r for r in api.requests if "metafieldDefinitionCreate" in r["body"]["query"]]
    assert len(definition_calls) == 1


def test_user_errors_raise_publish_failure(settings: Settings) -> None:
    api = FakeAdminApi(set_errors=[{"field": ["value"], "message": "Value is invalid JSON"}])
    with pytest.raises(PublishFailure):
        make_channel(settings, api).write(SHOP, "[]")


def test_http_errors_raise_publish_failure(settings: Settings) -> None:
    with pytest.raises(PublishFailure):
        make_channel(settings, FakeAdminApi(status_code=503)).write(SHOP, "[]")


def test_transport_errors_raise_publish_failure(settings: Settings) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    channel = ShopifyMetafieldChannel(settings, client=httpx.Client(transport=httpx.MockTransport(refuse)))
    with pytest.raises(PublishFailure):
        channel.write(SHOP, "[]")


def test_missing_token_raises_publish_failure() -> None:
    channel = make_channel(Settings(), FakeAdminApi())
    with pytest.raises(PublishFailure):
        channel.write(SHOP, "[]")


def test_token_provider_overrides_settings(settings: Settings) -> None:
    api = FakeAdminApi()
    channel = ShopifyMetafieldChannel(
        settings,
        client=httpx.Client(transport=httpx.MockTransport(api)),
        token_provider=lambda shop: f"token-for-{shop}",
    )
    channel.write(SHOP, "[]")
    assert api.requests[0]["headers"]["X-Shopify-Access-Token"] == f"token-for-{SHOP}"


def test_read_returns_stored_value(settings: Settings) -> None:
    api = FakeAdminApi()
    channel = make_channel(settings, api)

    assert channel.read(SHOP) is None
    channel.write(SHOP, '[{"id":"g-1"}]')
    assert channel.read(SHOP) == '[{"id":"g-1"}]'
