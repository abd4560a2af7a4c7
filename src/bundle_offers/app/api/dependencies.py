"""FastAPI dependency providers shared by the routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException

from bundle_offers.app.factory import create_adapters
from bundle_offers.application.offer_service import OfferService
from bundle_offers.application.publisher import OfferPublisher
from bundle_offers.application.storefront import StorefrontConsumer
from bundle_offers.domain.common.errors import NotFound, OfferError, StoreUnavailable, ValidationError
from bundle_offers.settings import get_settings

if TYPE_CHECKING:
    from bundle_offers.ports.offer_store import OfferGroupStore
    from bundle_offers.ports.publish_channel import PublishChannel


_adapters: dict[str, tuple] = {}


def get_adapters() -> tuple["OfferGroupStore", "PublishChannel"]:
    """Provide the process-wide record store and publish channel."""
    if "adapters" not in _adapters:
        _adapters["adapters"] = create_adapters(get_settings())
    return _adapters["adapters"]


def get_offer_service(adapters: tuple = Depends(get_adapters)) -> OfferService:
    """Dependency to provide OfferService."""
    store, channel = adapters
    return OfferService(store, OfferPublisher(store, channel), get_settings())


def get_storefront_consumer(adapters: tuple = Depends(get_adapters)) -> StorefrontConsumer:
    """Dependency to provide StorefrontConsumer."""
    _, channel = adapters
    return StorefrontConsumer(channel)


def http_error(e: OfferError) -> HTTPException:
    if isinstance(e, ValidationError):
        detail = {"message": str(e), "field": e.field} if e.field else str(e)
        return HTTPException(status_code=422, detail=detail)
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=503, detail=f"Offer store unavailable: {e}")
    return HTTPException(status_code=500, detail=str(e))
