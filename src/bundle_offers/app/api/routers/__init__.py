"""API routers for merchant and storefront endpoints."""

from bundle_offers.app.api.routers.offers import router as offers_router
from bundle_offers.app.api.routers.storefront import router as storefront_router

__all__ = ["offers_router", "storefront_router"]
