from __future__ import annotations

from fastapi import FastAPI

from bundle_offers.app.api.routers import offers_router, storefront_router
from bundle_offers.app.health import router as health_router
from bundle_offers.observability.logging import configure_logging

configure_logging()

app = FastAPI(title="Bundle Offers")
app.include_router(health_router)
app.include_router(offers_router, prefix="/v1", tags=["offer-groups"])
app.include_router(storefront_router, prefix="/v1", tags=["storefront"])
