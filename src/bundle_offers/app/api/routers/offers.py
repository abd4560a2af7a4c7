"""Router for merchant-side offer group endpoints."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, BackgroundTasks, Depends, Response

from bundle_offers.app.api.dependencies import get_offer_service, http_error
from bundle_offers.app.api.models.offers import (
    OfferGroupListResponse,
    OfferGroupPayload,
    OfferGroupResponse,
    PreviewRequest,
    PricingResponse,
    PublishResponse,
    SaveResponse,
    ToggleRequest,
)
from bundle_offers.application.offer_service import OfferService, SaveResult
from bundle_offers.domain.common.errors import OfferError
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.operations import validate_group
from bundle_offers.domain.pricing.engine import price_offer_group

router = APIRouter()


def _save_response(result: SaveResult, response: Response) -> SaveResponse:
    if result.created:
        response.status_code = 201
    return SaveResponse(group=OfferGroupResponse.from_domain(result.group), created=result.created)


@router.get("/shops/{shop}/offer-groups", response_model=OfferGroupListResponse)
def list_offer_groups(shop: str, service: OfferService = Depends(get_offer_service)) -> OfferGroupListResponse:
    """List every offer group for a shop, most recently updated first."""
    try:
        groups = service.list_groups(shop)
    except OfferError as e:
        raise http_error(e)
    return OfferGroupListResponse(items=[OfferGroupResponse.from_domain(g) for g in groups])


@router.get("/shops/{shop}/offer-groups/{group_id}", response_model=OfferGroupResponse)
def get_offer_group(
    shop: str, group_id: str, service: OfferService = Depends(get_offer_service)
) -> OfferGroupResponse:
    try:
        return OfferGroupResponse.from_domain(service.get_group(shop, group_id))
    except OfferError as e:
        raise http_error(e)


@router.post("/shops/{shop}/offer-groups", response_model=SaveResponse)
def save_offer_group(
    shop: str,
    payload: OfferGroupPayload,
    response: Response,
    background_tasks: BackgroundTasks,
    service: OfferService = Depends(get_offer_service),
) -> SaveResponse:
    """
    Create the group when the body has no id, otherwise update it.

    The storefront copy is republished after the response is sent; a publish
    failure never changes this response.
    """
    try:
        result = service.save(shop, payload.to_domain(), schedule=background_tasks.add_task)
    except OfferError as e:
        raise http_error(e)
    return _save_response(result, response)


@router.put("/shops/{shop}/offer-groups/{group_id}", response_model=SaveResponse)
def update_offer_group(
    shop: str,
    group_id: str,
    payload: OfferGroupPayload,
    response: Response,
    background_tasks: BackgroundTasks,
    service: OfferService = Depends(get_offer_service),
) -> SaveResponse:
    try:
        group = replace(payload.to_domain(), id=group_id)
        result = service.save(shop, group, schedule=background_tasks.add_task)
    except OfferError as e:
        raise http_error(e)
    return _save_response(result, response)


@router.delete("/shops/{shop}/offer-groups/{group_id}")
def delete_offer_group(
    shop: str,
    group_id: str,
    background_tasks: BackgroundTasks,
    service: OfferService = Depends(get_offer_service),
) -> dict:
    try:
        service.delete(shop, group_id, schedule=background_tasks.add_task)
    except OfferError as e:
        raise http_error(e)
    return {"id": group_id, "deleted": True}


@router.post("/shops/{shop}/offer-groups/{group_id}/toggle", response_model=SaveResponse)
def toggle_offer_group(
    shop: str,
    group_id: str,
    response: Response,
    background_tasks: BackgroundTasks,
    body: ToggleRequest | None = None,
    service: OfferService = Depends(get_offer_service),
) -> SaveResponse:
    """Activate or deactivate a group from the list view. No body flips the current state."""
    try:
        active = body.active if body else None
        if active is None:
            active = not service.get_group(shop, group_id).active
        result = service.set_active(shop, group_id, active, schedule=background_tasks.add_task)
    except OfferError as e:
        raise http_error(e)
    return _save_response(result, response)


@router.post("/shops/{shop}/publish", response_model=PublishResponse)
def publish_offers(shop: str, service: OfferService = Depends(get_offer_service)) -> PublishResponse:
    """Manual full resync of the storefront copy. Runs inline and reports the outcome."""
    outcome = service.republish(shop)
    return PublishResponse(shop=shop, ok=outcome.ok, group_count=outcome.group_count, error=outcome.error)


@router.post("/offer-groups/preview", response_model=PricingResponse)
def preview_offer_group(request: PreviewRequest) -> PricingResponse:
    """Price an unsaved group the way the storefront would."""
    try:
        group = request.group.to_domain()
        validate_group(group)
    except OfferError as e:
        raise http_error(e)
    unit_price = request.unit_price if request.unit_price is not None else OfferDefaults().sample_unit_price
    result = price_offer_group(
        group,
        unit_price,
        selected_tier_id=request.selected_tier_id,
        selected_quantity=request.selected_quantity,
    )
    return PricingResponse.from_result(result, group.design.currency_symbol)
