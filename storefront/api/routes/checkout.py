"""
Checkout routes

No payment is taken. Card fields are required by the form but are
discarded once validated.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status, Request

from storefront.api.deps import get_current_user
from storefront.core.config import settings
from storefront.core.exceptions import GatewayError
from storefront.core.rate_limit import limiter
from storefront.schemas.cart import PriceQuote
from storefront.schemas.order import CheckoutRequest, OrderResponse
from storefront.services.checkout_service import CheckoutService, format_shipping_address
from storefront.services.gateway import DataGateway, get_gateway

router = APIRouter()

ORDER_FAILED = "Failed to process your order. Please try again."


@router.get("/quote", response_model=PriceQuote)
async def get_quote(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Price preview of the current cart"""
    try:
        priced = await CheckoutService.quote_cart(gateway, user["id"])
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load cart"
        )
    return priced.as_dict()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_CHECKOUT)
async def place_order(
    request: Request,
    form: CheckoutRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Place an order for the whole cart"""
    shipping_address = format_shipping_address(form.address, form.city, form.state, form.zip_code)
    try:
        return await CheckoutService.place_order(gateway, user["id"], shipping_address)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ORDER_FAILED
        )


@router.post("/quick", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_CHECKOUT)
async def quick_checkout(
    request: Request,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Cart-page checkout without a shipping form; same pricing as the checkout page"""
    try:
        return await CheckoutService.place_order(gateway, user["id"])
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ORDER_FAILED
        )
