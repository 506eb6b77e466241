"""
Cart routes

Every mutation answers with the re-fetched cart so the client never has to
patch its own copy.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import get_current_user
from storefront.core.exceptions import GatewayError
from storefront.schemas.cart import CartItemCreate, CartItemUpdate, CartResponse
from storefront.services.cart_service import CartService
from storefront.services.gateway import DataGateway, get_gateway

router = APIRouter()


async def _reload(gateway: DataGateway, user_id: int) -> Dict[str, Any]:
    try:
        return await CartService.load(gateway, user_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load cart"
        )


@router.get("", response_model=CartResponse)
async def get_cart(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Get current user's cart with item count and price quote"""
    return await _reload(gateway, user["id"])


@router.post("/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    item_data: CartItemCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Add a product, or increase its quantity if already in the cart"""
    try:
        await CartService.add(gateway, user["id"], item_data.product_id, item_data.quantity)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to add item to cart"
        )
    return await _reload(gateway, user["id"])


@router.patch("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: int,
    update: CartItemUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Set a line's quantity; below 1 removes the line"""
    try:
        await CartService.set_quantity(gateway, user["id"], item_id, update.quantity)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update cart"
        )
    return await _reload(gateway, user["id"])


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_from_cart(
    item_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Remove a line from the cart"""
    try:
        await CartService.remove(gateway, user["id"], item_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to remove item"
        )
    return await _reload(gateway, user["id"])


@router.delete("", response_model=CartResponse)
async def clear_cart(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Empty the cart"""
    try:
        await CartService.clear(gateway, user["id"])
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to clear cart"
        )
    return await _reload(gateway, user["id"])
