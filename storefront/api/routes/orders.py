"""
Order routes
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import get_current_user
from storefront.core.exceptions import GatewayError
from storefront.schemas.order import OrderList, OrderResponse
from storefront.services.gateway import DataGateway, Relation, get_gateway

router = APIRouter()

ORDER_ITEMS = {"items": Relation("order_items", local_key="id", remote_key="order_id", many=True)}


@router.get("", response_model=OrderList)
async def list_orders(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Get user's orders, newest first"""
    try:
        orders = await gateway.select(
            "orders",
            filters={"user_id": user["id"]},
            order_by="created_at",
            descending=True,
            embed=ORDER_ITEMS,
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load orders"
        )
    return OrderList(orders=orders, total=len(orders))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Get single order (order confirmation)"""
    try:
        order = await gateway.select_one(
            "orders",
            filters={"id": order_id, "user_id": user["id"]},
            embed=ORDER_ITEMS,
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load order"
        )

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    return order
