"""
Admin routes

Product management and user directory. Every route requires users.is_admin.
"""
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query

from storefront.api.deps import get_current_admin
from storefront.core.exceptions import GatewayError
from storefront.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from storefront.schemas.user import ProfileList
from storefront.services.gateway import DataGateway, get_gateway

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_SEARCH_FIELDS = ["full_name", "phone"]


# ----- Products -----

@router.get("/products", response_model=List[ProductResponse])
async def admin_list_products(
    admin: Dict[str, Any] = Depends(get_current_admin),
    gateway: DataGateway = Depends(get_gateway)
):
    """All products, newest first"""
    try:
        return await gateway.select("products", order_by="created_at", descending=True)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load products"
        )


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_product(
    data: ProductCreate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        product = await gateway.insert("products", data.model_dump())
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to create product"
        )
    logger.info(f"Admin {admin['id']} created product {product['id']}")
    return product


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def admin_update_product(
    product_id: int,
    data: ProductUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    gateway: DataGateway = Depends(get_gateway)
):
    patch = data.model_dump(exclude_unset=True)
    try:
        if patch:
            updated = await gateway.update("products", patch, {"id": product_id})
        else:
            updated = await gateway.count("products", {"id": product_id})
        product = await gateway.select_one("products", filters={"id": product_id}) if updated else None
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update product"
        )

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    logger.info(f"Admin {admin['id']} updated product {product_id}: {sorted(patch)}")
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_product(
    product_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        deleted = await gateway.delete("products", {"id": product_id})
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete product"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    logger.info(f"Admin {admin['id']} deleted product {product_id}")


# ----- Users -----

@router.get("/users", response_model=ProfileList)
async def admin_list_users(
    search: Optional[str] = Query(None, max_length=100),
    admin: Dict[str, Any] = Depends(get_current_admin),
    gateway: DataGateway = Depends(get_gateway)
):
    """User profiles, newest first, optionally searched by name, phone or id"""
    term = (search or "").strip()
    try:
        profiles = await gateway.select(
            "profiles",
            order_by="created_at",
            descending=True,
            search=(term, PROFILE_SEARCH_FIELDS) if term else None,
        )
        if term.isdecimal() and not any(p["id"] == int(term) for p in profiles):
            by_id = await gateway.select_one("profiles", filters={"id": int(term)})
            if by_id:
                profiles.append(by_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load users"
        )
    return ProfileList(profiles=profiles, total=len(profiles))
