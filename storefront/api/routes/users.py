"""
Profile and address routes

Profile rows share the user's id and are upserted on it. Addresses are
listed default-first; every address operation is scoped to the caller.
"""
import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import get_current_user
from storefront.core.exceptions import GatewayError
from storefront.schemas.address import AddressCreate, AddressResponse, AddressUpdate
from storefront.schemas.user import ProfileResponse, ProfileUpdate
from storefront.services.gateway import DataGateway, get_gateway

logger = logging.getLogger(__name__)

router = APIRouter()


# ----- Profile -----

@router.get("/me/profile", response_model=ProfileResponse)
async def get_profile(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        profile = await gateway.select_one("profiles", filters={"id": user["id"]})
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load profile"
        )
    return profile or {"id": user["id"]}


@router.put("/me/profile", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        profile = await gateway.upsert(
            "profiles",
            {"id": user["id"], **data.model_dump()},
            conflict=("id",),
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update profile"
        )
    logger.info(f"User {user['id']} updated profile")
    return profile


# ----- Addresses -----

async def _clear_default(gateway: DataGateway, user_id: int) -> None:
    await gateway.update("addresses", {"is_default": False}, {"user_id": user_id, "is_default": True})


@router.get("/me/addresses", response_model=List[AddressResponse])
async def list_addresses(
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        return await gateway.select(
            "addresses",
            filters={"user_id": user["id"]},
            order_by="is_default",
            descending=True,
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load addresses"
        )


@router.post("/me/addresses", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    data: AddressCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        async with gateway.transaction():
            if data.is_default:
                await _clear_default(gateway, user["id"])
            return await gateway.insert("addresses", {"user_id": user["id"], **data.model_dump()})
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to save address"
        )


@router.patch("/me/addresses/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: int,
    data: AddressUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    scope = {"id": address_id, "user_id": user["id"]}
    try:
        existing = await gateway.select_one("addresses", filters=scope)
        if not existing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Address not found"
            )

        patch = data.model_dump(exclude_unset=True)
        async with gateway.transaction():
            if patch.get("is_default"):
                await _clear_default(gateway, user["id"])
            if patch:
                await gateway.update("addresses", patch, scope)
        return await gateway.select_one("addresses", filters=scope)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to save address"
        )


@router.delete("/me/addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    try:
        deleted = await gateway.delete("addresses", {"id": address_id, "user_id": user["id"]})
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete address"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Address not found"
        )
