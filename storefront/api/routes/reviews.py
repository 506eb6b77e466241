"""
Review routes

Mounted under /products so reviews read as a sub-resource of a product.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import get_current_user
from storefront.core.exceptions import GatewayError
from storefront.schemas.review import (
    HelpfulVoteResponse,
    ReviewCreate,
    ReviewList,
    ReviewResponse,
    UserReviewState,
)
from storefront.services.gateway import DataGateway, get_gateway
from storefront.services.review_service import ReviewService

router = APIRouter()


@router.get("/{product_id}/reviews", response_model=ReviewList)
async def list_reviews(product_id: int, gateway: DataGateway = Depends(get_gateway)):
    """Reviews of a product, newest first"""
    try:
        reviews = await ReviewService.list_for_product(gateway, product_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load reviews"
        )
    return ReviewList(reviews=reviews, total=len(reviews))


@router.get("/{product_id}/reviews/me", response_model=UserReviewState)
async def get_my_review(
    product_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """The caller's review of this product and the reviews they marked helpful"""
    try:
        review = await ReviewService.user_review(gateway, user["id"], product_id)
        helpful = await ReviewService.helpful_review_ids(gateway, user["id"], product_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load reviews"
        )
    return UserReviewState(review=review, helpful_review_ids=sorted(helpful))


@router.post("/{product_id}/reviews", response_model=ReviewResponse)
async def submit_review(
    product_id: int,
    data: ReviewCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Create or replace the caller's review"""
    try:
        return await ReviewService.submit(
            gateway,
            user_id=user["id"],
            product_id=product_id,
            rating=data.rating,
            title=data.title,
            comment=data.comment,
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to submit review"
        )


@router.delete("/{product_id}/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    product_id: int,
    review_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Delete the caller's own review"""
    try:
        await ReviewService.delete(gateway, user["id"], review_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete review"
        )


@router.post("/{product_id}/reviews/{review_id}/helpful", response_model=HelpfulVoteResponse)
async def toggle_helpful(
    product_id: int,
    review_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    gateway: DataGateway = Depends(get_gateway)
):
    """Mark or unmark a review as helpful"""
    try:
        voted, helpful_count = await ReviewService.toggle_helpful(gateway, user["id"], review_id)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update helpful vote"
        )
    return HelpfulVoteResponse(review_id=review_id, voted=voted, helpful_count=helpful_count)
