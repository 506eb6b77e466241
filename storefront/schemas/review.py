"""
Review schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    # Range and length checked in review_service.submit_review
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    product_id: int
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    helpful_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewList(BaseModel):
    reviews: List[ReviewResponse]
    total: int


class HelpfulVoteResponse(BaseModel):
    review_id: int
    voted: bool
    helpful_count: int = Field(..., ge=0)


class UserReviewState(BaseModel):
    """The caller's own review of a product and the reviews they found helpful."""
    review: Optional[ReviewResponse] = None
    helpful_review_ids: List[int] = []
