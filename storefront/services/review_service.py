"""
ReviewService - product reviews and helpful votes

A user has at most one review per product; submitting again replaces it.
Every review write recomputes the product's rating and review_count, and
every vote toggle recomputes the review's helpful_count, inside the same
transaction as the write.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Set, Tuple

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.models.review import MAX_COMMENT_LENGTH, MAX_TITLE_LENGTH
from storefront.services.gateway import DataGateway

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def average_rating(ratings: List[int]) -> Optional[float]:
    """Mean rating to one decimal, or None when there are no ratings."""
    if not ratings:
        return None
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _clean_text(value: Optional[str], limit: int, field: str) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > limit:
        raise ValidationError(f"{field} must be at most {limit} characters", details={"field": field})
    return value or None


class ReviewService:

    @staticmethod
    async def list_for_product(gateway: DataGateway, product_id: int) -> List[Dict[str, Any]]:
        return await gateway.select(
            "reviews",
            filters={"product_id": product_id},
            order_by="created_at",
            descending=True,
        )

    @staticmethod
    async def user_review(gateway: DataGateway, user_id: int, product_id: int) -> Optional[Dict[str, Any]]:
        return await gateway.select_one("reviews", filters={"user_id": user_id, "product_id": product_id})

    @staticmethod
    async def helpful_review_ids(gateway: DataGateway, user_id: int, product_id: int) -> Set[int]:
        """Ids of this product's reviews that the user marked helpful."""
        reviews = await gateway.select("reviews", columns=["id"], filters={"product_id": product_id})
        if not reviews:
            return set()
        votes = await gateway.select(
            "review_helpful",
            columns=["review_id"],
            filters={"user_id": user_id, "review_id": [r["id"] for r in reviews]},
        )
        return {v["review_id"] for v in votes}

    @staticmethod
    async def recompute_product_rating(gateway: DataGateway, product_id: int) -> Tuple[Optional[float], int]:
        rows = await gateway.select("reviews", columns=["rating"], filters={"product_id": product_id})
        ratings = [r["rating"] for r in rows]
        rating = average_rating(ratings)
        await gateway.update(
            "products",
            {"rating": rating, "review_count": len(ratings)},
            {"id": product_id},
        )
        return rating, len(ratings)

    @staticmethod
    async def submit(
        gateway: DataGateway,
        user_id: int,
        product_id: int,
        rating: int,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create or replace the user's review of a product.

        Raises:
            ValidationError: rating outside 1-5, or title/comment too long
            NotFoundError: unknown product
        """
        if rating is None or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError("Please select a rating", details={"field": "rating"})
        title = _clean_text(title, MAX_TITLE_LENGTH, "title")
        comment = _clean_text(comment, MAX_COMMENT_LENGTH, "comment")

        product = await gateway.select_one("products", columns=["id"], filters={"id": product_id})
        if not product:
            raise NotFoundError("Product not found", details={"product_id": product_id})

        async with gateway.transaction():
            review = await gateway.upsert(
                "reviews",
                {
                    "user_id": user_id,
                    "product_id": product_id,
                    "rating": rating,
                    "title": title,
                    "comment": comment,
                },
                conflict=("user_id", "product_id"),
            )
            await ReviewService.recompute_product_rating(gateway, product_id)

        logger.info(f"User {user_id} reviewed product {product_id} ({rating} stars)")
        return review

    @staticmethod
    async def delete(gateway: DataGateway, user_id: int, review_id: int) -> None:
        review = await gateway.select_one("reviews", filters={"id": review_id, "user_id": user_id})
        if not review:
            raise NotFoundError("Review not found", details={"review_id": review_id})

        async with gateway.transaction():
            await gateway.delete("reviews", {"id": review_id, "user_id": user_id})
            await ReviewService.recompute_product_rating(gateway, review["product_id"])
        logger.info(f"User {user_id} deleted review {review_id}")

    @staticmethod
    async def toggle_helpful(gateway: DataGateway, user_id: int, review_id: int) -> Tuple[bool, int]:
        """Flip the user's helpful vote. Returns (voted, helpful_count)."""
        review = await gateway.select_one("reviews", columns=["id"], filters={"id": review_id})
        if not review:
            raise NotFoundError("Review not found", details={"review_id": review_id})

        async with gateway.transaction():
            existing = await gateway.select_one(
                "review_helpful",
                filters={"user_id": user_id, "review_id": review_id},
            )
            if existing:
                await gateway.delete("review_helpful", {"id": existing["id"]})
            else:
                await gateway.insert("review_helpful", {"user_id": user_id, "review_id": review_id})

            helpful_count = await gateway.count("review_helpful", {"review_id": review_id})
            await gateway.update("reviews", {"helpful_count": helpful_count}, {"id": review_id})

        return not existing, helpful_count
