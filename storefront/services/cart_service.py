"""
CartService - the cart ledger

One row per (user, product). Adding a product already in the cart is a
single upsert that increments the stored quantity. Setting a quantity below
1 removes the line.
"""
import logging
from typing import Any, Dict, List

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.services.gateway import DataGateway, Relation
from storefront.services.pricing import EMPTY_QUOTE, cart_subtotal, quote

logger = logging.getLogger(__name__)

CART_PRODUCT = {"product": Relation("products", local_key="product_id")}


class CartService:

    @staticmethod
    async def lines(gateway: DataGateway, user_id: int) -> List[Dict[str, Any]]:
        """The user's cart lines, each with its product under "product"."""
        return await gateway.select(
            "cart_items",
            filters={"user_id": user_id},
            order_by="id",
            embed=CART_PRODUCT,
        )

    @staticmethod
    async def load(gateway: DataGateway, user_id: int) -> Dict[str, Any]:
        lines = await CartService.lines(gateway, user_id)
        priced = quote(cart_subtotal(lines)) if lines else EMPTY_QUOTE
        return {
            "items": lines,
            "item_count": sum(line["quantity"] for line in lines),
            "quote": priced.as_dict(),
        }

    @staticmethod
    async def add(gateway: DataGateway, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        """Add `quantity` of a product, incrementing the line if it already exists."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = await gateway.select_one("products", columns=["id"], filters={"id": product_id})
        if not product:
            raise NotFoundError("Product not found", details={"product_id": product_id})

        line = await gateway.upsert(
            "cart_items",
            {"user_id": user_id, "product_id": product_id, "quantity": quantity},
            conflict=("user_id", "product_id"),
            increment=("quantity",),
        )
        logger.info(f"User {user_id} added {quantity} x product {product_id} to cart (now {line['quantity']})")
        return line

    @staticmethod
    async def _owned_line(gateway: DataGateway, user_id: int, item_id: int) -> Dict[str, Any]:
        line = await gateway.select_one("cart_items", filters={"id": item_id, "user_id": user_id})
        if not line:
            raise NotFoundError("Cart item not found", details={"item_id": item_id})
        return line

    @staticmethod
    async def set_quantity(gateway: DataGateway, user_id: int, item_id: int, quantity: int) -> None:
        await CartService._owned_line(gateway, user_id, item_id)
        if quantity < 1:
            await gateway.delete("cart_items", {"id": item_id, "user_id": user_id})
            logger.info(f"User {user_id} removed cart item {item_id}")
            return
        await gateway.update("cart_items", {"quantity": quantity}, {"id": item_id, "user_id": user_id})

    @staticmethod
    async def remove(gateway: DataGateway, user_id: int, item_id: int) -> None:
        await CartService._owned_line(gateway, user_id, item_id)
        await gateway.delete("cart_items", {"id": item_id, "user_id": user_id})
        logger.info(f"User {user_id} removed cart item {item_id}")

    @staticmethod
    async def clear(gateway: DataGateway, user_id: int) -> int:
        removed = await gateway.delete("cart_items", {"user_id": user_id})
        logger.info(f"User {user_id} cleared cart ({removed} lines)")
        return removed
