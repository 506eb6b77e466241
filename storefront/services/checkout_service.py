"""
CheckoutService - order placement

The cart page and the checkout page both place orders through
CheckoutService.place_order() and price through pricing.quote(), so an order
total always matches what the shopper was shown.

Order placement runs as one gateway transaction:
    1. insert the order as pending with the quoted amounts
    2. insert one order item per cart line, snapshotting price and name
    3. delete the user's cart lines
    4. finalize the order to completed
A failure at any step rolls back every step.
"""
import logging
from typing import Any, Dict, Optional

from storefront.core.exceptions import ValidationError
from storefront.core.utils import to_money
from storefront.models.order import OrderStatus
from storefront.services.cart_service import CartService
from storefront.services.gateway import DataGateway
from storefront.services.pricing import cart_subtotal, quote

logger = logging.getLogger(__name__)


def format_shipping_address(address: str, city: str, state: str, zip_code: str) -> str:
    return f"{address}, {city}, {state} {zip_code}"


class CheckoutService:
    """Turns a user's cart into an order."""

    @staticmethod
    async def quote_cart(gateway: DataGateway, user_id: int):
        lines = await CartService.lines(gateway, user_id)
        return quote(cart_subtotal(lines))

    @staticmethod
    async def place_order(
        gateway: DataGateway,
        user_id: int,
        shipping_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Place an order for everything in the user's cart.

        Returns the completed order row with its items under "items".

        Raises:
            ValidationError: the cart is empty
            GatewayError: any step failed; nothing was written
        """
        lines = [
            line for line in await CartService.lines(gateway, user_id)
            if line.get("product") is not None
        ]
        if not lines:
            raise ValidationError("Your cart is empty")

        priced = quote(cart_subtotal(lines))

        async with gateway.transaction():
            order = await gateway.insert("orders", {
                "user_id": user_id,
                "status": OrderStatus.PENDING.value,
                "subtotal": priced.subtotal,
                "shipping_cost": priced.shipping,
                "tax": priced.tax,
                "total": priced.total,
                "shipping_address": shipping_address,
            })

            items = await gateway.insert("order_items", [
                {
                    "order_id": order["id"],
                    "product_id": line["product_id"],
                    "product_name": line["product"]["name"],
                    "price": to_money(line["product"]["price"]),
                    "quantity": line["quantity"],
                }
                for line in lines
            ])

            await gateway.delete("cart_items", {"user_id": user_id})
            await gateway.update(
                "orders",
                {"status": OrderStatus.COMPLETED.value},
                {"id": order["id"]},
            )

        order["status"] = OrderStatus.COMPLETED.value
        order["items"] = items
        logger.info(
            f"Order {order['id']} placed for user {user_id}: "
            f"{len(items)} lines, total {priced.total}"
        )
        return order
