"""
Pricing policy

All amounts are Decimal, rounded half up to cents.
    shipping = 0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE
    tax      = subtotal * TAX_RATE
    total    = subtotal + shipping + tax
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.core.config import settings
from storefront.core.utils import to_money

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PriceQuote:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @property
    def free_shipping(self) -> bool:
        return self.shipping == ZERO

    def as_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": float(self.subtotal),
            "shipping": float(self.shipping),
            "tax": float(self.tax),
            "total": float(self.total),
            "free_shipping": self.free_shipping,
        }


EMPTY_QUOTE = PriceQuote(ZERO, ZERO, ZERO, ZERO)


def quote(
    subtotal,
    free_shipping_threshold: Optional[Decimal] = None,
    flat_shipping_fee: Optional[Decimal] = None,
    tax_rate: Optional[Decimal] = None,
) -> PriceQuote:
    """Price a subtotal. Shipping is free strictly above the threshold."""
    threshold = settings.FREE_SHIPPING_THRESHOLD if free_shipping_threshold is None else free_shipping_threshold
    fee = settings.FLAT_SHIPPING_FEE if flat_shipping_fee is None else flat_shipping_fee
    rate = settings.TAX_RATE if tax_rate is None else tax_rate

    subtotal = to_money(subtotal)
    shipping = ZERO if subtotal > Decimal(str(threshold)) else to_money(fee)
    tax = to_money(subtotal * Decimal(str(rate)))
    total = to_money(subtotal + shipping + tax)
    return PriceQuote(subtotal=subtotal, shipping=shipping, tax=tax, total=total)


def cart_subtotal(lines: List[Dict[str, Any]]) -> Decimal:
    """Sum of price x quantity over cart lines joined with their product."""
    subtotal = ZERO
    for line in lines:
        product = line.get("product")
        if product is None:
            continue
        subtotal += to_money(product["price"]) * line["quantity"]
    return to_money(subtotal)
