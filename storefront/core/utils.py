"""
Core Utilities

Shared helpers used across the application.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def to_money(amount) -> Decimal:
    """Quantize a numeric amount to cents, rounding half up."""
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
