"""
Cart schemas
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from storefront.schemas.product import ProductResponse


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    # Anything below 1 removes the line
    quantity: int


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    product: Optional[ProductResponse] = None
    quantity: int

    class Config:
        from_attributes = True


class PriceQuote(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    total: float
    free_shipping: bool


class CartResponse(BaseModel):
    items: List[CartItemResponse]
    item_count: int
    quote: PriceQuote
