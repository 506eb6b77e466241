"""
Order and checkout schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, field_validator


class OrderItemResponse(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    price: float
    quantity: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    status: str
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    shipping_address: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderList(BaseModel):
    orders: List[OrderResponse]
    total: int


class CheckoutRequest(BaseModel):
    """
    Checkout form.

    Card fields are checked for presence only. They are never persisted,
    logged or echoed back.
    """
    email: EmailStr
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)

    card_number: str = Field(..., repr=False)
    expiry_date: str = Field(..., repr=False)
    cvv: str = Field(..., repr=False)
    name_on_card: str = Field(..., repr=False)

    @field_validator(
        "first_name", "last_name", "address", "city", "state", "zip_code",
        "card_number", "expiry_date", "cvv", "name_on_card",
    )
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v
