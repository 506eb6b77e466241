"""
Product schemas
"""
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)
    brand: Optional[str] = None
    price: float = Field(..., gt=0)


class ProductCreate(ProductBase):
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = None
    popularity_score: float = Field(0.0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    popularity_score: Optional[float] = Field(None, ge=0)


class ProductResponse(ProductBase):
    id: int
    stock: int = 0
    image_url: Optional[str] = None
    rating: Optional[float] = None
    review_count: int = 0
    popularity_score: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PriceBounds(BaseModel):
    min: float
    max: float


class FacetsResponse(BaseModel):
    categories: List[str]
    brands: List[str]
    price_range: PriceBounds


class CatalogPageResponse(BaseModel):
    """One page of the filtered, sorted catalog plus the panel state that produced it."""
    items: List[ProductResponse]
    total_count: int
    total_pages: int
    page: int
    page_size: int
    facets: FacetsResponse
    active_filter_count: int
    query_params: Dict[str, Any]


class SuggestionsResponse(BaseModel):
    products: List[ProductResponse]
    categories: List[str]
    brands: List[str]
