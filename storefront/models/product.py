"""
Product model

The catalog pipeline treats products as immutable; only the admin panel and
the review roll-up write to this table.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.core.database import Base
from storefront.core.utils import utcnow


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text)

    # Categorization
    category = Column(String, nullable=False, index=True)  # electronics, fashion, home...
    brand = Column(String, nullable=True, index=True)

    # Pricing - Numeric(12,2) for monetary values
    price = Column(Numeric(12, 2), nullable=False)

    # Inventory
    stock = Column(Integer, default=0, nullable=False)

    # Media
    image_url = Column(String)

    # Social proof, maintained from reviews
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, default=0, nullable=False)
    popularity_score = Column(Float, default=0.0, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now()
    )

    # Relationships
    cart_items = relationship("CartItem", back_populates="product", passive_deletes=True)
    order_items = relationship("OrderItem", back_populates="product")
    reviews = relationship("Review", back_populates="product", passive_deletes=True)

    __table_args__ = (
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
        CheckConstraint('price > 0', name='check_price_positive'),
        CheckConstraint('rating IS NULL OR (rating >= 0 AND rating <= 5)', name='check_rating_range'),
        CheckConstraint('review_count >= 0', name='check_review_count_non_negative'),
    )
