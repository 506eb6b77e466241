"""
Review models

One review per (user, product): writes upsert on the unique constraint so
editing replaces instead of duplicating. helpful_count is derived from
review_helpful rows.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.core.database import Base
from storefront.core.utils import utcnow

MAX_TITLE_LENGTH = 100
MAX_COMMENT_LENGTH = 1000


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    title = Column(String(MAX_TITLE_LENGTH), nullable=True)
    comment = Column(Text, nullable=True)
    helpful_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    product = relationship("Product", back_populates="reviews")
    votes = relationship("ReviewHelpful", back_populates="review", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_reviews_user_product'),
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_review_rating_range'),
        CheckConstraint(f'char_length(comment) <= {MAX_COMMENT_LENGTH}', name='check_review_comment_length'),
    )


class ReviewHelpful(Base):
    __tablename__ = "review_helpful"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    review = relationship("Review", back_populates="votes")

    __table_args__ = (
        UniqueConstraint('user_id', 'review_id', name='uq_review_helpful_user_review'),
    )
