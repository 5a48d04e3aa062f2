from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, UniqueConstraint
from datetime import datetime
from app.models.user import Base


REVIEW_STATUSES = ("pending", "approved", "rejected")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        # One review per user per product
        UniqueConstraint("product_id", "user_id", name="uq_review_product_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="approved")
    helpful = Column(Integer, nullable=False, default=0)
    reviewer_name = Column(String(120), nullable=True)
    verified_purchase = Column(Boolean, default=True)
    admin_response = Column(Text, nullable=True)
    admin_response_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
