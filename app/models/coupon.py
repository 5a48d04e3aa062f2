from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from datetime import datetime
from app.models.user import Base


COUPON_TYPES = ("percentage", "fixed", "shipping")


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)  # stored uppercase
    description = Column(String(500))
    type = Column(String(20), nullable=False, default="percentage")
    value = Column(Float, nullable=False, default=0.0)
    min_amount = Column(Float, default=0.0)
    max_discount = Column(Float)
    usage_limit = Column(Integer, default=0)
    used_count = Column(Integer, default=0)
    valid_from = Column(DateTime, nullable=False)
    valid_until = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
