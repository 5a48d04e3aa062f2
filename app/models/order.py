from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.user import Base


ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
# Orders in these states may still be cancelled by their owner
CANCELLABLE_STATUSES = ("pending", "processing")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(40), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # shipping address fields
    shipping_name = Column(String(255))
    shipping_phone = Column(String(50))
    shipping_address = Column(String(500))
    shipping_city = Column(String(100))
    shipping_state = Column(String(100))
    shipping_pincode = Column(String(20))

    payment_method = Column(String(20), default="cod")  # cod, razorpay
    payment_status = Column(String(20), default="pending")
    order_status = Column(String(20), default="pending")

    subtotal = Column(Float, default=0.0)
    shipping_cost = Column(Float, default=0.0)
    discount = Column(Float, default=0.0)
    total = Column(Float, default=0.0)
    coupon_code = Column(String(50))

    tracking_number = Column(String(100))
    notes = Column(String(1000))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )


class OrderItem(Base):
    """Snapshot of a purchased line, taken at checkout and never re-derived."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)  # unit price at time of order
    quantity = Column(Integer, nullable=False)
    size = Column(String(50))
    image = Column(String(500))
    variant_id = Column(String(100))
    variant_name = Column(String(100))
    variant_type = Column(String(20))

    order = relationship("Order", back_populates="items")
