from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal

from app.schemas.cart import VariantType, _normalize_size


class OrderItemIn(BaseModel):
    productId: int
    quantity: int = Field(gt=0)
    size: str
    variantId: Optional[str] = None
    variantName: Optional[str] = None
    variantType: Optional[VariantType] = None

    check_size = field_validator("size")(_normalize_size)


class ShippingAddress(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


PaymentMethod = Literal["cod", "razorpay"]


class OrderCreate(BaseModel):
    # When omitted the caller's cart is checked out
    items: Optional[List[OrderItemIn]] = None
    shippingAddress: ShippingAddress
    paymentMethod: PaymentMethod = "cod"
    couponCode: Optional[str] = None
    notes: Optional[str] = None


OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    trackingNumber: Optional[str] = None
    notes: Optional[str] = None


class OrderPaymentStatusUpdate(BaseModel):
    paymentStatus: PaymentStatus


class TrackingUpdate(BaseModel):
    trackingNumber: str = Field(min_length=1)


class OrderItemOut(BaseModel):
    productId: int
    name: str
    price: float
    quantity: int
    size: Optional[str] = None
    image: Optional[str] = None
    variantId: Optional[str] = None
    variantName: Optional[str] = None
    variantType: Optional[VariantType] = None


class OrderOut(BaseModel):
    id: int
    orderNumber: str
    items: List[OrderItemOut]
    shippingAddress: ShippingAddress
    paymentMethod: PaymentMethod
    paymentStatus: PaymentStatus
    orderStatus: OrderStatus
    subtotal: float
    shippingCost: float
    discount: float
    total: float
    couponCode: Optional[str] = None
    trackingNumber: Optional[str] = None
    notes: Optional[str] = None
    createdAt: str
    updatedAt: str


class OrderTrackingOut(BaseModel):
    orderNumber: str
    orderStatus: OrderStatus
    paymentStatus: PaymentStatus
    trackingNumber: Optional[str] = None
    itemCount: int
    total: float
    createdAt: str
    updatedAt: str
