import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.user import User, get_db
from app.models.order import Order
from app.schemas.order import (
    OrderCreate,
    OrderItemOut,
    OrderOut,
    OrderPaymentStatusUpdate,
    OrderStatus,
    OrderStatusUpdate,
    OrderTrackingOut,
    TrackingUpdate,
)
from app.services import checkout
from app.services.exceptions import CouponError, InvalidQuantity, OrderStateError, ProductNotFound
from app.utils.security import get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def map_order_to_out(order: Order) -> OrderOut:
    shipping = {
        "name": order.shipping_name,
        "phone": order.shipping_phone,
        "address": order.shipping_address,
        "city": order.shipping_city,
        "state": order.shipping_state,
        "pincode": order.shipping_pincode,
    }
    items = [
        OrderItemOut(
            productId=i.product_id,
            name=i.name,
            price=i.price,
            quantity=i.quantity,
            size=i.size,
            image=i.image,
            variantId=i.variant_id,
            variantName=i.variant_name,
            variantType=i.variant_type,
        )
        for i in order.items
    ]
    return OrderOut(
        id=order.id,
        orderNumber=order.order_number,
        items=items,
        shippingAddress=shipping,  # type: ignore
        paymentMethod=order.payment_method,  # type: ignore
        paymentStatus=order.payment_status,  # type: ignore
        orderStatus=order.order_status,  # type: ignore
        subtotal=order.subtotal,
        shippingCost=order.shipping_cost,
        discount=order.discount,
        total=order.total,
        couponCode=order.coupon_code,
        trackingNumber=order.tracking_number,
        notes=order.notes,
        createdAt=order.created_at.isoformat(),
        updatedAt=order.updated_at.isoformat(),
    )


def _get_own_order(db: Session, id: int, user: User) -> Order:
    order = db.query(Order).filter(Order.id == id, Order.user_id == user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _get_order(db: Session, id: int) -> Order:
    order = db.query(Order).filter(Order.id == id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        order = checkout.place_order(db, current_user, payload)
    except ProductNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidQuantity, CouponError, OrderStateError) as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(order)
    return map_order_to_out(order)


@router.get("/", response_model=List[OrderOut])
def get_user_orders(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    orders = (
        db.query(Order)
        .filter(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [map_order_to_out(o) for o in orders]


@router.get("/track", response_model=OrderTrackingOut)
def track_order(
    orderNumber: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = (
        db.query(Order)
        .filter(Order.order_number == orderNumber.strip(), Order.user_id == current_user.id)
        .first()
    )
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderTrackingOut(
        orderNumber=order.order_number,
        orderStatus=order.order_status,  # type: ignore
        paymentStatus=order.payment_status,  # type: ignore
        trackingNumber=order.tracking_number,
        itemCount=sum(i.quantity for i in order.items),
        total=order.total,
        createdAt=order.created_at.isoformat(),
        updatedAt=order.updated_at.isoformat(),
    )


@router.get("/{id}", response_model=OrderOut)
def get_order_by_id(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return map_order_to_out(_get_own_order(db, id, current_user))


@router.post("/{id}/cancel", response_model=OrderOut)
def cancel_order(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    order = _get_own_order(db, id, current_user)
    try:
        checkout.cancel_order(db, order)
    except OrderStateError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()
    db.refresh(order)
    return map_order_to_out(order)


@admin_router.get("/", response_model=List[OrderOut])
def get_admin_orders(
    page: int = Query(0, ge=0),
    size: int = Query(50, ge=1, le=200),
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    query = db.query(Order)
    if status:
        query = query.filter(Order.order_status == status)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(Order.order_number.ilike(term), Order.shipping_name.ilike(term), Order.shipping_phone.ilike(term))
        )
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(page * size).limit(size).all()
    return [map_order_to_out(o) for o in orders]


@admin_router.put("/{id}/status", response_model=OrderOut)
def admin_update_order_status(
    id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    order = _get_order(db, id)
    try:
        if payload.status == "cancelled":
            checkout.cancel_order(db, order, allowed=("pending", "processing", "shipped"))
        elif order.order_status == "cancelled":
            raise OrderStateError("Cancelled orders cannot be reopened")
        else:
            order.order_status = payload.status
    except OrderStateError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    if payload.trackingNumber:
        order.tracking_number = payload.trackingNumber.strip()
    if payload.notes:
        order.notes = payload.notes
    db.commit()
    db.refresh(order)
    logger.info("Order %s status set to %s by admin %s", order.order_number, order.order_status, admin.id)
    return map_order_to_out(order)


@admin_router.put("/{id}/payment-status", response_model=OrderOut)
def admin_update_payment_status(
    id: int,
    payload: OrderPaymentStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    order = _get_order(db, id)
    order.payment_status = payload.paymentStatus
    db.commit()
    db.refresh(order)
    return map_order_to_out(order)


@admin_router.patch("/{id}/tracking", response_model=OrderOut)
def admin_update_tracking(
    id: int,
    payload: TrackingUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    order = _get_order(db, id)
    order.tracking_number = payload.trackingNumber.strip()
    db.commit()
    db.refresh(order)
    return map_order_to_out(order)
