"""Order placement and cancellation.

Placing an order snapshots each line from the live product, prices it
server-side, reduces stock line by line and clears the buyer's cart, all in
the caller's transaction.
"""
import logging
import time
import uuid
from collections import defaultdict
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.cart import Cart
from app.models.order import CANCELLABLE_STATUSES, Order, OrderItem
from app.models.user import User
from app.services import cart as cart_service
from app.services import coupons as coupon_service
from app.services import stock as stock_service
from app.services.exceptions import InvalidQuantity, OrderStateError, ProductNotFound

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9].upper()}"


def _lines_from_cart(cart: Optional[Cart]) -> List[dict]:
    if not cart:
        return []
    return [
        {
            "product_id": i.product_id,
            "size": i.size,
            "quantity": i.quantity,
            "variant_id": i.variant_id,
            "variant_name": i.variant_name,
            "variant_type": i.variant_type,
        }
        for i in cart.items
    ]


def _lines_from_payload(items) -> List[dict]:
    return [
        {
            "product_id": i.productId,
            "size": i.size,
            "quantity": i.quantity,
            "variant_id": i.variantId,
            "variant_name": i.variantName,
            "variant_type": i.variantType,
        }
        for i in items
    ]


def demand_key(product, size):
    # Without a size ledger every size draws from the same aggregate count
    if product.size_stocks:
        return product.id, stock_service.normalize_size(size)
    return product.id, None


def available_stock(product, size) -> int:
    if product.size_stocks:
        key = stock_service.normalize_size(size)
        entry = next((e for e in product.size_stocks if stock_service.normalize_size(e["size"]) == key), None)
        if entry is None:
            return 0
        return int(entry.get("stock") or 0)
    return int(product.stock or 0)


def place_order(db: Session, user: User, payload) -> Order:
    cart = db.query(Cart).filter(Cart.user_id == user.id).first()
    lines = _lines_from_payload(payload.items) if payload.items else _lines_from_cart(cart)
    if not lines:
        raise OrderStateError("Order must contain at least one item")

    # Row locks always in ascending product id order
    products = {}
    for pid in sorted({line["product_id"] for line in lines}):
        product = stock_service.lock_product(db, pid)
        if not product.is_active:
            raise ProductNotFound(pid)
        products[pid] = product

    requested = defaultdict(int)
    for line in lines:
        requested[demand_key(products[line["product_id"]], line["size"])] += line["quantity"]

    for (pid, size), quantity in requested.items():
        available = available_stock(products[pid], size)
        if quantity > available:
            label = f"size {size} of product {pid}" if size is not None else f"product {pid}"
            raise InvalidQuantity(f"Insufficient stock for {label}. Available: {available}")

    items = []
    subtotal = 0.0
    for line in lines:
        product = products[line["product_id"]]
        unit_price = round(product.unit_price, 2)
        subtotal += unit_price * line["quantity"]
        items.append(
            OrderItem(
                product_id=product.id,
                name=product.name,
                price=unit_price,
                quantity=line["quantity"],
                size=stock_service.normalize_size(line["size"]),
                image=product.main_image,
                variant_id=line["variant_id"] or None,
                variant_name=line["variant_name"],
                variant_type=line["variant_type"],
            )
        )
    subtotal = round(subtotal, 2)
    shipping = coupon_service.shipping_cost(subtotal)

    discount = 0.0
    coupon = None
    if payload.couponCode:
        coupon, discount = coupon_service.validate_coupon(db, payload.couponCode, subtotal, lock=True)

    address = payload.shippingAddress
    order = Order(
        order_number=generate_order_number(),
        user_id=user.id,
        shipping_name=address.name,
        shipping_phone=address.phone,
        shipping_address=address.address,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_pincode=address.pincode,
        payment_method=payload.paymentMethod,
        payment_status="pending",
        order_status="pending",
        subtotal=subtotal,
        shipping_cost=shipping,
        discount=discount,
        total=round(max(0.0, subtotal + shipping - discount), 2),
        coupon_code=coupon.code if coupon else None,
        notes=payload.notes,
        items=items,
    )
    db.add(order)
    db.flush()

    for item in items:
        stock_service.reduce_stock(db, item.product_id, item.size, item.quantity)

    if coupon:
        coupon.used_count = (coupon.used_count or 0) + 1
    if cart:
        cart_service.clear(cart)

    db.flush()
    logger.info(
        "Placed order %s for user %s: %s lines, total %.2f",
        order.order_number, user.id, len(items), order.total,
    )
    return order


def cancel_order(db: Session, order: Order, allowed=CANCELLABLE_STATUSES) -> Order:
    """Cancel ``order`` and give its quantities back to stock."""
    if order.order_status not in allowed:
        raise OrderStateError(f"Order cannot be cancelled once {order.order_status}")
    order.order_status = "cancelled"
    for item in order.items:
        stock_service.restore_stock(db, item.product_id, item.size, item.quantity)
    db.flush()
    logger.info("Cancelled order %s; stock restored for %s lines", order.order_number, len(order.items))
    return order
