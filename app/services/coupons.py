import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.coupon import Coupon
from app.services.exceptions import CouponError

logger = logging.getLogger(__name__)


def shipping_cost(subtotal: float) -> float:
    settings = get_settings()
    if subtotal <= 0 or subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return 0.0
    return float(settings.SHIPPING_FLAT_RATE)


def find_active_coupon(db: Session, code: str, now: Optional[datetime] = None, lock: bool = False) -> Optional[Coupon]:
    now = now or datetime.utcnow()
    query = db.query(Coupon).filter(
        Coupon.code == code.strip().upper(),
        Coupon.is_active.is_(True),
        Coupon.valid_from <= now,
        Coupon.valid_until >= now,
    )
    if lock:
        # Held until the order commits so used_count cannot pass usage_limit
        query = query.with_for_update()
    return query.first()


def compute_discount(coupon: Coupon, subtotal: float) -> float:
    if coupon.type == "percentage":
        discount = subtotal * coupon.value / 100
        if coupon.max_discount is not None:
            discount = min(discount, coupon.max_discount)
    elif coupon.type == "fixed":
        discount = min(coupon.value, subtotal)
    elif coupon.type == "shipping":
        discount = shipping_cost(subtotal)
    else:
        raise CouponError(f"Unsupported coupon type {coupon.type}")
    return float(round(discount))


def validate_coupon(db: Session, code: str, subtotal: float, lock: bool = False) -> tuple:
    """Return ``(coupon, discount)`` or raise ``CouponError`` with a user-facing reason."""
    coupon = find_active_coupon(db, code, lock=lock)
    if not coupon:
        logger.info("Rejected coupon %r: unknown, inactive or expired", code)
        raise CouponError("Invalid coupon code")
    if subtotal < (coupon.min_amount or 0):
        raise CouponError(f"Minimum order amount is {coupon.min_amount:g}")
    if (coupon.used_count or 0) >= (coupon.usage_limit or 0):
        logger.info("Rejected coupon %s: usage limit %s reached", coupon.code, coupon.usage_limit)
        raise CouponError("Coupon usage limit exceeded")
    return coupon, compute_discount(coupon, subtotal)
