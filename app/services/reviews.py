"""Product reviews restricted to buyers.

A user may review a product once, and only when one of their orders that
was not cancelled contains it.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.models.order import Order, OrderItem
from app.models.review import Review
from app.models.user import User
from app.services.exceptions import DuplicateReview, PurchaseRequired

logger = logging.getLogger(__name__)


def find_user_review(db: Session, user_id: int, product_id: int) -> Optional[Review]:
    return db.query(Review).filter(Review.user_id == user_id, Review.product_id == product_id).first()


def find_purchase(db: Session, user_id: int, product_id: int) -> Optional[Order]:
    """Most recent non-cancelled order of ``user_id`` containing ``product_id``."""
    return (
        db.query(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(
            Order.user_id == user_id,
            Order.order_status != "cancelled",
            OrderItem.product_id == product_id,
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .first()
    )


def verify_purchase(db: Session, user_id: int, product_id: int) -> Tuple[bool, Optional[int]]:
    if find_user_review(db, user_id, product_id):
        return False, None
    order = find_purchase(db, user_id, product_id)
    if not order:
        return False, None
    return True, order.id


def create_review(db: Session, user: User, product_id: int, rating: int, comment: str) -> Review:
    if find_user_review(db, user.id, product_id):
        raise DuplicateReview(product_id)
    order = find_purchase(db, user.id, product_id)
    if not order:
        raise PurchaseRequired(product_id)
    review = Review(
        product_id=product_id,
        user_id=user.id,
        order_id=order.id,
        rating=rating,
        comment=comment,
        status="approved",
        helpful=0,
        reviewer_name=user.name,
        verified_purchase=True,
    )
    db.add(review)
    db.flush()
    logger.info("User %s reviewed product %s (%s stars, order %s)", user.id, product_id, rating, order.id)
    return review


def review_stats(db: Session, product_id: int) -> dict:
    ratings = [
        r for (r,) in db.query(Review.rating).filter(Review.product_id == product_id, Review.status == "approved")
    ]
    distribution = {star: 0 for star in range(1, 6)}
    for rating in ratings:
        distribution[rating] += 1
    average = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
    return {"averageRating": average, "totalReviews": len(ratings), "ratingDistribution": distribution}
