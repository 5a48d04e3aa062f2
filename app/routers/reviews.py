import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.product import Product
from app.models.review import Review
from app.models.user import User, get_db
from app.schemas.review import (
    PurchaseCheckOut,
    ReviewCreate,
    ReviewOut,
    ReviewStatsOut,
    ReviewStatus,
    ReviewStatusUpdate,
    ReviewUpdate,
)
from app.services import reviews as review_service
from app.services.exceptions import DuplicateReview, PurchaseRequired
from app.utils.security import get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def to_review_out(r: Review) -> ReviewOut:
    return ReviewOut(
        id=r.id,
        productId=r.product_id,
        userId=r.user_id,
        orderId=r.order_id,
        rating=r.rating,
        comment=r.comment,
        status=r.status,  # type: ignore
        helpful=r.helpful or 0,
        reviewerName=r.reviewer_name,
        verifiedPurchase=bool(r.verified_purchase),
        adminResponse=r.admin_response,
        createdAt=r.created_at.isoformat(),
        updatedAt=r.updated_at.isoformat(),
    )


def _get_review(db: Session, id: int) -> Review:
    review = db.query(Review).filter(Review.id == id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.get("/", response_model=List[ReviewOut])
def get_product_reviews(
    productId: int = Query(...),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Approved reviews for a product, newest first; ``status=all`` includes the rest."""
    query = db.query(Review).filter(Review.product_id == productId)
    if status != "all":
        query = query.filter(Review.status == "approved")
    reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).all()
    return [to_review_out(r) for r in reviews]


@router.get("/stats", response_model=ReviewStatsOut)
def get_review_stats(productId: int = Query(...), db: Session = Depends(get_db)):
    return ReviewStatsOut(**review_service.review_stats(db, productId))


@router.get("/verify-purchase", response_model=PurchaseCheckOut)
def verify_purchase(
    productId: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    can_review, order_id = review_service.verify_purchase(db, current_user.id, productId)
    return PurchaseCheckOut(canReview=can_review, orderId=order_id)


@router.post("/", response_model=ReviewOut, status_code=201)
def create_review(
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not db.query(Product).filter(Product.id == payload.productId).first():
        raise HTTPException(status_code=404, detail="Product not found")
    try:
        review = review_service.create_review(db, current_user, payload.productId, payload.rating, payload.comment)
    except DuplicateReview as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))
    except PurchaseRequired as e:
        db.rollback()
        raise HTTPException(status_code=403, detail=str(e))
    db.commit()
    db.refresh(review)
    return to_review_out(review)


@router.put("/{id}", response_model=ReviewOut)
def update_own_review(
    id: int,
    payload: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    review = _get_review(db, id)
    if review.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own reviews")
    review.rating = payload.rating
    review.comment = payload.comment
    db.commit()
    db.refresh(review)
    return to_review_out(review)


@router.get("/admin", response_model=List[ReviewOut])
def get_all_reviews(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    status: Optional[ReviewStatus] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    query = db.query(Review)
    if status:
        query = query.filter(Review.status == status)
    reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).offset(page * size).limit(size).all()
    return [to_review_out(r) for r in reviews]


@router.put("/admin/{id}/status", response_model=ReviewOut)
def update_review_status(
    id: int,
    payload: ReviewStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    review = _get_review(db, id)
    review.status = payload.status
    if payload.adminResponse:
        review.admin_response = payload.adminResponse.strip()
        review.admin_response_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    logger.info("Review %s set to %s by admin %s", review.id, review.status, admin.id)
    return to_review_out(review)


@router.delete("/admin/{id}")
def delete_review(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    review = _get_review(db, id)
    db.delete(review)
    db.commit()
    return {"message": "Review deleted"}
