from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from app.models.coupon import Coupon
from app.models.user import User, get_db
from app.schemas.coupon import CouponCreate, CouponOut, CouponUpdate, CouponValidateIn, CouponValidateOut
from app.services import coupons as coupon_service
from app.services.exceptions import CouponError
from app.utils.security import require_admin


router = APIRouter()


def to_coupon_out(c: Coupon) -> CouponOut:
    return CouponOut(
        id=c.id,
        code=c.code,
        description=c.description,
        type=c.type,  # type: ignore
        value=c.value,
        minAmount=c.min_amount or 0,
        maxDiscount=c.max_discount,
        usageLimit=c.usage_limit or 0,
        usedCount=c.used_count or 0,
        validFrom=c.valid_from,
        validUntil=c.valid_until,
        isActive=bool(c.is_active),
    )


def _apply_payload(coupon: Coupon, payload: CouponCreate) -> None:
    if payload.validUntil <= payload.validFrom:
        raise HTTPException(status_code=400, detail="validUntil must be after validFrom")
    if payload.type == "percentage" and payload.value > 100:
        raise HTTPException(status_code=400, detail="Percentage coupons cannot exceed 100")
    coupon.code = payload.code
    coupon.description = payload.description
    coupon.type = payload.type
    coupon.value = payload.value
    coupon.min_amount = payload.minAmount
    coupon.max_discount = payload.maxDiscount
    coupon.usage_limit = payload.usageLimit
    coupon.valid_from = payload.validFrom
    coupon.valid_until = payload.validUntil
    coupon.is_active = payload.isActive


@router.post("/validate", response_model=CouponValidateOut)
def validate_coupon(payload: CouponValidateIn, db: Session = Depends(get_db)):
    try:
        coupon, discount = coupon_service.validate_coupon(db, payload.code, payload.subtotal)
    except CouponError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CouponValidateOut(
        code=coupon.code,
        discount=discount,
        type=coupon.type,  # type: ignore
        description=coupon.description,
    )


@router.get("/", response_model=List[CouponOut])
def list_coupons(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return [to_coupon_out(c) for c in db.query(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()).all()]


@router.post("/", response_model=CouponOut, status_code=201)
def create_coupon(payload: CouponCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    coupon = Coupon(used_count=0)
    _apply_payload(coupon, payload)
    db.add(coupon)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Coupon code already exists")
    db.refresh(coupon)
    return to_coupon_out(coupon)


@router.put("/{id}", response_model=CouponOut)
def update_coupon(
    id: int,
    payload: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    coupon = db.query(Coupon).filter(Coupon.id == id).first()
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    _apply_payload(coupon, payload)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Coupon code already exists")
    db.refresh(coupon)
    return to_coupon_out(coupon)


@router.delete("/{id}")
def delete_coupon(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    coupon = db.query(Coupon).filter(Coupon.id == id).first()
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    db.delete(coupon)
    db.commit()
    return {"message": "Coupon deleted"}
