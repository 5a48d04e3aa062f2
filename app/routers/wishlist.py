from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.models.user import User, get_db
from app.models.wishlist import Wishlist, WishlistItem
from app.models.product import Product
from app.schemas.wishlist import WishlistOut, WishlistItemOut
from app.utils.security import get_current_user


router = APIRouter()


def _get_or_create_wishlist(db: Session, user_id: int) -> Wishlist:
    wl = db.query(Wishlist).filter(Wishlist.user_id == user_id).first()
    if not wl:
        wl = Wishlist(user_id=user_id)
        db.add(wl)
        db.flush()
    return wl


def _serialize_wishlist(wl: Wishlist) -> WishlistOut:
    items = [WishlistItemOut(productId=i.product_id, addedAt=i.created_at.isoformat()) for i in wl.items]
    return WishlistOut(items=items)


@router.get("/", response_model=WishlistOut)
def get_wishlist(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    wl = _get_or_create_wishlist(db, current_user.id)
    db.commit()
    db.refresh(wl)
    return _serialize_wishlist(wl)


@router.post("/toggle", response_model=WishlistOut)
def toggle_wishlist_item(
    productId: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = db.query(Product).filter(Product.id == productId).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    wl = _get_or_create_wishlist(db, current_user.id)
    item = next((i for i in wl.items if i.product_id == productId), None)
    if item:
        wl.items.remove(item)
    else:
        wl.items.append(WishlistItem(product_id=productId))
    db.commit()
    db.refresh(wl)
    return _serialize_wishlist(wl)


@router.delete("/", response_model=WishlistOut)
def remove_wishlist_item(
    productId: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    wl = _get_or_create_wishlist(db, current_user.id)
    item = next((i for i in wl.items if i.product_id == productId), None)
    if not item:
        raise HTTPException(status_code=404, detail="Item not in wishlist")
    wl.items.remove(item)
    db.commit()
    db.refresh(wl)
    return _serialize_wishlist(wl)
