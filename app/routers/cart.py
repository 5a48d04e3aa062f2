from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.models.user import User, get_db
from app.models.cart import Cart
from app.models.product import Product
from app.schemas.cart import CartItemIn, CartItemOut, CartItemUpdate, CartOut
from app.services import cart as cart_service
from app.services.exceptions import InvalidQuantity, ItemNotFound
from app.utils.security import get_current_user


router = APIRouter()


def get_or_create_cart(db: Session, user_id: int) -> Cart:
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if not cart:
        cart = Cart(user_id=user_id)
        db.add(cart)
        db.flush()
    return cart


def serialize_cart(cart: Cart) -> CartOut:
    items = [
        CartItemOut(
            productId=i.product_id,
            name=i.name,
            price=i.price,
            offerPrice=i.offer_price,
            quantity=i.quantity,
            size=i.size,
            image=i.image,
            stock=i.stock,
            variantId=i.variant_id,
            variantName=i.variant_name,
            variantType=i.variant_type,
        )
        for i in cart.items
    ]
    return CartOut(
        items=items,
        total=cart_service.get_total(cart),
        itemCount=cart_service.get_item_count(cart),
    )


@router.get("/", response_model=CartOut)
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    cart = get_or_create_cart(db, current_user.id)
    db.commit()  # ensure cart persisted if created
    db.refresh(cart)
    return serialize_cart(cart)


@router.post("/", response_model=CartOut)
def add_cart_item(
    payload: CartItemIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = db.query(Product).filter(Product.id == payload.productId).first()
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = get_or_create_cart(db, current_user.id)
    try:
        cart_service.add_item(cart, payload)
    except InvalidQuantity:
        db.rollback()
        raise HTTPException(status_code=400, detail="Invalid quantity")
    db.commit()
    db.refresh(cart)
    return serialize_cart(cart)


@router.put("/", response_model=CartOut)
def update_cart_item(
    payload: CartItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, current_user.id)
    try:
        cart_service.update_quantity(cart, payload.productId, payload.size, payload.quantity, payload.variantId)
    except ItemNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    db.refresh(cart)
    return serialize_cart(cart)


@router.delete("/", response_model=CartOut)
def remove_cart_item(
    productId: int = Query(...),
    size: str = Query(..., min_length=1),
    variantId: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, current_user.id)
    cart_service.remove_item(cart, productId, size, variantId)
    db.commit()
    db.refresh(cart)
    return serialize_cart(cart)


@router.post("/clear", response_model=CartOut)
def clear_cart(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    cart = get_or_create_cart(db, current_user.id)
    cart_service.clear(cart)
    db.commit()
    db.refresh(cart)
    return serialize_cart(cart)
