import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config import get_settings
from app.models.product import Product
from app.models.user import User, get_db
from app.schemas.product import ProductCreate, ProductOut, ProductUpdate, SizeStock
from app.services import stock as stock_service
from app.services.exceptions import InvalidQuantity
from app.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def to_product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        category=p.category,
        brand=p.brand,
        price=p.price,
        offerPrice=p.offer_price,
        images=p.images or [],
        sku=p.sku,
        featured=bool(p.featured),
        isActive=bool(p.is_active),
        stock=p.stock or 0,
        sizeStocks=[SizeStock(**e) for e in p.size_stocks] if p.size_stocks else None,
        sizes=p.sizes,
    )


def _apply_payload(product: Product, payload: ProductCreate) -> None:
    product.name = payload.name
    product.description = payload.description
    product.category = payload.category.strip().lower() if payload.category else None
    product.brand = payload.brand
    product.price = payload.price
    product.offer_price = payload.offerPrice
    product.images = list(payload.images)
    product.sku = payload.sku or None
    product.featured = payload.featured
    product.is_active = payload.isActive
    if payload.sizeStocks is None:
        product.size_stocks = None
        product.stock = payload.stock
    else:
        try:
            stock_service.apply_size_stocks(product, payload.sizeStocks)
        except InvalidQuantity as e:
            raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[ProductOut])
def get_all_products(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List active products with optional comma-separated category filter and name search."""
    query = db.query(Product).filter(Product.is_active.is_(True))
    if category:
        cats = [c.strip().lower() for c in category.split(",") if c.strip()]
        if cats:
            query = query.filter(func.lower(Product.category).in_(cats))
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(Product.name.ilike(term), Product.brand.ilike(term)))
    products = query.order_by(Product.id).offset(page * size).limit(size).all()
    return [to_product_out(p) for p in products]


@router.get("/admin/low-stock", response_model=List[ProductOut])
def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    limit = threshold if threshold is not None else get_settings().LOW_STOCK_THRESHOLD
    products = db.query(Product).filter(Product.stock < limit).order_by(Product.stock).all()
    return [to_product_out(p) for p in products]


@router.get("/{id}", response_model=ProductOut)
def get_product_by_id(id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product)


@router.post("/admin", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    product = Product()
    _apply_payload(product, payload)
    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="SKU already in use")
    db.refresh(product)
    logger.info("Created product %s with stock %s", product.id, product.stock)
    return to_product_out(product)


@router.put("/admin/{id}", response_model=ProductOut)
def update_product(
    id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    product = db.query(Product).filter(Product.id == id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    _apply_payload(product, payload)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="SKU already in use")
    db.refresh(product)
    return to_product_out(product)


@router.delete("/admin/{id}")
def delete_product(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    product = db.query(Product).filter(Product.id == id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    # Soft delete: carts and past orders still reference the row
    product.is_active = False
    db.commit()
    return {"message": "Product deleted"}
