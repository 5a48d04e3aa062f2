"""Size-indexed stock bookkeeping for products.

``Product.size_stocks`` is the source of truth; ``Product.stock`` is a cached
sum that is rewritten together with the ledger on every change, so
``product.stock == total_stock(product.size_stocks)`` holds whenever the
product has a ledger.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.product import Product
from app.services.exceptions import InvalidQuantity, ProductNotFound

logger = logging.getLogger(__name__)


def normalize_size(size) -> str:
    return str(size).strip().upper()


def total_stock(entries: Optional[Iterable[dict]]) -> int:
    return sum(int(e.get("stock") or 0) for e in (entries or []))


def adjust_size(entries: List[dict], size, delta: int) -> Tuple[List[dict], bool]:
    """Return a new ledger with ``delta`` applied to ``size``, floored at zero.

    The second element tells whether ``size`` was present; an unknown size
    leaves every entry untouched.
    """
    key = normalize_size(size)
    matched = False
    updated = []
    for entry in entries:
        if normalize_size(entry["size"]) == key:
            matched = True
            updated.append({**entry, "stock": max(0, int(entry.get("stock") or 0) + delta)})
        else:
            updated.append(dict(entry))
    return updated, matched


def decrement_size(entries: List[dict], size, quantity: int) -> Tuple[List[dict], bool]:
    return adjust_size(entries, size, -quantity)


def lock_product(db: Session, product_id) -> Product:
    # Row lock for the rest of the transaction; concurrent orders for the
    # same product queue here instead of overwriting each other's counts.
    product = db.query(Product).filter(Product.id == product_id).with_for_update().first()
    if not product:
        raise ProductNotFound(product_id)
    return product


def reduce_stock(db: Session, product_id, size, quantity: int) -> Product:
    """Take ``quantity`` units of ``size`` from a product's stock.

    Never drives a count below zero. Both columns are flushed in the
    caller's transaction; commit or rollback is the caller's decision.
    """
    if quantity <= 0:
        raise InvalidQuantity("Quantity must be greater than zero")
    product = lock_product(db, product_id)

    if product.size_stocks:
        entries, matched = decrement_size(product.size_stocks, size, quantity)
        if not matched:
            logger.warning("Product %s has no size %r; size stocks left unchanged", product.id, size)
        # Reassign the list so SQLAlchemy notices the JSON change
        product.size_stocks = entries
        product.stock = total_stock(entries)
    else:
        current = int(product.stock or 0)
        if quantity > current:
            logger.warning(
                "Product %s oversold: %s requested, %s in stock; flooring at zero",
                product.id, quantity, current,
            )
        product.stock = max(0, current - quantity)

    db.flush()
    logger.info("Reduced stock of product %s size %s by %s; now %s", product.id, size, quantity, product.stock)
    return product


def restore_stock(db: Session, product_id, size, quantity: int) -> Product:
    """Give ``quantity`` units of ``size`` back, e.g. when an order is cancelled."""
    if quantity <= 0:
        raise InvalidQuantity("Quantity must be greater than zero")
    product = lock_product(db, product_id)

    if product.size_stocks:
        entries, matched = adjust_size(product.size_stocks, size, quantity)
        if not matched:
            logger.warning("Product %s has no size %r; nothing restored", product.id, size)
        product.size_stocks = entries
        product.stock = total_stock(entries)
    else:
        product.stock = int(product.stock or 0) + quantity

    db.flush()
    logger.info("Restored stock of product %s size %s by %s; now %s", product.id, size, quantity, product.stock)
    return product


def apply_size_stocks(product: Product, entries) -> None:
    """Replace a product's size ledger and recompute the aggregate.

    ``entries`` is an iterable of mappings or objects carrying ``size`` and
    ``stock``. ``None`` leaves the product untouched.
    """
    if entries is None:
        return
    ledger = []
    seen = set()
    for entry in entries:
        size = entry["size"] if isinstance(entry, dict) else entry.size
        count = entry["stock"] if isinstance(entry, dict) else entry.stock
        size = normalize_size(size)
        if not size:
            raise InvalidQuantity("Size name is required")
        if size in seen:
            raise InvalidQuantity(f"Duplicate size {size}")
        if int(count) < 0:
            raise InvalidQuantity(f"Stock for size {size} cannot be negative")
        seen.add(size)
        ledger.append({"size": size, "stock": int(count)})
    product.size_stocks = ledger
    product.stock = total_stock(ledger)
