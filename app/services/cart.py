"""Cart line consolidation.

A cart holds at most one line per identity key ``(product_id, size, variant_id)``.
Totals are derived from the lines on demand and never stored.

These functions mutate the ``Cart`` ORM object they are given; committing is
left to the caller so one request maps to one transaction.
"""
import logging
from typing import Optional

from app.models.cart import Cart, CartItem
from app.services.exceptions import InvalidQuantity, ItemNotFound
from app.services.stock import normalize_size

logger = logging.getLogger(__name__)


def identity_key(product_id, size, variant_id=None):
    # Empty variant ids from query strings mean "no variant"
    return (int(product_id), normalize_size(size), variant_id or None)


def find_item(cart: Cart, product_id, size, variant_id=None) -> Optional[CartItem]:
    key = identity_key(product_id, size, variant_id)
    return next((i for i in cart.items if i.key == key), None)


def add_item(cart: Cart, new_item) -> CartItem:
    """Merge ``new_item`` into the cart.

    Quantities of an existing line are summed and clamped to ``new_item.stock``;
    the latest stock value always wins as the ceiling.
    """
    if new_item.quantity <= 0:
        raise InvalidQuantity("Quantity must be greater than zero")
    if new_item.quantity > new_item.stock:
        raise InvalidQuantity(f"Only {new_item.stock} left in stock")

    existing = find_item(cart, new_item.productId, new_item.size, new_item.variantId)
    if existing:
        merged = existing.quantity + new_item.quantity
        if merged > new_item.stock:
            logger.info(
                "Clamping cart %s line %s to stock %s (requested %s)",
                cart.id, existing.key, new_item.stock, merged,
            )
            merged = new_item.stock
        existing.quantity = merged
        existing.stock = new_item.stock
        return existing

    line = CartItem(
        product_id=int(new_item.productId),
        name=new_item.name,
        price=new_item.price,
        offer_price=new_item.offerPrice,
        quantity=new_item.quantity,
        size=normalize_size(new_item.size),
        image=new_item.image,
        stock=new_item.stock,
        variant_id=new_item.variantId or None,
        variant_name=new_item.variantName,
        variant_type=new_item.variantType,
    )
    cart.items.append(line)
    return line


def update_quantity(cart: Cart, product_id, size, quantity: int, variant_id=None) -> Optional[CartItem]:
    """Set a line's quantity directly. Non-positive quantities remove the line."""
    if quantity <= 0:
        remove_item(cart, product_id, size, variant_id)
        return None
    line = find_item(cart, product_id, size, variant_id)
    if line is None:
        raise ItemNotFound(product_id, size, variant_id)
    line.quantity = quantity
    return line


def remove_item(cart: Cart, product_id, size, variant_id=None) -> None:
    line = find_item(cart, product_id, size, variant_id)
    if line is not None:
        cart.items.remove(line)


def clear(cart: Cart) -> None:
    cart.items.clear()


def line_unit_price(line) -> float:
    return line.offer_price if line.offer_price is not None else line.price


def get_total(cart: Cart) -> float:
    return sum(line_unit_price(i) * i.quantity for i in cart.items)


def get_item_count(cart: Cart) -> int:
    return sum(i.quantity for i in cart.items)
