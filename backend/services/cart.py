# backend/services/cart.py
"""Cart operations shared by guests and authenticated users.

Every mutation returns the cart as read back from the store with live
product rows joined in, never a locally patched copy.
"""
import logging
from typing import Dict, List, MutableMapping, NamedTuple

from sqlalchemy.orm import Session

from database import fits_int
from models.product import Product
from services import pricing
from services.cart_store import CartStore, DatabaseCartStore, SessionCartStore
from services.catalog import get_product
from services.errors import InvalidQuantity, OutOfStock

logger = logging.getLogger(__name__)


class CartLine(NamedTuple):
    product: Product
    quantity: int


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity=quantity)
    return quantity


def _load_products(db: Session, product_ids) -> Dict[int, Product]:
    ids = list(product_ids)
    if not ids:
        return {}
    return {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}


def get_cart(db: Session, store: CartStore) -> List[CartLine]:
    lines = store.lines()
    products = _load_products(db, lines.keys())
    # Lines pointing at deleted products are skipped, not reported
    return [
        CartLine(products[pid], quantity)
        for pid, quantity in lines.items()
        if pid in products
    ]


def add_to_cart(db: Session, store: CartStore, product_id: int, quantity) -> List[CartLine]:
    quantity = _validate_quantity(quantity)
    product = get_product(db, product_id)
    if product.stock < quantity:
        raise OutOfStock(
            f"Insufficient stock for {product.name}",
            product_id=product.id,
            requested=quantity,
            available=product.stock,
        )
    store.add(product.id, quantity)
    return get_cart(db, store)


def decrement_cart(db: Session, store: CartStore, product_id: int) -> List[CartLine]:
    if fits_int(product_id):
        store.decrement(product_id)
    return get_cart(db, store)


def remove_from_cart(db: Session, store: CartStore, product_id: int) -> List[CartLine]:
    # Out-of-range ids cannot be in any cart
    if fits_int(product_id):
        store.remove(product_id)
    return get_cart(db, store)


def clear_cart(db: Session, store: CartStore) -> List[CartLine]:
    store.clear()
    return []


def merge_guest_cart(db: Session, session: MutableMapping, user_id: int) -> int:
    """Move the guest session cart into the user's persisted cart.

    Unknown products are dropped. Stock is not checked here, checkout
    re-validates every line anyway. Returns the number of merged lines.
    """
    guest = SessionCartStore(session)
    lines = guest.lines()
    if not lines:
        return 0
    products = _load_products(db, lines.keys())
    user_store = DatabaseCartStore(db, user_id)
    merged = 0
    for pid, quantity in lines.items():
        if pid in products and quantity >= 1:
            user_store.add(pid, quantity)
            merged += 1
    guest.clear()
    logger.info("Merged %d guest cart line(s) into cart of user %s", merged, user_id)
    return merged


def cart_summary(lines: List[CartLine]) -> Dict[str, int]:
    subtotal = pricing.cart_total(lines)
    shipping = pricing.shipping_fee(subtotal)
    return {
        "items": sum(line.quantity for line in lines),
        "subtotal": subtotal,
        "shipping": shipping,
        "total": subtotal + shipping,
    }
