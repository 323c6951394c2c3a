# backend/services/orders.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from database import fits_int
from models.order import Order, OrderItem, OrderStatus
from models.product import Product
from services.cart_store import CartStore
from services.errors import (
    CheckoutFailed, EmptyCart, InsufficientStock, InvalidStatusTransition, OrderNotFound,
)
from services.identity import Authenticated, Identity, is_admin, user_id_of
from services.pricing import effective_unit_price

logger = logging.getLogger(__name__)

# Allowed status changes; delivered and cancelled are terminal
TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

CUSTOMER_FIELDS = ("customer_name", "customer_email", "customer_phone", "shipping_address")


def _insufficient(product: Optional[Product], product_id: int, requested: int, available: int) -> InsufficientStock:
    name = product.name if product else f"#{product_id}"
    return InsufficientStock(
        f"Insufficient stock for {name}",
        product_id=product_id,
        requested=requested,
        available=available,
    )


def checkout(db: Session, store: CartStore, identity: Identity, details: Dict[str, Any]) -> Order:
    """Turn the identity's cart into a pending order.

    Stock is checked up front for a useful error, then decremented inside
    the order transaction with ``stock >= quantity`` as the update condition;
    a line that loses that race aborts the whole order.
    """
    lines = store.lines()
    if not lines:
        raise EmptyCart()

    products = {p.id: p for p in db.query(Product).filter(Product.id.in_(list(lines))).all()}

    items: List[OrderItem] = []
    total_amount = 0
    for product_id, quantity in lines.items():
        product = products.get(product_id)
        if product is None or product.stock < quantity:
            raise _insufficient(product, product_id, quantity, product.stock if product else 0)
        unit_price = effective_unit_price(product)
        total_amount += unit_price * quantity
        items.append(OrderItem(product_id=product_id, quantity=quantity, price_at_purchase=unit_price))

    order = Order(
        user_id=user_id_of(identity),
        status=OrderStatus.PENDING.value,
        total_amount=total_amount,
        items=items,
        **{field: details[field] for field in CUSTOMER_FIELDS},
    )

    try:
        db.add(order)
        db.flush()
        for item in items:
            decremented = db.execute(
                update(Product)
                .where(Product.id == item.product_id, Product.stock >= item.quantity)
                .values(stock=Product.stock - item.quantity)
                .execution_options(synchronize_session=False)
            ).rowcount
            if decremented != 1:
                available = db.query(Product.stock).filter(Product.id == item.product_id).scalar() or 0
                raise _insufficient(products.get(item.product_id), item.product_id, item.quantity, available)
        db.commit()
    except InsufficientStock:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Order transaction failed: %s", e)
        raise CheckoutFailed() from e

    db.refresh(order)
    logger.info("Order %s created (%d line(s), total %d)", order.id, len(items), order.total_amount)

    # The order is committed; a failing cart update must not undo it.
    # Only the ordered quantities leave the cart, lines added meanwhile stay.
    try:
        store.remove_ordered(lines)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Could not clear cart after order %s: %s", order.id, e)

    return order


def _order_query(db: Session):
    return db.query(Order).options(selectinload(Order.items))


def _find_order(db: Session, order_id: int) -> Optional[Order]:
    if not fits_int(order_id):
        return None
    return _order_query(db).filter(Order.id == order_id).first()


def can_view(identity: Identity, order: Order, guest_order_ids: Iterable[int] = ()) -> bool:
    if is_admin(identity):
        return True
    if isinstance(identity, Authenticated):
        return order.user_id == identity.user_id
    return order.id in set(guest_order_ids)


def get_order(db: Session, identity: Identity, order_id: int, guest_order_ids: Iterable[int] = ()) -> Order:
    order = _find_order(db, order_id)
    # Foreign orders are reported as missing
    if not order or not can_view(identity, order, guest_order_ids):
        raise OrderNotFound(order_id=order_id)
    return order


def list_orders(db: Session, identity: Identity, guest_order_ids: Iterable[int] = ()) -> List[Order]:
    query = _order_query(db)
    if isinstance(identity, Authenticated):
        query = query.filter(Order.user_id == identity.user_id)
    else:
        ids = list(guest_order_ids)
        if not ids:
            return []
        query = query.filter(Order.id.in_(ids))
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def list_all_orders(db: Session, status: Optional[str] = None) -> List[Order]:
    query = _order_query(db)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Order:
    order = _find_order(db, order_id)
    if not order:
        raise OrderNotFound(order_id=order_id)

    current = OrderStatus(order.status)
    new = OrderStatus(status)
    if new == current:
        return order
    if new not in TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot change status from {current.value} to {new.value}",
            order_id=order_id,
            current=current.value,
            requested=new.value,
        )

    order.status = new.value
    db.commit()
    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.id, current.value, new.value)
    return order
