# backend/services/cart_store.py
"""Backends holding cart lines (product id -> quantity).

Guests keep their cart in the signed session cookie, authenticated users
in the ``cart_items`` table. Cart and checkout logic only talks to the
``CartStore`` interface; ``store_for`` picks the backend from the identity.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, MutableMapping

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.cart import CartItem
from services.identity import Authenticated, Identity

logger = logging.getLogger(__name__)

# Key of the guest cart inside the session dict
SESSION_CART_KEY = "cart"


class CartStore(ABC):
    @abstractmethod
    def lines(self) -> Dict[int, int]:
        """Return product id -> quantity in insertion order."""

    @abstractmethod
    def add(self, product_id: int, quantity: int) -> None:
        """Add quantity to the line, creating it if missing."""

    @abstractmethod
    def decrement(self, product_id: int) -> None:
        """Lower the quantity by one, dropping the line instead of reaching 0."""

    @abstractmethod
    def remove(self, product_id: int) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def remove_ordered(self, ordered: Dict[int, int]) -> None:
        """Take ordered quantities off their lines; whatever was added since stays."""


class SessionCartStore(CartStore):
    """Guest cart stored in the session mapping as {"<product_id>": quantity}."""

    def __init__(self, session: MutableMapping):
        self.session = session

    def _cart(self) -> Dict[str, int]:
        return dict(self.session.get(SESSION_CART_KEY) or {})

    def _save(self, cart: Dict[str, int]) -> None:
        if cart:
            self.session[SESSION_CART_KEY] = cart
        else:
            self.session.pop(SESSION_CART_KEY, None)

    def lines(self) -> Dict[int, int]:
        return {int(pid): int(qty) for pid, qty in self._cart().items()}

    def add(self, product_id: int, quantity: int) -> None:
        cart = self._cart()
        key = str(product_id)
        cart[key] = int(cart.get(key, 0)) + quantity
        self._save(cart)

    def decrement(self, product_id: int) -> None:
        cart = self._cart()
        key = str(product_id)
        if key not in cart:
            return
        new_quantity = int(cart[key]) - 1
        if new_quantity < 1:
            del cart[key]
        else:
            cart[key] = new_quantity
        self._save(cart)

    def remove(self, product_id: int) -> None:
        cart = self._cart()
        cart.pop(str(product_id), None)
        self._save(cart)

    def clear(self) -> None:
        self.session.pop(SESSION_CART_KEY, None)

    def remove_ordered(self, ordered: Dict[int, int]) -> None:
        cart = self._cart()
        for product_id, quantity in ordered.items():
            key = str(product_id)
            left = int(cart.get(key, 0)) - quantity
            if left >= 1:
                cart[key] = left
            else:
                cart.pop(key, None)
        self._save(cart)


class DatabaseCartStore(CartStore):
    """User cart persisted in cart_items, one row per (user, product).

    Quantity changes are single UPDATE statements evaluated by the database,
    so two requests for the same user cannot overwrite each other.
    """

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _line_filter(self, product_id: int):
        return (CartItem.user_id == self.user_id, CartItem.product_id == product_id)

    def _increment(self, product_id: int, quantity: int) -> int:
        stmt = (
            update(CartItem)
            .where(*self._line_filter(product_id))
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def lines(self) -> Dict[int, int]:
        rows = (
            self.db.query(CartItem.product_id, CartItem.quantity)
            .filter(CartItem.user_id == self.user_id)
            .order_by(CartItem.id)
            .all()
        )
        return {product_id: quantity for product_id, quantity in rows}

    def add(self, product_id: int, quantity: int) -> None:
        if self._increment(product_id, quantity):
            self.db.commit()
            return
        self.db.add(CartItem(user_id=self.user_id, product_id=product_id, quantity=quantity))
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the line first; add on top of it
            self.db.rollback()
            logger.debug("Cart line %s/%s created concurrently, retrying as update", self.user_id, product_id)
            self._increment(product_id, quantity)
            self.db.commit()

    def decrement(self, product_id: int) -> None:
        decremented = self.db.execute(
            update(CartItem)
            .where(*self._line_filter(product_id), CartItem.quantity > 1)
            .values(quantity=CartItem.quantity - 1)
            .execution_options(synchronize_session=False)
        ).rowcount
        if not decremented:
            self.db.execute(
                delete(CartItem)
                .where(*self._line_filter(product_id))
                .execution_options(synchronize_session=False)
            )
        self.db.commit()

    def remove(self, product_id: int) -> None:
        self.db.execute(
            delete(CartItem)
            .where(*self._line_filter(product_id))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def clear(self) -> None:
        self.db.execute(
            delete(CartItem)
            .where(CartItem.user_id == self.user_id)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def remove_ordered(self, ordered: Dict[int, int]) -> None:
        for product_id, quantity in ordered.items():
            reduced = self.db.execute(
                update(CartItem)
                .where(*self._line_filter(product_id), CartItem.quantity > quantity)
                .values(quantity=CartItem.quantity - quantity)
                .execution_options(synchronize_session=False)
            ).rowcount
            if not reduced:
                self.db.execute(
                    delete(CartItem)
                    .where(*self._line_filter(product_id), CartItem.quantity <= quantity)
                    .execution_options(synchronize_session=False)
                )
        self.db.commit()


def store_for(identity: Identity, db: Session, session: MutableMapping) -> CartStore:
    if isinstance(identity, Authenticated):
        return DatabaseCartStore(db, identity.user_id)
    return SessionCartStore(session)
