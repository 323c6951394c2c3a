# backend/routes/cart.py
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from schemas.cart import CartAddItem, CartLineOut, CartSummary
from services import cart as cart_service
from services.cart_store import CartStore, store_for
from services.identity import Identity, user_id_of
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_identity

router = APIRouter(prefix="/cart", tags=["Cart"])

# Pick the session or database backed cart for the caller
def get_cart_store(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> CartStore:
    return store_for(identity, db, request.session)

def _cart_to_out(lines: List[cart_service.CartLine]) -> List[CartLineOut]:
    items_out = []
    for line in lines:
        unit_price = line.product.effective_price
        items_out.append(CartLineOut(
            product=line.product,
            quantity=line.quantity,
            unit_price=unit_price,
            line_total=unit_price * line.quantity,
        ))
    return items_out

@router.get("", response_model=List[CartLineOut])
def get_cart(
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    return _cart_to_out(cart_service.get_cart(db, store))

@router.get("/summary", response_model=CartSummary)
def get_cart_summary(
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    return cart_service.cart_summary(cart_service.get_cart(db, store))

@router.post("", response_model=List[CartLineOut])
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    store: CartStore = Depends(get_cart_store),
):
    lines = cart_service.add_to_cart(db, store, payload.product_id, payload.quantity)
    out = _cart_to_out(lines)

    write_log(
        db,
        user_id=user_id_of(identity),
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "qty": payload.quantity, "cart_items": len(out)},
    )
    return out

@router.post("/{product_id}/decrement", response_model=List[CartLineOut])
def decrement_cart(
    product_id: int,
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    return _cart_to_out(cart_service.decrement_cart(db, store, product_id))

@router.delete("/{product_id}", response_model=List[CartLineOut])
def remove_from_cart(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    store: CartStore = Depends(get_cart_store),
):
    lines = cart_service.remove_from_cart(db, store, product_id)
    out = _cart_to_out(lines)

    write_log(
        db,
        user_id=user_id_of(identity),
        action="CART_DELETE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product_id, "cart_items": len(out)},
    )
    return out

@router.delete("", response_model=List[CartLineOut])
def clear_cart(
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    return cart_service.clear_cart(db, store)
