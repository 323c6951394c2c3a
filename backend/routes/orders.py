# backend/routes/orders.py
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order
from routes.cart import get_cart_store
from schemas.order import CheckoutPayload, OrderDetail, OrderOut
from services import orders as order_service
from services.cart_store import CartStore
from services.errors import ShopError
from services.identity import Guest, Identity, user_id_of
from utils.audit import client_ip, write_log
from utils.session import guest_order_ids, remember_guest_order
from utils.tokenJWT import get_current_identity

router = APIRouter(prefix="/orders", tags=["Orders"])

# Map Order model to the {order, items} response
def _order_to_detail(order: Order) -> OrderDetail:
    return OrderDetail(
        order=OrderOut.model_validate(order),
        items=order.items,
    )

# Create an order from the caller's cart
@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    store: CartStore = Depends(get_cart_store),
):
    try:
        order = order_service.checkout(db, store, identity, payload.model_dump())
    except ShopError as e:
        if e.status_code < 500:
            write_log(
                db, user_id=user_id_of(identity), action="ORDER_CREATE", resource="orders", status="FAIL",
                ip=client_ip(request), meta={"code": e.code, **e.context}
            )
        raise

    out = OrderOut.model_validate(order)
    if isinstance(identity, Guest):
        remember_guest_order(request, order.id)

    write_log(
        db, user_id=user_id_of(identity), action="ORDER_CREATE", resource="orders", status="SUCCESS",
        ip=client_ip(request), meta={"order_id": out.id, "total": out.total_amount}
    )
    return out

# List the caller's orders (account orders, or the ones placed in this guest session)
@router.get("", response_model=List[OrderOut])
def list_my_orders(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return order_service.list_orders(db, identity, guest_order_ids(request))

# Get details of a specific order
@router.get("/{order_id}", response_model=OrderDetail)
def get_order_detail(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    order = order_service.get_order(db, identity, order_id, guest_order_ids(request))
    return _order_to_detail(order)
