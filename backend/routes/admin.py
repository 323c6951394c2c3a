# backend/routes/admin.py
from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from database import fits_int, get_db
from models.cart import CartItem
from models.order import Order, OrderStatus
from models.users import User
from schemas.order import OrderOut, OrderStatusPatch
from schemas.user import UserResponse
from services import orders as order_service
from services.errors import ShopError, UserNotFound
from services.identity import Authenticated
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_admin_identity

router = APIRouter(prefix="/admin", tags=["Admin"])


# List every order, optionally filtered by status
@router.get("/orders", response_model=List[OrderOut])
def list_all_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    return order_service.list_all_orders(db, status.value if status else None)


# Move an order along its lifecycle
@router.patch("/orders/{order_id}", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    old_status = order_service.get_order(db, admin, order_id).status
    order = order_service.update_order_status(db, order_id, payload.status)
    out = OrderOut.model_validate(order)

    write_log(db, user_id=admin.user_id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
        ip=client_ip(request), meta={"order_id": order_id, "old": old_status, "new": out.status.value})
    return out


# Retrieve customer accounts (administrators excluded)
@router.get("/customers", response_model=List[UserResponse])
def get_customers(
    q: Optional[str] = Query(None, description="Search by username, email or name"),
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    query = db.query(User).filter(User.is_admin.is_(False))

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(
            User.username.ilike(like) | User.email.ilike(like) | User.full_name.ilike(like)
        )

    return query.order_by(User.id.asc()).all()


# Delete a customer account; their orders stay, detached from the account
@router.delete("/customers/{user_id}")
def delete_customer(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    user = db.query(User).filter(User.id == user_id).first() if fits_int(user_id) else None
    if not user:
        raise UserNotFound(user_id=user_id)

    # Prevent self-deletion
    if user.id == admin.user_id:
        raise ShopError("You cannot delete your own account")

    username = user.username
    db.query(CartItem).filter(CartItem.user_id == user.id).delete(synchronize_session=False)
    db.execute(
        update(Order).where(Order.user_id == user.id).values(user_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(user)
    db.commit()

    write_log(db, user_id=admin.user_id, action="USER_DELETE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"deleted_user_id": user_id})
    return {"message": f"User {username} has been deleted"}
