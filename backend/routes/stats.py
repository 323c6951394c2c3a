# backend/routes/stats.py

from collections import OrderedDict
from typing import Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order, OrderItem, OrderStatus
from models.product import Product
from models.users import User
from services.identity import Authenticated
from utils.tokenJWT import get_admin_identity

router = APIRouter(
    prefix="/admin/stats",
    tags=["Stats"]
)

# Number of products listed as best sellers
POPULAR_PRODUCTS_LIMIT = 5

# === Pydantic Response Schemas ===

class PopularProduct(BaseModel):
    id: int
    name: str
    sales: int

class StatsResponse(BaseModel):
    sales_by_month: Dict[str, int]
    total_sales: int
    total_orders: int
    total_customers: int
    popular_products: List[PopularProduct]


# === Dashboard ===

@router.get("", response_model=StatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    # Revenue counts every order that was not cancelled
    orders = (
        db.query(Order.created_at, Order.total_amount)
        .filter(Order.status != OrderStatus.CANCELLED.value)
        .order_by(Order.created_at.asc())
        .all()
    )

    sales_by_month: Dict[str, int] = OrderedDict()
    for created_at, total_amount in orders:
        month = created_at.strftime("%Y-%m") if created_at else "unknown"
        sales_by_month[month] = sales_by_month.get(month, 0) + total_amount

    total_orders = db.query(func.count(Order.id)).scalar() or 0
    total_customers = db.query(func.count(User.id)).filter(User.is_admin.is_(False)).scalar() or 0

    # Best sellers by quantity, deleted products keep their id with a placeholder name
    sold = func.sum(OrderItem.quantity)
    rows = (
        db.query(OrderItem.product_id, sold.label("sales"))
        .group_by(OrderItem.product_id)
        .order_by(sold.desc(), OrderItem.product_id.asc())
        .limit(POPULAR_PRODUCTS_LIMIT)
        .all()
    )
    names = dict(
        db.query(Product.id, Product.name).filter(Product.id.in_([r.product_id for r in rows])).all()
    ) if rows else {}
    popular = [
        PopularProduct(id=r.product_id, name=names.get(r.product_id, "Unknown product"), sales=int(r.sales))
        for r in rows
    ]

    return StatsResponse(
        sales_by_month=sales_by_month,
        total_sales=sum(total for _, total in orders),
        total_orders=total_orders,
        total_customers=total_customers,
        popular_products=popular,
    )
