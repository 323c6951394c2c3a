# backend/services/catalog.py
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from database import MAX_INT, fits_int
from models.product import Product
from services.errors import InsufficientStock, InvalidQuantity, ProductNotFound

SORTABLE = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
    "discount": Product.discount,
    "created_at": Product.created_at,
}


def get_product(db: Session, product_id: int) -> Product:
    # Ids the column cannot hold are simply unknown
    product = db.query(Product).filter(Product.id == product_id).first() if fits_int(product_id) else None
    if not product:
        raise ProductNotFound(product_id=product_id)
    return product


def list_products(
    db: Session,
    q: Optional[str] = None,
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    featured: Optional[bool] = None,
    in_stock: bool = False,
    page: int = 1,
    page_size: int = 12,
    sort_by: str = "id",
    order: str = "asc",
) -> Dict[str, Any]:
    query = db.query(Product)

    # General search filter
    if q:
        like = f"%{q}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.category.ilike(like),
                Product.subcategory.ilike(like),
            )
        )
    if category:
        query = query.filter(Product.category == category)
    if subcategory:
        query = query.filter(Product.subcategory == subcategory)
    if featured is not None:
        query = query.filter(Product.featured.is_(featured))
    if in_stock:
        query = query.filter(Product.stock > 0)

    sort_col = SORTABLE.get(sort_by.lower(), Product.id)
    query = query.order_by(sort_col.desc() if order == "desc" else sort_col.asc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


def featured_products(db: Session) -> List[Product]:
    return db.query(Product).filter(Product.featured.is_(True)).order_by(Product.id).all()


def categories(db: Session) -> List[str]:
    rows = db.query(Product.category).distinct().filter(Product.category != None, Product.category != "").all()  # noqa: E711
    return sorted(r[0] for r in rows)


def create_product(db: Session, data: Dict[str, Any]) -> Product:
    product = Product(**data)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product_id: int, changes: Dict[str, Any]) -> Product:
    product = get_product(db, product_id)
    for key, value in changes.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> str:
    product = get_product(db, product_id)
    name = product.name
    db.delete(product)
    db.commit()
    return name


def adjust_stock(db: Session, product_id: int, quantity_change: int) -> Product:
    """Apply a signed stock delta; the database refuses to go below zero."""
    product = get_product(db, product_id)
    if product.stock + quantity_change > MAX_INT:
        raise InvalidQuantity("Stock would exceed the storable maximum", quantity_change=quantity_change)
    updated = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock + quantity_change >= 0)
        .values(stock=Product.stock + quantity_change)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not updated:
        available = db.query(Product.stock).filter(Product.id == product_id).scalar()
        db.rollback()
        raise InsufficientStock(
            product_id=product_id, requested=-quantity_change, available=available
        )
    db.commit()
    return get_product(db, product_id)
