# backend/routes/products.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import MAX_INT, get_db
import schemas.product as product_schemas
from services import catalog
from services.identity import Authenticated
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_admin_identity

router = APIRouter(prefix="/products", tags=["Products"])


# =========================
# CATALOGUE (public)
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search in name, description and categories"),
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    in_stock: bool = Query(False),
    page: int = Query(1, ge=1, le=MAX_INT),
    page_size: int = Query(12, ge=1, le=100),
    sort_by: Literal["id", "name", "price", "stock", "discount", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    return catalog.list_products(
        db, q=q, category=category, subcategory=subcategory, featured=featured, in_stock=in_stock,
        page=page, page_size=page_size, sort_by=sort_by, order=order,
    )


@router.get("/featured", response_model=List[product_schemas.ProductOut])
def featured_products(db: Session = Depends(get_db)):
    return catalog.featured_products(db)


@router.get("/categories", response_model=List[str])
def product_categories(db: Session = Depends(get_db)):
    return catalog.categories(db)


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id)


# =========================
# ADMINISTRATION
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    product = catalog.create_product(db, payload.model_dump())
    write_log(
        db, user_id=admin.user_id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "name": product.name}
    )
    return product


@router.patch("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    changes = payload.model_dump(exclude_unset=True)
    catalog.update_product(db, product_id, changes)
    write_log(
        db, user_id=admin.user_id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id, "fields": sorted(changes)}
    )
    return catalog.get_product(db, product_id)


@router.post("/{product_id}/stock", response_model=product_schemas.ProductOut)
def adjust_stock(
    product_id: int,
    payload: product_schemas.StockAdjustment,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    catalog.adjust_stock(db, product_id, payload.quantity_change)
    write_log(
        db, user_id=admin.user_id, action="STOCK_ADJUSTMENT", resource="products",
        status="SUCCESS", ip=client_ip(request),
        meta={"id": product_id, "change": payload.quantity_change}
    )
    return catalog.get_product(db, product_id)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: Authenticated = Depends(get_admin_identity),
):
    pname = catalog.delete_product(db, product_id)
    write_log(
        db, user_id=admin.user_id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id}
    )
    return {"detail": f"Product '{pname}' deleted"}
