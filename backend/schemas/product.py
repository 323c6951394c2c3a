# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from database import MAX_INT


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities; money in minor units
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    description: str = ""
    price: int = Field(ge=0, le=MAX_INT, description="Price in centimes")
    discount: int = Field(default=0, ge=0, le=100, description="Discount in percent")
    stock: int = Field(default=0, ge=0, le=MAX_INT)
    category: str = Field(min_length=1)
    subcategory: str = Field(min_length=1)
    featured: bool = False
    image_url: Optional[str] = None


# Schema for creating a new product
class ProductCreate(ProductBase):
    pass


# Schema for partial product updates
class ProductUpdate(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0, le=MAX_INT)
    discount: Optional[int] = Field(None, ge=0, le=100)
    stock: Optional[int] = Field(None, ge=0, le=MAX_INT)
    category: Optional[str] = Field(None, min_length=1)
    subcategory: Optional[str] = Field(None, min_length=1)
    featured: Optional[bool] = None
    image_url: Optional[str] = None


# Signed stock correction (deliveries, losses)
class StockAdjustment(BaseModel):
    quantity_change: int = Field(ge=-MAX_INT, le=MAX_INT)


# Full product representation including ID and the price after discount
class ProductOut(ProductBase):
    id: int
    effective_price: int
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
