from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from models.order import OrderStatus


# Input schema for checkout; every contact field is required
class CheckoutPayload(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=6)
    shipping_address: str = Field(min_length=10)


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    price_at_purchase: int


# Output schema for an order
class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    status: OrderStatus
    total_amount: int
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Order together with its lines
class OrderDetail(BaseModel):
    order: OrderOut
    items: List[OrderItemOut]


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus
