from pydantic import BaseModel
from typing import List

from schemas.product import ProductOut

# Request schema for adding an item to the cart; range is checked by the cart service
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = 1

# Response schema for a single cart line with live product data
class CartLineOut(BaseModel):
    product: ProductOut
    quantity: int
    unit_price: int
    line_total: int

# Totals shown next to the cart
class CartSummary(BaseModel):
    items: int
    subtotal: int
    shipping: int
    total: int
