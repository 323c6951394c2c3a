# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, UniqueConstraint
from database import Base

# A line of an authenticated user's cart (product + quantity).
# Guest carts never reach this table, they live in the session cookie.
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)

    __table_args__ = (
        # One line per product; quantities are summed instead
        UniqueConstraint("user_id", "product_id", name="uq_cartitem_user_product"),
    )
