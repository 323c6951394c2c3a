# backend/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func
from database import Base
from services.pricing import effective_unit_price

# Model Product
# A single catalogue entry. Money is stored as integer minor units (centimes)
# and stock as a non-negative integer; both are guarded by CHECK constraints.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False, default="")

    price = Column(Integer, CheckConstraint("price >= 0"), nullable=False)
    discount = Column(Integer, CheckConstraint("discount >= 0 AND discount <= 100"), nullable=False, default=0)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)

    category = Column(String, nullable=False, index=True) # e.g. 'supplement', 'equipment'
    subcategory = Column(String, nullable=False, index=True)
    featured = Column(Boolean, nullable=False, default=False)

    # URL on the external image host
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Unit price after discount, used by API responses
    @property
    def effective_price(self) -> int:
        return effective_unit_price(self)
