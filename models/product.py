from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    Text,
    Boolean,
    CheckConstraint,
    Index,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Product(BaseModel, Base):
    """Catalog entry. The cart reads ``price`` and ``stock``; everything else is display data."""
    __tablename__ = "products"

    title = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=True, unique=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    delivery_time = Column(String(64), nullable=False, default="1 Week")
    featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    collection_id = Column(String(36), ForeignKey("collections.id", ondelete="SET NULL"), nullable=True, index=True)

    collection = relationship("Collection", back_populates="products")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        CheckConstraint("price >= 0", name="ck_products_price_nonnegative"),
        Index("ix_products_title", "title"),
    )
