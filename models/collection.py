from sqlalchemy import Column, String, Text, func, select
from sqlalchemy.orm import relationship, column_property

from models.base_model import BaseModel, Base
from models.product import Product


class Collection(BaseModel, Base):
    """
    Named group of products shown together in the catalog.
    ``image_url`` points at storage managed elsewhere; it is never uploaded here.
    """
    __tablename__ = "collections"

    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String(1024), nullable=True)

    products = relationship("Product", back_populates="collection")


# active products only, the same set the public listing shows
Collection.product_count = column_property(
    select(func.count(Product.id))
    .where(Product.collection_id == Collection.id, Product.is_active.is_(True))
    .correlate_except(Product)
    .scalar_subquery()
)
