from typing import List, Tuple, Sequence

from sqlalchemy.orm import Session

from models.product import Product


class ProductRepo:
    """Inventory view: price and stock lookups plus the admin catalog writes."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, product_id: str) -> Product | None:
        if not product_id:
            return None
        return self.db.get(Product, product_id)

    def find_active(self, product_id: str) -> Product | None:
        product = self.find_by_id(product_id)
        if product is None or not product.is_active:
            return None
        return product

    def create(self, **fields) -> Product:
        product = Product(**fields)
        self.db.add(product)
        self.db.commit()
        return product

    def save(self, product: Product) -> Product:
        self.db.add(product)
        self.db.commit()
        return product

    def count(self, active_only: bool = False, out_of_stock: bool = False) -> int:
        query = self.db.query(Product)
        if active_only:
            query = query.filter(Product.is_active.is_(True))
        if out_of_stock:
            query = query.filter(Product.stock == 0)
        return query.count()

    def page(
        self,
        page: int,
        limit: int,
        order_by: Sequence,
        featured: bool | None = None,
        collection_id: str | None = None,
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product).filter(Product.is_active.is_(True))
        if collection_id is not None:
            query = query.filter(Product.collection_id == collection_id)
        if featured is not None:
            query = query.filter(Product.featured.is_(featured))
        total = query.count()
        rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
        return rows, total
