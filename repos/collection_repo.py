from typing import List, Tuple, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.collection import Collection


class CollectionRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, collection_id: str) -> Collection | None:
        if not collection_id:
            return None
        return self.db.get(Collection, collection_id)

    def find_by_name(self, name: str) -> Collection | None:
        """Case-insensitive lookup; names are unique regardless of case."""
        return self.db.query(Collection).filter(func.lower(Collection.name) == name.strip().lower()).first()

    def create(self, **fields) -> Collection:
        collection = Collection(**fields)
        self.db.add(collection)
        self.db.commit()
        return collection

    def save(self, collection: Collection) -> Collection:
        self.db.add(collection)
        self.db.commit()
        return collection

    def delete(self, collection: Collection) -> None:
        self.db.delete(collection)
        self.db.commit()

    def page(self, page: int, limit: int, order_by: Sequence) -> Tuple[List[Collection], int]:
        query = self.db.query(Collection)
        total = query.count()
        rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
        return rows, total
