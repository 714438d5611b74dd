from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.cart import Cart, CartLine


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_by_user(self, user_id: str) -> Cart | None:
        return self.db.query(Cart).filter(Cart.user_id == user_id).first()

    def create(self, user_id: str) -> Cart:
        """Stage an empty cart for the user; written on the next ``save``."""
        cart = Cart(user_id=user_id)
        self.db.add(cart)
        return cart

    def save(self, cart: Cart) -> Cart:
        self.db.add(cart)
        self.db.commit()
        return cart

    def count_open(self) -> int:
        """Carts holding at least one line."""
        return self.db.query(func.count(func.distinct(CartLine.cart_id))).scalar() or 0

    def open_value(self) -> Decimal:
        value = self.db.query(func.coalesce(func.sum(Cart.total_price), 0)).scalar()
        return Decimal(str(value)).quantize(Decimal("0.01"))
