from decimal import Decimal
from typing import Iterable

from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, VersionedMixin

CENT = Decimal("0.01")


def compute_total(lines: Iterable["CartLine"]) -> Decimal:
    """Sum of price x quantity over the given lines, rounded to cents."""
    total = sum((line.price * line.quantity for line in lines), Decimal("0.00"))
    return total.quantize(CENT)


class Cart(BaseModel, VersionedMixin, Base):
    __tablename__ = "carts"

    # one cart per user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    total_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    user = relationship("User", back_populates="cart")
    lines = relationship(
        "CartLine",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartLine.product_id",
        lazy="selectin",
    )

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("total_price", Decimal("0.00"))
        super().__init__(*args, **kwargs)

    def line_for(self, product_id: str) -> "CartLine | None":
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def recalculate_total(self) -> Decimal:
        self.total_price = compute_total(self.lines)
        return self.total_price


class CartLine(Base):
    """One product in a cart; ``price`` is the unit price when the line was first added."""
    __tablename__ = "cart_lines"

    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(String(36), ForeignKey("products.id"), primary_key=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    cart = relationship("Cart", back_populates="lines")
    product = relationship("Product", lazy="joined")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity_positive"),
    )

    @property
    def subtotal(self) -> Decimal:
        return (self.price * self.quantity).quantize(CENT)
