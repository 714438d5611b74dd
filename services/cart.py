"""
Cart Engine: the single cart each user owns.

Stock is checked when a quantity is admitted and never reserved. After every
mutation the total is refolded from the lines and the cart is written with a
conditional update on its version counter, so two interleaved writers for
the same user cannot both commit.
"""
from __future__ import annotations

from sqlalchemy.orm.attributes import flag_modified

from models.cart import Cart, CartLine
from models.product import Product
from repos.cart_repo import CartRepo
from repos.product_repo import ProductRepo
from services.errors import InsufficientStock, NotFound, Validation, store_errors
from utils.logging import get_logger

logger = get_logger(__name__)


def _check_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise Validation("Quantity must be an integer")
    if quantity < 1:
        raise Validation("Quantity must be at least 1")
    return quantity


class CartEngine:
    def __init__(self, carts: CartRepo, products: ProductRepo, strict_read: bool = False):
        self.carts = carts
        self.products = products
        # legacy behaviour: a user without a cart row is an error on read
        self.strict_read = strict_read

    @property
    def db(self):
        return self.carts.db

    def _product(self, product_id: str) -> Product:
        product = self.products.find_active(product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    def _commit(self, cart: Cart) -> Cart:
        cart.recalculate_total()
        # always emit the versioned UPDATE, even when only lines changed
        flag_modified(cart, "total_price")
        return self.carts.save(cart)

    def get_cart(self, user_id: str) -> Cart:
        with store_errors(self.db):
            cart = self.carts.find_by_user(user_id)
        if cart is None:
            if self.strict_read:
                raise NotFound("Cart not found")
            return Cart(user_id=user_id)
        return cart

    def add_item(self, user_id: str, product_id: str, quantity: int = 1) -> Cart:
        quantity = _check_quantity(quantity)
        with store_errors(self.db):
            product = self._product(product_id)
            cart = self.carts.find_by_user(user_id)
            line = cart.line_for(product.id) if cart is not None else None

            if line is None:
                if quantity > product.stock:
                    logger.warning("Add of %s x %s refused, stock %s", quantity, product.id, product.stock)
                    raise InsufficientStock(product.stock)
            elif line.quantity + quantity > product.stock:
                headroom = max(product.stock - line.quantity, 0)
                logger.warning("Merge of %s x %s refused, headroom %s", quantity, product.id, headroom)
                raise InsufficientStock(
                    headroom,
                    f"Cannot add {quantity} more items. Only {headroom} items available",
                )

            if cart is None:
                cart = self.carts.create(user_id)
            if line is None:
                cart.lines.append(CartLine(product_id=product.id, quantity=quantity, price=product.price))
            else:
                # price snapshot from the first add is kept
                line.quantity += quantity
            self._commit(cart)

        logger.info("Cart %s: added %s x %s, total %s", cart.id, quantity, product.id, cart.total_price)
        return cart

    def update_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        quantity = _check_quantity(quantity)
        with store_errors(self.db):
            product = self._product(product_id)
            if quantity > product.stock:
                raise InsufficientStock(product.stock)
            cart = self.carts.find_by_user(user_id)
            if cart is None:
                raise NotFound("Cart not found")
            line = cart.line_for(product.id)
            if line is None:
                raise NotFound("Item not found in cart")
            line.quantity = quantity
            self._commit(cart)

        logger.info("Cart %s: set %s to %s, total %s", cart.id, product.id, quantity, cart.total_price)
        return cart

    def remove_item(self, user_id: str, product_id: str) -> Cart:
        with store_errors(self.db):
            cart = self.carts.find_by_user(user_id)
            if cart is None:
                return Cart(user_id=user_id)
            line = cart.line_for(product_id)
            if line is not None:
                cart.lines.remove(line)
            self._commit(cart)

        logger.info("Cart %s: removed %s, total %s", cart.id, product_id, cart.total_price)
        return cart

    def clear_cart(self, user_id: str) -> Cart:
        with store_errors(self.db):
            cart = self.carts.find_by_user(user_id)
            if cart is None:
                raise NotFound("Cart not found")
            cart.lines = []
            self._commit(cart)

        logger.info("Cart %s cleared", cart.id)
        return cart
