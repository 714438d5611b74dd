"""
Admin operations: role changes, user removal and read-only stats.
Callers must already hold a verified admin identity.
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from models.user import Role, User
from repos.cart_repo import CartRepo
from repos.product_repo import ProductRepo
from repos.user_repo import UserRepo
from services.errors import Conflict, InvalidRole, NotFound, SelfModification, store_errors
from services.identity import parse_role
from utils.logging import get_logger

logger = get_logger(__name__)


class AdminService:
    def __init__(self, users: UserRepo, products: ProductRepo, carts: CartRepo):
        self.users = users
        self.products = products
        self.carts = carts

    def update_user_role(self, actor_id: str, target_user_id: str, new_role) -> User:
        role = parse_role(new_role)
        if role is None:
            raise InvalidRole()
        with store_errors(self.users.db):
            user = self.users.find_by_id(target_user_id)
            if user is None:
                raise NotFound("User not found")
            if user.id == actor_id:
                raise SelfModification("Cannot change your own role")
            user.role = role
            self.users.save(user)
        logger.info("User %s set role of %s to %s", actor_id, user.id, role.value)
        return user

    def delete_user(self, actor_id: str, target_user_id: str) -> None:
        with store_errors(self.users.db):
            user = self.users.find_by_id(target_user_id)
            if user is None:
                raise NotFound("User not found")
            if user.id == actor_id:
                raise SelfModification("You cannot delete your own account")
            cart = self.carts.find_by_user(user.id)
            if cart is not None and cart.lines:
                raise Conflict("User still owns a non-empty cart")
            self.users.delete(user)
        logger.info("User %s deleted user %s", actor_id, target_user_id)

    def list_users(self, page: int, limit: int) -> Tuple[List[User], int]:
        with store_errors(self.users.db):
            return self.users.page(page, limit)

    def stats(self) -> Dict[str, Any]:
        with store_errors(self.users.db):
            return {
                "total_users": self.users.count(),
                "total_admins": self.users.count(role=Role.ADMIN),
                "total_products": self.products.count(),
                "active_products": self.products.count(active_only=True),
                "out_of_stock_products": self.products.count(active_only=True, out_of_stock=True),
                "open_carts": self.carts.count_open(),
                "open_cart_value": self.carts.open_value(),
            }
