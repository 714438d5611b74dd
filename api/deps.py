"""
Per-request service wiring: each service is built once per app context on
top of the scoped session.
"""
from flask import current_app, g

from models import storage
from repos.cart_repo import CartRepo
from repos.product_repo import ProductRepo
from repos.user_repo import UserRepo
from services.admin import AdminService
from services.cart import CartEngine
from services.session import SessionManager
from utils.security import TokenCodec


def get_session_manager() -> SessionManager:
    if "session_manager" not in g:
        g.session_manager = SessionManager(
            UserRepo(storage.get_session()),
            TokenCodec.from_config(current_app.config),
        )
    return g.session_manager


def get_cart_engine() -> CartEngine:
    if "cart_engine" not in g:
        session = storage.get_session()
        g.cart_engine = CartEngine(
            CartRepo(session),
            ProductRepo(session),
            strict_read=current_app.config.get("CART_STRICT_READ", False),
        )
    return g.cart_engine


def get_admin_service() -> AdminService:
    if "admin_service" not in g:
        session = storage.get_session()
        g.admin_service = AdminService(UserRepo(session), ProductRepo(session), CartRepo(session))
    return g.admin_service
