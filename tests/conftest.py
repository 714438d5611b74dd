"""
Shared fixtures.

APP_ENV is forced to ``test`` before anything imports ``models``: the
storage singleton then binds to one in-memory SQLite database, which is
dropped and recreated around every test.
"""
import os

os.environ["APP_ENV"] = "test"
os.environ.pop("DATABASE_URL", None)

import itertools
from decimal import Decimal

import pytest

from api import create_app
from models import storage
from models.user import Role
from repos.cart_repo import CartRepo
from repos.product_repo import ProductRepo
from repos.user_repo import UserRepo
from services.admin import AdminService
from services.cart import CartEngine
from services.session import SessionManager
from utils.security import TokenCodec

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
def db():
    storage.reset()
    session = storage.get_session()
    yield session
    storage.close()


@pytest.fixture
def app():
    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def codec(app):
    return TokenCodec.from_config(app.config)


@pytest.fixture
def session_manager(db, codec):
    return SessionManager(UserRepo(db), codec)


@pytest.fixture
def cart_engine(db):
    return CartEngine(CartRepo(db), ProductRepo(db))


@pytest.fixture
def admin_service(db):
    return AdminService(UserRepo(db), ProductRepo(db), CartRepo(db))


@pytest.fixture
def make_product(db):
    def _make(price="10.00", stock=3, **fields):
        n = next(_seq)
        fields.setdefault("title", f"Product {n}")
        fields.setdefault("description", f"Description of product {n}")
        return ProductRepo(db).create(price=Decimal(price), stock=stock, **fields)

    return _make


@pytest.fixture
def make_user(db, session_manager):
    """Register a user and return its SessionTokens; ``role=Role.ADMIN`` promotes it directly."""
    def _make(role=Role.USER, password="secret1", name=None, email=None):
        n = next(_seq)
        tokens = session_manager.register(name or f"User {n}", email or f"user{n}@example.com", password)
        if role != Role.USER:
            tokens.user.role = role
            UserRepo(db).save(tokens.user)
        return tokens

    return _make


@pytest.fixture
def bearer():
    def _header(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _header
