"""
Storage wiring: the models package registers and creates every table.
"""
from sqlalchemy import inspect

from models import storage
from models.base_model import Base


class TestStorage:
    def test_every_model_is_registered(self):
        assert set(Base.metadata.tables) == {"users", "products", "collections", "carts", "cart_lines"}

    def test_reset_creates_every_table(self):
        assert set(inspect(storage.engine).get_table_names()) == set(Base.metadata.tables)

    def test_session_is_scoped_per_thread(self, db):
        assert storage.get_session() is db
        assert db() is db()
