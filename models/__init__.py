"""
Models package: exposes the process-wide ``storage`` (DBStorage over a
scoped_session). Importing this package creates the tables.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
