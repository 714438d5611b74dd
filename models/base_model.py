#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the storefront models.

- UUID primary key (String(36)) generated client-side, so an id exists
  before the first flush (tokens are signed for a user that is not yet
  inserted)
- created_at / updated_at timestamps maintained by the database
- VersionedMixin adds an integer counter used by SQLAlchemy as
  ``version_id_col``: every UPDATE is conditional on the counter the row
  was read with, and a lost race raises StaleDataError at flush time.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import declarative_base, declared_attr
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        created_at/updated_at are left to the DB defaults unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"


class VersionedMixin:
    """
    Optimistic concurrency: compare-and-swap on ``version`` for every UPDATE.
    """

    version = Column(Integer, nullable=False)

    @declared_attr
    def __mapper_args__(cls):
        return {"version_id_col": cls.version}
