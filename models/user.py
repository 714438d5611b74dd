from enum import Enum

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import Base, BaseModel, VersionedMixin


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel, VersionedMixin, Base):
    """
    Credential record.

    ``refresh_token`` holds the single refresh token currently accepted for
    this user; writing a new value revokes the previous one. Writes go
    through the version counter, so two concurrent sign-ins cannot both win.
    """
    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SAEnum(Role, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )
    refresh_token = Column(Text, nullable=True)

    cart = relationship(
        "Cart",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
