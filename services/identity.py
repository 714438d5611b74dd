from __future__ import annotations

from dataclasses import dataclass

from models.user import Role, User


@dataclass(frozen=True)
class Identity:
    """Who is calling. Resolved from the store on every verify, never from token claims."""
    id: str
    role: Role

    @classmethod
    def of(cls, user: User) -> "Identity":
        return cls(id=user.id, role=Role(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class SessionTokens:
    user: User
    access_token: str
    refresh_token: str


def parse_role(value) -> Role | None:
    """Map user input to a Role; None when it is not one."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None
