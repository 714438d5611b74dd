from typing import List, Tuple

from sqlalchemy.orm import Session

from models.user import User, Role


def normalize_email(email: str) -> str:
    return email.strip().lower() if isinstance(email, str) else email


class UserRepo:
    """Credential store over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id: str) -> User | None:
        if not user_id:
            return None
        return self.db.get(User, user_id)

    def create(self, **fields) -> User:
        """Stage a new user; nothing is written until ``save``."""
        fields["email"] = normalize_email(fields["email"])
        user = User(**fields)
        self.db.add(user)
        return user

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()

    def count(self, role: Role | None = None) -> int:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        return query.count()

    def page(self, page: int, limit: int) -> Tuple[List[User], int]:
        query = self.db.query(User)
        total = query.count()
        rows = query.order_by(User.created_at.asc(), User.email.asc()).offset((page - 1) * limit).limit(limit).all()
        return rows, total
