"""SQLAlchemy-backed account store."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update

from models import db
from models.user import User

from .abstract_user_store import AbstractUserStore


class SqlUserStore(AbstractUserStore):
    """Persist users through the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session or db.session

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(
            db.select(User).filter(db.func.lower(User.email) == (email or "").lower())
        ).scalar_one_or_none()

    def find_all(self) -> List[User]:
        return list(self.session.execute(db.select(User).order_by(User.id)).scalars())

    def find_by_name(self, name: str) -> List[User]:
        needle = (name or "").lower()
        query = (
            db.select(User)
            .filter(db.func.lower(User.name, type_=db.String).contains(needle, autoescape=True))
            .order_by(User.id)
        )
        return list(self.session.execute(query).scalars())

    def find_by_access_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self.session.execute(
            db.select(User).filter_by(access_token=token)
        ).scalar_one_or_none()

    def find_by_refresh_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        return self.session.execute(
            db.select(User).filter_by(refresh_token=token)
        ).scalar_one_or_none()

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def delete_by_id(self, user_id: int) -> None:
        user = self.find_by_id(user_id)
        if user is not None:
            self.session.delete(user)
            self.session.flush()

    def update_access_token(self, user_id: int, token: str) -> None:
        self.session.execute(
            update(User).where(User.id == user_id).values(access_token=token)
        )

    def update_refresh_token(self, user_id: int, token: str) -> None:
        self.session.execute(
            update(User).where(User.id == user_id).values(refresh_token=token)
        )
