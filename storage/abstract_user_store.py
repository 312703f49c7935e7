"""Account store abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from models.user import User


class AbstractUserStore(ABC):
    """Interface for user account persistence backends.

    Implementations flush changes but never commit; the caller owns the
    unit of work.
    """

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with the given primary key, if any."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Return the user registered under ``email``, if any."""

    @abstractmethod
    def find_all(self) -> List[User]:
        """Return every user."""

    @abstractmethod
    def find_by_name(self, name: str) -> List[User]:
        """Return users whose display name contains ``name``."""

    @abstractmethod
    def find_by_access_token(self, token: str) -> Optional[User]:
        """Return the user whose current access token is ``token``."""

    @abstractmethod
    def find_by_refresh_token(self, token: str) -> Optional[User]:
        """Return the user whose current refresh token is ``token``."""

    @abstractmethod
    def save(self, user: User) -> User:
        """Persist a new or modified user."""

    @abstractmethod
    def delete_by_id(self, user_id: int) -> None:
        """Remove the user with the given primary key."""

    @abstractmethod
    def update_access_token(self, user_id: int, token: str) -> None:
        """Overwrite the stored access token of a user."""

    @abstractmethod
    def update_refresh_token(self, user_id: int, token: str) -> None:
        """Overwrite the stored refresh token of a user."""
