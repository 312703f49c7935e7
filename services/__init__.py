"""Application services."""

from .user_service import TokenPair, UserService

__all__ = ["TokenPair", "UserService"]
