"""Account and session use cases."""

from __future__ import annotations

import hmac
from contextlib import contextmanager
from dataclasses import dataclass
from http import HTTPStatus
from typing import Iterator, List, Mapping, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import ROLE_USER, User
from security.errors import AlgorithmUnavailableError
from security.hashing import DEFAULT_ALGORITHM, hash_password
from security.tokens import TokenClass, TokenProvider, TokenValidationType
from storage.abstract_user_store import AbstractUserStore
from storage.sql_user_store import SqlUserStore


@dataclass(frozen=True)
class TokenPair:
    """An access token issued together with its refresh token."""

    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {"access_token": self.access_token, "refresh_token": self.refresh_token}


class UserService:
    """Create accounts, log users in and renew their tokens.

    Business outcomes such as a wrong password or an expired token come back
    as ``None``, ``False`` or an :class:`HTTPStatus`. Failures of the hashing
    or encryption primitives are raised, except in :meth:`create`.
    """

    def __init__(
        self,
        store: AbstractUserStore,
        token_provider: TokenProvider,
        hash_algorithm: str = DEFAULT_ALGORITHM,
        session=None,
    ):
        self.store = store
        self.token_provider = token_provider
        self.hash_algorithm = hash_algorithm
        self.session = session or db.session

    @classmethod
    def from_app(cls, app=None) -> "UserService":
        """Build a service from the application's configuration."""

        app = app or current_app
        return cls(
            store=SqlUserStore(),
            token_provider=TokenProvider.from_config(app.config),
            hash_algorithm=app.config.get("PASSWORD_HASH_ALGORITHM", DEFAULT_ALGORITHM),
        )

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            self.session.rollback()
            raise
        self.session.commit()

    def create(self, candidate: Mapping) -> bool:
        """Register an account with role USER.

        Returns False, with nothing written, when the email is taken, including a
        registration that loses a race on the unique constraint, or when the
        configured hash algorithm is unavailable.
        """

        email = candidate["email"]
        try:
            with self._unit_of_work():
                if self.store.find_by_email(email) is not None:
                    current_app.logger.warning("Account creation refused: email already registered")
                    return False

                user = User(email=email, name=candidate.get("name") or "", role=ROLE_USER)
                try:
                    user.set_password(candidate["password"], self.hash_algorithm)
                except AlgorithmUnavailableError as exc:
                    current_app.logger.error("UserService.create failed: %s", exc)
                    return False

                self.store.save(user)
        except IntegrityError:
            current_app.logger.warning("Account creation refused: email already registered")
            return False

        current_app.logger.info("Created account id=%s", user.id)
        return True

    def log_in_by_email_password(self, email: str, password: str) -> Optional[TokenPair]:
        """Issue a fresh token pair when the credentials match."""

        with self._unit_of_work():
            user = self.store.find_by_email(email)
            given_hash = hash_password(password, self.hash_algorithm)

            if user is None or not hmac.compare_digest(given_hash, user.password_hash):
                current_app.logger.warning("Rejected password login")
                return None

            pair = TokenPair(
                access_token=self.token_provider.generate(user.email, TokenClass.ACCESS),
                refresh_token=self.token_provider.generate(user.email, TokenClass.REFRESH),
            )
            user.update_tokens(pair.access_token, pair.refresh_token)
            self.store.save(user)

        return pair

    def log_in_by_access_token(self, access_token: str) -> HTTPStatus:
        """Check that ``access_token`` is the user's current, unexpired token."""

        user = self.store.find_by_access_token(access_token)
        validation = self.token_provider.validate_token(access_token, TokenClass.ACCESS)

        if user is None or validation.type is TokenValidationType.INVALID:
            return HTTPStatus.BAD_REQUEST

        if validation.type is TokenValidationType.EXPIRED:
            return HTTPStatus.UNAUTHORIZED

        return HTTPStatus.ACCEPTED

    def update_access_token(self, refresh_token: str) -> Optional[TokenPair]:
        """Renew the access token, rotating the refresh token near its expiry.

        ``None`` means the refresh token is unknown, expired or invalid and the
        client has to log in again.
        """

        with self._unit_of_work():
            user = self.store.find_by_refresh_token(refresh_token)
            validation = self.token_provider.validate_token(refresh_token, TokenClass.REFRESH)

            if user is None or validation.type in (
                TokenValidationType.EXPIRED,
                TokenValidationType.INVALID,
            ):
                return None

            if validation.type is TokenValidationType.UPDATE:
                refresh_token = self.token_provider.generate(user.email, TokenClass.REFRESH)
                self.store.update_refresh_token(user.id, refresh_token)
                current_app.logger.info("Rotated refresh token for account id=%s", user.id)

            access_token = self.token_provider.generate(user.email, TokenClass.ACCESS)
            self.store.update_access_token(user.id, access_token)

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def find_all(self) -> List[dict]:
        return [user.to_dict() for user in self.store.find_all()]

    def find_by_id(self, user_id: int) -> Optional[dict]:
        user = self.store.find_by_id(user_id)
        return user.to_dict() if user is not None else None

    def find_users_by_username(self, name: str) -> List[dict]:
        return [user.to_dict() for user in self.store.find_by_name(name)]

    def find_by_email(self, email: str) -> Optional[dict]:
        user = self.store.find_by_email(email)
        return user.to_dict() if user is not None else None

    def delete(self, user_id: int) -> bool:
        """Delete an account; False when there is nothing to delete."""

        with self._unit_of_work():
            if self.store.find_by_id(user_id) is None:
                return False
            self.store.delete_by_id(user_id)

        current_app.logger.info("Deleted account id=%s", user_id)
        return True
