"""Issuing and validating signed access and refresh tokens."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

import jwt
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTDecodeError

from .encryptor import Encryptor


class TokenClass(enum.Enum):
    """The two kinds of token the service issues."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenValidationType(enum.Enum):
    """Verdict of a single token validation."""

    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    UPDATE = "update"


@dataclass(frozen=True)
class TokenValidationResult:
    """Outcome of :meth:`TokenProvider.validate_token`."""

    type: TokenValidationType
    email: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def invalid(cls) -> "TokenValidationResult":
        return cls(TokenValidationType.INVALID)


class TokenProvider:
    """Generate and classify tokens whose subject is an encrypted email.

    Tokens are JWTs signed with ``JWT_SECRET_KEY`` through Flask-JWT-Extended,
    so both methods need an application context.
    """

    def __init__(
        self,
        encryptor: Encryptor,
        access_lifetime: timedelta,
        refresh_lifetime: timedelta,
        renewal_window: timedelta,
    ):
        self.encryptor = encryptor
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime
        self.renewal_window = renewal_window

    @classmethod
    def from_config(cls, config: Mapping) -> "TokenProvider":
        """Build a provider from a Flask config mapping."""

        return cls(
            encryptor=Encryptor.from_hex(
                config["TOKEN_ENCRYPTION_KEY"], config["TOKEN_ENCRYPTION_IV"]
            ),
            access_lifetime=config["JWT_ACCESS_TOKEN_EXPIRES"],
            refresh_lifetime=config["JWT_REFRESH_TOKEN_EXPIRES"],
            renewal_window=config["REFRESH_TOKEN_RENEWAL_WINDOW"],
        )

    def lifetime(self, token_class: TokenClass) -> timedelta:
        if token_class is TokenClass.ACCESS:
            return self.access_lifetime
        return self.refresh_lifetime

    def generate(self, email: str, token_class: TokenClass) -> str:
        """Issue a token for ``email`` that expires after the class lifetime."""

        subject = self.encryptor.encrypt(email)
        expires_delta = self.lifetime(token_class)

        if token_class is TokenClass.ACCESS:
            return create_access_token(identity=subject, expires_delta=expires_delta)
        return create_refresh_token(identity=subject, expires_delta=expires_delta)

    def validate_token(self, token: str, token_class: TokenClass) -> TokenValidationResult:
        """Classify ``token`` as VALID, EXPIRED, INVALID or UPDATE.

        UPDATE is only produced for refresh tokens whose remaining lifetime
        falls inside the renewal window. Encryption failures while reading the
        subject of a correctly signed token are raised, not classified.
        """

        if not token:
            return TokenValidationResult.invalid()

        try:
            claims = decode_token(token)
        except jwt.ExpiredSignatureError:
            return TokenValidationResult(TokenValidationType.EXPIRED)
        except (jwt.InvalidTokenError, JWTDecodeError):
            return TokenValidationResult.invalid()

        if claims.get("type") != token_class.value or "exp" not in claims:
            return TokenValidationResult.invalid()

        email = self.encryptor.decrypt(claims["sub"])
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        remaining = expires_at - datetime.now(timezone.utc)

        if remaining <= timedelta(0):
            return TokenValidationResult(TokenValidationType.EXPIRED, email, expires_at)

        if token_class is TokenClass.REFRESH and remaining <= self.renewal_window:
            return TokenValidationResult(TokenValidationType.UPDATE, email, expires_at)

        return TokenValidationResult(TokenValidationType.VALID, email, expires_at)
