"""Application configuration module."""

import hashlib
import os
from datetime import timedelta


def _derived_hex(secret: str, label: str, length: int) -> str:
    """Derive ``length`` bytes of hex key material from the app secret."""

    return hashlib.sha256(f"{label}:{secret}".encode("utf-8")).hexdigest()[: length * 2]


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Tokens
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "30"))
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(
        days=int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "14"))
    )
    REFRESH_TOKEN_RENEWAL_WINDOW = timedelta(
        days=int(os.getenv("REFRESH_TOKEN_RENEWAL_DAYS", "3"))
    )
    TOKEN_ENCRYPTION_KEY = os.getenv(
        "TOKEN_ENCRYPTION_KEY", _derived_hex(SECRET_KEY, "token-key", 32)
    )
    TOKEN_ENCRYPTION_IV = os.getenv(
        "TOKEN_ENCRYPTION_IV", _derived_hex(SECRET_KEY, "token-iv", 16)
    )

    # Credentials
    PASSWORD_HASH_ALGORITHM = os.getenv("PASSWORD_HASH_ALGORITHM", "sha256")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]
