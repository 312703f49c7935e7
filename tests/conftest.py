"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from services.user_service import UserService  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
    TOKEN_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
    TOKEN_ENCRYPTION_IV = "0f0e0d0c0b0a09080706050403020100"
    PASSWORD_HASH_ALGORITHM = "sha256"
    CORS_ORIGINS = "*"
    LOG_LEVEL = "INFO"


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    class TestConfig(_BaseTestConfig):
        pass

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def app_ctx(app: Flask):
    """Push an application context for service and store level tests."""

    with app.app_context():
        yield app


@pytest.fixture()
def service(app_ctx) -> UserService:
    """Return a user service wired to the test configuration."""

    return UserService.from_app()

