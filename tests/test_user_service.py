"""Tests for the account and session use cases."""

from __future__ import annotations

from datetime import timedelta
from http import HTTPStatus

import pytest

from models import db
from models.user import User
from security.errors import AlgorithmUnavailableError, InvalidKeyError
from security.tokens import TokenClass, TokenProvider
from services.user_service import TokenPair, UserService
from storage.sql_user_store import SqlUserStore

EMAIL = "planner@example.com"
PASSWORD = "CalendarPass1"


def _register(service: UserService, email: str = EMAIL, name: str = "Pat Planner") -> None:
    assert service.create({"email": email, "name": name, "password": PASSWORD}) is True


def _stored(email: str = EMAIL) -> User:
    return User.query.filter_by(email=email).one()


def _service_with_provider(app, **changes) -> UserService:
    provider = TokenProvider.from_config(app.config)
    for key, value in changes.items():
        setattr(provider, key, value)
    return UserService(SqlUserStore(), provider, app.config["PASSWORD_HASH_ALGORITHM"])


class _BrokenEncryptor:
    def encrypt(self, plaintext: str) -> str:
        raise InvalidKeyError("key rejected")

    def decrypt(self, token: str) -> str:
        raise InvalidKeyError("key rejected")


def test_create_then_login_issues_token_pair(service):
    _register(service)

    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)

    assert isinstance(tokens, TokenPair)
    assert tokens.access_token and tokens.refresh_token
    user = _stored()
    assert user.access_token == tokens.access_token
    assert user.refresh_token == tokens.refresh_token


def test_create_assigns_user_role_and_hashes_password(service):
    assert service.create(
        {"email": EMAIL, "name": "Pat", "password": PASSWORD, "role": "ADMIN"}
    )

    user = _stored()
    assert user.role == "USER"
    assert user.password_hash != PASSWORD
    assert len(user.password_hash) == 64


def test_create_refuses_duplicate_email(service):
    _register(service)

    assert service.create({"email": EMAIL, "name": "Other", "password": "x"}) is False
    assert User.query.count() == 1


def test_create_returns_false_when_hash_algorithm_is_unavailable(app_ctx):
    service = UserService(
        SqlUserStore(), TokenProvider.from_config(app_ctx.config), hash_algorithm="no-such-hash"
    )

    assert service.create({"email": EMAIL, "name": "Pat", "password": PASSWORD}) is False
    assert User.query.count() == 0


def test_wrong_password_and_unknown_email_are_indistinguishable(service):
    _register(service)

    wrong_password = service.log_in_by_email_password(EMAIL, "not-the-password")
    unknown_email = service.log_in_by_email_password("nobody@example.com", PASSWORD)

    assert wrong_password is None
    assert unknown_email is None
    assert _stored().access_token is None


def test_login_propagates_unavailable_hash_algorithm(app_ctx, service):
    _register(service)
    broken = UserService(
        SqlUserStore(), TokenProvider.from_config(app_ctx.config), hash_algorithm="no-such-hash"
    )

    with pytest.raises(AlgorithmUnavailableError):
        broken.log_in_by_email_password(EMAIL, PASSWORD)


def test_login_propagates_encryption_failure_and_writes_nothing(app_ctx, service):
    _register(service)
    broken = _service_with_provider(app_ctx, encryptor=_BrokenEncryptor())

    with pytest.raises(InvalidKeyError):
        broken.log_in_by_email_password(EMAIL, PASSWORD)

    user = _stored()
    assert user.access_token is None
    assert user.refresh_token is None


def test_fresh_access_token_is_accepted(service):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.log_in_by_access_token(tokens.access_token) is HTTPStatus.ACCEPTED


def test_expired_access_token_is_unauthorized(app_ctx, service):
    _register(service)
    expiring = _service_with_provider(app_ctx, access_lifetime=timedelta(seconds=-1))
    tokens = expiring.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.log_in_by_access_token(tokens.access_token) is HTTPStatus.UNAUTHORIZED


def test_corrupted_access_token_is_bad_request(service):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)
    corrupted = tokens.access_token[:-6]

    assert service.log_in_by_access_token(corrupted) is HTTPStatus.BAD_REQUEST


def test_corrupted_token_stored_on_user_is_still_bad_request(service):
    _register(service)
    user = _stored()
    user.access_token = "garbage"
    db.session.commit()

    assert service.log_in_by_access_token("garbage") is HTTPStatus.BAD_REQUEST


def test_superseded_access_token_is_bad_request(service):
    _register(service)
    first = service.log_in_by_email_password(EMAIL, PASSWORD)
    second = service.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.log_in_by_access_token(first.access_token) is HTTPStatus.BAD_REQUEST
    assert service.log_in_by_access_token(second.access_token) is HTTPStatus.ACCEPTED


def test_refresh_outside_window_keeps_refresh_token(service):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)

    renewed = service.update_access_token(tokens.refresh_token)

    assert renewed.refresh_token == tokens.refresh_token
    assert renewed.access_token != tokens.access_token
    user = _stored()
    assert user.refresh_token == tokens.refresh_token
    assert user.access_token == renewed.access_token
    assert service.log_in_by_access_token(renewed.access_token) is HTTPStatus.ACCEPTED
    assert service.log_in_by_access_token(tokens.access_token) is HTTPStatus.BAD_REQUEST


def test_refresh_inside_window_rotates_refresh_token(app_ctx, service):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)
    renewing = _service_with_provider(app_ctx, renewal_window=timedelta(days=30))

    renewed = renewing.update_access_token(tokens.refresh_token)

    assert renewed.refresh_token != tokens.refresh_token
    assert renewed.access_token != tokens.access_token
    user = _stored()
    assert user.refresh_token == renewed.refresh_token
    assert user.access_token == renewed.access_token
    assert renewing.update_access_token(tokens.refresh_token) is None


def test_refresh_with_unknown_token_is_rejected(service):
    _register(service)
    service.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.update_access_token("not-a-token") is None


def test_refresh_with_expired_token_is_rejected(app_ctx, service):
    _register(service)
    expiring = _service_with_provider(app_ctx, refresh_lifetime=timedelta(seconds=-1))
    tokens = expiring.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.update_access_token(tokens.refresh_token) is None
    assert _stored().access_token == tokens.access_token


def test_refresh_token_is_not_an_access_token(service):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)

    assert service.update_access_token(tokens.access_token) is None


def test_queries_return_transfer_representation(service):
    _register(service, "ada@example.com", "Ada Lovelace")
    _register(service, "grace@example.com", "Grace Hopper")
    _register(service, "alan@example.com", "Alan Turing")

    everyone = service.find_all()
    assert [user["email"] for user in everyone] == [
        "ada@example.com",
        "grace@example.com",
        "alan@example.com",
    ]
    assert all("password_hash" not in user for user in everyone)
    assert all("access_token" not in user for user in everyone)

    ada = service.find_by_email("ada@example.com")
    assert ada == {"id": ada["id"], "email": "ada@example.com", "name": "Ada Lovelace", "role": "USER"}
    assert service.find_by_id(ada["id"]) == ada

    matches = service.find_users_by_username("HOP")
    assert [user["name"] for user in matches] == ["Grace Hopper"]
    assert len(service.find_users_by_username("a")) == 3


def test_queries_for_absent_users_return_empty_results(service):
    assert service.find_all() == []
    assert service.find_by_id(404) is None
    assert service.find_by_email("nobody@example.com") is None
    assert service.find_users_by_username("nobody") == []


def test_delete_is_idempotent_in_effect(service):
    _register(service)
    user_id = service.find_by_email(EMAIL)["id"]

    assert service.delete(12345) is False
    assert service.delete(12345) is False
    assert service.delete(user_id) is True
    assert service.delete(user_id) is False
    assert service.find_by_id(user_id) is None


class _RacingStore(SqlUserStore):
    """Misses a concurrent registration, so the unique constraint decides."""

    def find_by_email(self, email: str):
        return None


class _FailingAfterFlushStore(SqlUserStore):
    def save(self, user: User) -> User:
        super().save(user)
        raise RuntimeError("connection lost")


def test_create_losing_registration_race_returns_false(app_ctx, service):
    _register(service)
    racing = UserService(
        _RacingStore(),
        TokenProvider.from_config(app_ctx.config),
        app_ctx.config["PASSWORD_HASH_ALGORITHM"],
    )

    assert racing.create({"email": EMAIL, "name": "Late Pat", "password": PASSWORD}) is False
    assert User.query.count() == 1
    assert _stored().name == "Pat Planner"


def test_create_rolls_back_when_save_fails(app_ctx):
    failing = UserService(
        _FailingAfterFlushStore(),
        TokenProvider.from_config(app_ctx.config),
        app_ctx.config["PASSWORD_HASH_ALGORITHM"],
    )

    with pytest.raises(RuntimeError):
        failing.create({"email": EMAIL, "name": "Pat", "password": PASSWORD})

    assert User.query.count() == 0


def test_refresh_rolls_back_rotation_when_access_token_fails(app_ctx, service, monkeypatch):
    _register(service)
    tokens = service.log_in_by_email_password(EMAIL, PASSWORD)
    renewing = _service_with_provider(app_ctx, renewal_window=timedelta(days=30))
    generate = renewing.token_provider.generate

    def generate_refresh_only(email, token_class):
        if token_class is TokenClass.ACCESS:
            raise InvalidKeyError("key rejected")
        return generate(email, token_class)

    monkeypatch.setattr(renewing.token_provider, "generate", generate_refresh_only)

    with pytest.raises(InvalidKeyError):
        renewing.update_access_token(tokens.refresh_token)

    user = _stored()
    assert user.refresh_token == tokens.refresh_token
    assert user.access_token == tokens.access_token
    assert service.update_access_token(tokens.refresh_token) is not None
