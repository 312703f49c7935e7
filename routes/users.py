"""Users blueprint: registration, login, token renewal and account lookup."""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest, Conflict, InternalServerError, NotFound, Unauthorized

from services.user_service import UserService
from utils.request_validation import parse_bearer_token, parse_json_request

users_bp = Blueprint("users", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def access_token_required(view):
    """Reject the request unless it carries the caller's current access token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        status = UserService.from_app().log_in_by_access_token(parse_bearer_token(request))
        if status is HTTPStatus.UNAUTHORIZED:
            raise Unauthorized("Access token has expired.")
        if status is not HTTPStatus.ACCEPTED:
            raise BadRequest("Access token is not valid.")
        return view(*args, **kwargs)

    return wrapper


@users_bp.route("", methods=["POST"])
def register() -> tuple:
    """Register a new account with an email, display name and password."""
    payload = parse_json_request(request, required_keys=("email", "name", "password"))
    email = _normalize_email(payload.get("email"))
    name = payload["name"].strip()
    password = payload["password"]

    if not email or not name:
        raise BadRequest("Email and name are required.")

    service = UserService.from_app()
    if service.find_by_email(email) is not None:
        raise Conflict("A user with that email already exists.")

    if not service.create({"email": email, "name": name, "password": password}):
        raise InternalServerError("The account could not be created.")

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "user": service.find_by_email(email),
            }
        ),
        HTTPStatus.CREATED,
    )


@users_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate with email and password and return a token pair."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    email = _normalize_email(payload.get("email"))

    tokens = UserService.from_app().log_in_by_email_password(email, payload["password"])
    if tokens is None:
        raise Unauthorized("Invalid email or password.")

    return jsonify(tokens.to_dict()), HTTPStatus.OK


@users_bp.route("/login/token", methods=["POST"])
def login_with_access_token() -> tuple:
    """Report whether the bearer access token is still accepted."""
    status = UserService.from_app().log_in_by_access_token(parse_bearer_token(request))
    return jsonify({"status": status.phrase}), status


@users_bp.route("/token/refresh", methods=["POST"])
def refresh() -> tuple:
    """Exchange a refresh token for a new access token."""
    payload = parse_json_request(request, required_keys=("refresh_token",))

    tokens = UserService.from_app().update_access_token(payload["refresh_token"])
    if tokens is None:
        raise BadRequest("Refresh token is invalid or expired. Log in again.")

    return jsonify(tokens.to_dict()), HTTPStatus.OK


@users_bp.route("", methods=["GET"])
@access_token_required
def list_users() -> tuple:
    users = UserService.from_app().find_all()
    return jsonify({"results": users, "count": len(users)}), HTTPStatus.OK


@users_bp.route("/<int:user_id>", methods=["GET"])
@access_token_required
def get_user(user_id: int) -> tuple:
    user = UserService.from_app().find_by_id(user_id)
    if user is None:
        raise NotFound("User not found.")
    return jsonify(user), HTTPStatus.OK


@users_bp.route("/search", methods=["GET"])
@access_token_required
def search_users() -> tuple:
    """Return users whose display name contains the ``name`` query argument."""
    name = (request.args.get("name") or "").strip()
    if not name:
        raise BadRequest("name query parameter is required.")

    users = UserService.from_app().find_users_by_username(name)
    return jsonify({"results": users, "count": len(users)}), HTTPStatus.OK


@users_bp.route("/lookup", methods=["GET"])
@access_token_required
def lookup_user() -> tuple:
    email = _normalize_email(request.args.get("email"))
    if not email:
        raise BadRequest("email query parameter is required.")

    user = UserService.from_app().find_by_email(email)
    if user is None:
        raise NotFound("User not found.")
    return jsonify(user), HTTPStatus.OK


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@access_token_required
def delete_user(user_id: int):
    if not UserService.from_app().delete(user_id):
        raise NotFound("User not found.")
    return "", HTTPStatus.NO_CONTENT
