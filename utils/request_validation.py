"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error.

    Required keys must be present as non-empty strings; credentials and tokens
    are never accepted as numbers or nested objects.
    """

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(", ".join(sorted(missing)))
            )

        not_text = [key for key in required_keys if not isinstance(data[key], str)]
        if not_text:
            raise BadRequest(
                "Fields must be strings: {}.".format(", ".join(sorted(not_text)))
            )

    return data


def parse_bearer_token(req: Request) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""

    scheme, _, token = req.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise BadRequest("Authorization header must carry a Bearer token.")
    return token
