"""
JWT verification helpers.

Provides :func:`verify_token` for decoding tokens issued by
:mod:`tasktracker.jwt` and the :func:`require_auth` decorator that guards
every task and profile endpoint.  On success the decorator stores the
caller's identity on ``flask.g`` (``g.user_id`` and ``g.username``) so
handlers can scope their queries to the caller's own rows.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import jwt
from flask import current_app, g, request

from .errors import AuthError
from .jwt import TOKEN_ALGORITHM

REQUIRED_TOKEN_CLAIMS = ["id", "username", "iat", "exp"]


def verify_token(
    token: str,
    secret: str,
    algorithms: list[str] | None = None,
) -> dict[str, Any] | None:
    """
    Decode and validate a JWT, returning the payload on success.

    Performs full verification: signature check, expiry (``exp``), and the
    presence of all required claims.  Additionally validates that ``id``
    is a positive integer and ``username`` is a non-empty string.

    Args:
        token: The encoded JWT string to verify.
        secret: The shared HS256 signing secret.
        algorithms: List of acceptable signing algorithms.  Defaults to
            ``["HS256"]`` to prevent algorithm-confusion attacks.

    Returns:
        The decoded payload dictionary if the token is valid, or ``None``
        if verification fails for any reason.
    """
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=algorithms or [TOKEN_ALGORITHM],
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError:
        return None

    user_id = decoded.get("id")
    username = decoded.get("username")

    # bool is an int subclass; a token claiming id=true is not a user id
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        return None
    if not isinstance(username, str) or not username.strip():
        return None
    return decoded


def extract_bearer_token(auth_header: str | None) -> str:
    """
    Return the token part of an ``Authorization: Bearer <token>`` header.

    The header must consist of exactly two space-separated parts, the first
    being ``Bearer``.

    Raises:
        AuthError: If the header is missing or malformed.
    """
    parts = (auth_header or "").split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthError("Authorization header missing or malformed")
    return parts[1]


def authenticate(auth_header: str | None) -> dict[str, Any]:
    """
    Resolve an ``Authorization`` header into the caller's identity.

    Returns:
        ``{"id": ..., "username": ...}`` taken from the verified token.

    Raises:
        AuthError: If the header is missing or malformed, or the token
            fails signature or expiry verification.
    """
    token = extract_bearer_token(auth_header)
    payload = verify_token(token, current_app.config["JWT_SECRET_KEY"])
    if payload is None:
        raise AuthError("Invalid token")
    return {"id": payload["id"], "username": payload["username"]}


def require_auth(view_func: Callable[..., Any]):
    """
    Decorator that enforces Bearer-token authentication on API endpoints.

    Runs :func:`authenticate` on the request's ``Authorization`` header
    before the wrapped view, so an unauthenticated request fails with 401
    before its body is even looked at.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        identity = authenticate(request.headers.get("Authorization"))
        g.user_id = identity["id"]
        g.username = identity["username"]
        return view_func(*args, **kwargs)

    return wrapper
