"""
JWT token creation.

Issues the bearer tokens handed out by ``/api/register`` and ``/api/login``.
Tokens are signed with HS256 using the server-held ``JWT_SECRET_KEY``; no
session state is kept on the server, so a token stays valid until it
expires.

Token structure (claims):
    - ``id``       -- integer primary key of the authenticated user.
    - ``username`` -- the user's login name.
    - ``iat``      -- issued-at timestamp (UTC epoch seconds).
    - ``exp``      -- expiration timestamp (UTC epoch seconds).
    - ``jti``      -- random token identifier, so two tokens issued in the
      same second for the same user are still distinct.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

TOKEN_ALGORITHM = "HS256"


def create_token(
    user_id: int,
    username: str,
    secret: str,
    expiry_days: int,
) -> str:
    """
    Create an HS256-signed JWT for an authenticated user.

    Args:
        user_id: Primary key of the user.  Must be a positive integer.
        username: Login name of the user.  Must be a non-empty string.
        secret: Shared secret used to sign the token.
        expiry_days: Number of days from *now* until the token expires.

    Returns:
        A compact JWS string suitable for an ``Authorization: Bearer``
        header.

    Raises:
        ValueError: If *user_id* is not positive or *username* is blank.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")
    if not isinstance(username, str) or not username.strip():
        raise ValueError("username must be a non-empty string")

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(days=int(expiry_days))

    payload: dict[str, Any] = {
        "id": int(user_id),
        "username": username,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)
