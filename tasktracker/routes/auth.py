"""
Authentication API endpoints.

Endpoints:
    GET  /api/ping      - Liveness check (public)
    POST /api/register  - Create an account and receive a token
    POST /api/login     - Exchange credentials for a fresh token
    GET  /api/profile   - Public profile of the token's user
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .. import db
from ..auth import require_auth
from ..errors import AuthError, ConflictError, NotFoundError
from ..jwt import create_token
from ..models import User
from ..schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def json_body() -> dict[str, Any]:
    """Return the request's JSON object, or an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _issue_token(user: User) -> str:
    return create_token(
        user_id=user.id,
        username=user.username,
        secret=current_app.config["JWT_SECRET_KEY"],
        expiry_days=current_app.config["JWT_EXPIRY_DAYS"],
    )


# =====================================================================
# API Endpoints
# =====================================================================


@auth_bp.route("/ping", methods=["GET"])
def ping() -> tuple[Response, int]:
    """Liveness check; needs no token."""
    return jsonify({"message": "pong"}), 200


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    Expects a JSON body with ``username`` and ``password``.  The password
    is stored as a salted hash and a token is issued straight away, so a
    new user does not have to log in separately.

    Returns:
        200 with ``message`` and ``token`` on success.
        400 if a field is missing, 409 if the username is taken.
    """
    payload = RegisterRequest.from_json(json_body())

    existing_user = db.session.scalar(select(User).where(User.username == payload.username))
    if existing_user:
        raise ConflictError("Username already exists")

    user = User(username=payload.username)
    user.set_password(payload.password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request registered the same name since the check above
        db.session.rollback()
        raise ConflictError("Username already exists") from None

    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return jsonify({"message": "User registered", "token": _issue_token(user)}), 200


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a token.

    The same ``"Invalid credentials"`` message is returned for an unknown
    username and for a wrong password.

    Returns:
        200 with ``message`` and ``token`` on success.
        400 if a field is missing, 401 if the credentials are wrong.
    """
    payload = LoginRequest.from_json(json_body())

    user = db.session.scalar(select(User).where(User.username == payload.username))
    if not user or not user.check_password(payload.password):
        raise AuthError("Invalid credentials")

    logger.info("User %s logged in", user.username)
    return jsonify({"message": "Login successful", "token": _issue_token(user)}), 200


@auth_bp.route("/profile", methods=["GET"])
@require_auth
def profile() -> tuple[Response, int]:
    """
    Return the authenticated user's profile.

    A valid token whose user row has since disappeared yields 404.
    """
    user = db.session.get(User, g.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return jsonify({"message": "OK", "user": user.to_dict()}), 200
