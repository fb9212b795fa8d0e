"""
Error taxonomy and JSON error handlers.

Route handlers raise one of the :class:`ApiError` subclasses below; the
handlers registered by :func:`register_error_handlers` turn them into a
``{"error": "<message>"}`` body with the matching status code.  Database
failures are logged with their traceback and answered with a generic
message so no internal detail reaches the caller.
"""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from . import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """The client sent malformed or incomplete input."""

    status_code = 400
    default_message = "Bad request"


class AuthError(ApiError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = 401
    default_message = "Invalid token"


class NotFoundError(ApiError):
    """The target row is absent or owned by someone else."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    """A unique key is already taken."""

    status_code = 409
    default_message = "Conflict"


def json_error(message: str, status_code: int) -> tuple[Response, int]:
    """Build the standard ``{"error": ...}`` response tuple."""
    return jsonify({"error": message}), status_code


def register_error_handlers(app: Flask) -> None:
    """Install the JSON error handlers on *app*."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> tuple[Response, int]:
        if error.status_code >= 500:
            logger.error("API error: %s", error.message)
        else:
            logger.warning("%s: %s", type(error).__name__, error.message)
        return json_error(error.message, error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError) -> tuple[Response, int]:
        logger.exception("Database error: %s", error)
        db.session.rollback()
        return json_error("Database error", 500)

    @app.errorhandler(400)
    def bad_request(_: Exception) -> tuple[Response, int]:
        return json_error("Bad request", 400)

    @app.errorhandler(404)
    def not_found(_: Exception) -> tuple[Response, int]:
        return json_error("Resource not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_: Exception) -> tuple[Response, int]:
        return json_error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(error: Exception) -> tuple[Response, int]:
        # Unwrap the original exception when Flask wrapped it
        original = getattr(error, "original_exception", None) or error
        if not isinstance(original, HTTPException):
            logger.error("Internal server error: %s", original)
        return json_error("Internal server error", 500)
