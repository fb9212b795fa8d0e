"""
Flask application factory module.

This module creates and configures the task tracker API using the factory
pattern, allowing for different configurations (development, testing,
production).

The application registers two blueprints under ``/api``:
  * **auth_bp** -- ping, registration, login and the profile endpoint.
  * **tasks_bp** -- per-user task CRUD and the batch delete endpoint.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from flask import Flask, Response, request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import DEFAULT_JWT_SECRET, get_config

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    """Turn on foreign-key enforcement for every new SQLite connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def _register_cors(app: Flask) -> None:
    """Attach CORS headers to every API response, preflights included."""

    @app.after_request
    def apply_cors_headers(response: Response) -> Response:
        if request.path.startswith("/api"):
            response.headers["Access-Control-Allow-Origin"] = app.config["CORS_ALLOWED_ORIGIN"]
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        return response


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.

    Raises:
        RuntimeError: If a production app is requested while the token
            signing secret still holds the development default.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    if (
        not app.config.get("DEBUG")
        and not app.config.get("TESTING")
        and app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET
    ):
        raise RuntimeError("JWT_SECRET must be set to a private value in production.")

    logger.info("Creating app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    # Initialize extensions
    db.init_app(app)

    # Register blueprints
    from .errors import register_error_handlers
    from .routes.auth import auth_bp
    from .routes.tasks import tasks_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(tasks_bp, url_prefix="/api")
    register_error_handlers(app)
    _register_cors(app)

    # Create database tables; create_all skips tables that already exist
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    return app
