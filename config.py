"""
Application configuration module.

Defines configuration classes for the development, testing and production
environments.  Every value can be overridden through an environment variable
so that deployments inject secrets without touching code; the defaults are
development-only and intentionally insecure.
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.pool import StaticPool

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

# Signing secret used when JWT_SECRET is not set.  Production refuses it.
DEFAULT_JWT_SECRET = "dev_secret_change_me"


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}",
    )

    # Tokens are HS256-signed with this server-held secret
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET)
    # How many days a newly issued token remains valid
    JWT_EXPIRY_DAYS: int = int(os.environ.get("JWT_EXPIRY_DAYS", "7"))
    # Seconds of tolerance for clock differences when checking exp/iat
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    # Value of Access-Control-Allow-Origin on API responses
    CORS_ALLOWED_ORIGIN: str = os.environ.get("CORS_ALLOWED_ORIGIN", "*")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Defaults to an in-memory SQLite database shared through a static pool so
    that every request made by the Flask test client sees the same tables.
    """

    DEBUG: bool = True
    TESTING: bool = True

    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET", "test-jwt-secret-key-for-local-tests-123456"
    )


class ProductionConfig(Config):
    """
    Production environment configuration.

    ``create_app`` refuses to build a production app while
    ``JWT_SECRET_KEY`` still holds the development default.
    """

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
