"""Test helper functions used across the test suites."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlsplit

import jwt

DEFAULT_TEST_USER_ID = 1
DEFAULT_TEST_USERNAME = "test_user"
TEST_API_URL = "http://testserver/api"


def create_test_token(
    secret: str,
    user_id: int = DEFAULT_TEST_USER_ID,
    username: str = DEFAULT_TEST_USERNAME,
    expired: bool = False,
    algorithm: str = "HS256",
    **extra_claims: Any,
) -> str:
    """Create a signed test token carrying the claims the API requires."""
    now = datetime.now(timezone.utc)
    expiry_time = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload: dict[str, Any] = {
        "id": user_id,
        "username": username,
        "iat": int(now.timestamp()),
        "exp": int(expiry_time.timestamp()),
        "jti": uuid.uuid4().hex,
        **extra_claims,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def auth_headers(token: str) -> dict[str, str]:
    """Build common JSON API headers with bearer token auth."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


class FakeResponse:
    """
    Minimal stand-in for :class:`requests.Response`.

    Provides just ``status_code`` and ``json()``, the only parts the client
    package reads.
    """

    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FlaskTransport:
    """
    Routes :class:`~tasktracker.client.TaskApiClient` calls into a Flask
    test client, so client code runs against the real API in-process.

    Attributes:
        calls: ``(method, path, json)`` for every request sent.
    """

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls: list[tuple[str, str, Any]] = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path, json))
        response = self.test_client.open(path, method=method, headers=headers, json=json)
        return FakeResponse(response.status_code, response.get_json(silent=True))


class ScriptedTransport:
    """
    Transport that replays queued responses or exceptions in order.

    Each queued item is either a :class:`FakeResponse` or an exception
    instance to raise.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[tuple[str, str, Any]] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append((method, urlsplit(url).path, json))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item
