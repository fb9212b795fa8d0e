"""
Security tests for bearer-token handling.

Every protected endpoint must answer 401 for a missing, malformed,
forged or expired token before it looks at the request body, and no
response may ever expose a password hash (OWASP A07 – Identification and
Authentication Failures).

Key SDET Concepts Demonstrated:
- Forged-token construction (wrong secret, unsigned, expired)
- Cross-endpoint parameterization of the same attack
- Response scanning for sensitive data
"""

from __future__ import annotations

import jwt
import pytest

from tests.helpers import auth_headers, create_test_token

pytestmark = pytest.mark.security

PROTECTED_ENDPOINTS = [
    ("GET", "/api/profile"),
    ("GET", "/api/tasks"),
    ("POST", "/api/tasks"),
    ("PUT", "/api/tasks/1"),
    ("DELETE", "/api/tasks/1"),
    ("POST", "/api/tasks/bulk-delete"),
]


@pytest.mark.parametrize("method, path", PROTECTED_ENDPOINTS)
@pytest.mark.parametrize(
    "header",
    [None, "Bearer", "Token abc", "Bearer a b", "bearer abc"],
)
def test_malformed_header_returns_401(client, db_session, method, path, header):
    headers = {"Authorization": header} if header is not None else {}

    response = client.open(path, method=method, headers=headers, json={"title": "x"})

    assert response.status_code == 401
    assert response.get_json() == {"error": "Authorization header missing or malformed"}


@pytest.mark.parametrize("method, path", PROTECTED_ENDPOINTS)
def test_forged_token_returns_401(client, db_session, user, method, path):
    # Arrange: signed with a secret the server does not hold
    token = create_test_token("attacker-secret", user_id=user.id, username=user.username)

    # Act
    response = client.open(path, method=method, headers=auth_headers(token), json={})

    # Assert
    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid token"}


def test_expired_token_returns_401(app, client, db_session, user):
    token = create_test_token(
        app.config["JWT_SECRET_KEY"], user_id=user.id, username=user.username, expired=True
    )

    response = client.get("/api/tasks", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid token"}


def test_unsigned_token_returns_401(client, db_session, user):
    token = jwt.encode(
        {"id": user.id, "username": user.username, "iat": 1, "exp": 4102444800},
        None,
        algorithm="none",
    )

    response = client.get("/api/tasks", headers=auth_headers(token))

    assert response.status_code == 401


def test_password_hash_never_leaves_the_server(client, db_session):
    """No auth response may contain the stored password or its hash."""
    # Arrange
    register = client.post("/api/register", json={"username": "alice", "password": "s3cret!"})
    token = register.get_json()["token"]

    # Act
    bodies = [
        register.get_data(as_text=True),
        client.post("/api/login", json={"username": "alice", "password": "s3cret!"}).get_data(as_text=True),
        client.get("/api/profile", headers=auth_headers(token)).get_data(as_text=True),
    ]

    # Assert
    for body in bodies:
        assert "s3cret!" not in body
        assert "password" not in body
        assert "scrypt" not in body and "pbkdf2" not in body


def test_token_does_not_embed_password(client, db_session):
    token = client.post(
        "/api/register", json={"username": "alice", "password": "s3cret!"}
    ).get_json()["token"]

    claims = jwt.decode(token, options={"verify_signature": False})

    assert set(claims) == {"id", "username", "iat", "exp", "jti"}
