"""
HTTP client for the task tracker API.

Wraps every endpoint in a method of :class:`TaskApiClient`.  Requests go
through a ``requests.Session`` (or any object with the same ``request``
signature) and carry the bearer token of the shared
:class:`~tasktracker.client.context.SessionContext`.  Non-2xx answers raise
:class:`ApiError` with the server's ``error`` message; network failures
raise :class:`TransportError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

if TYPE_CHECKING:
    from .context import SessionContext

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Base class for client-side failures."""


class TransportError(ClientError):
    """The request never produced an HTTP response."""


class ApiError(ClientError):
    """
    The server answered with a non-success status code.

    Attributes:
        status_code: HTTP status of the response.
        error: The body's ``error`` field, or ``None`` when absent.
        message: ``error`` if present, else ``HTTP <status>``.
    """

    def __init__(self, status_code: int, error: str | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.message = error or f"HTTP {status_code}"
        super().__init__(self.message)


def _response_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _response_error_message(payload: Any) -> str | None:
    """Return the body's ``error`` field if it holds a non-blank string."""
    if isinstance(payload, dict):
        message = payload.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return None


class TaskApiClient:
    """
    Thin wrapper over the JSON API.

    Args:
        base_url: API root, e.g. ``http://localhost:4000/api``.
        context: Session whose token is sent with each request.
        http: Object exposing ``request(method, url, **kwargs)``; defaults
            to a new ``requests.Session``.
        timeout: Per-request timeout in seconds; ``None`` waits forever.
    """

    def __init__(
        self,
        base_url: str,
        context: SessionContext | None = None,
        *,
        http: Any = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.context = context
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.context.token if self.context is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, json: Any = None) -> Any:
        """
        Send one request and return its decoded JSON body.

        Raises:
            TransportError: If no response was received.
            ApiError: If the response status is not 2xx.
        """
        try:
            response = self.http.request(
                method,
                self._url(path),
                headers=self._headers(),
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(str(exc)) from exc

        payload = _response_json(response)
        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, _response_error_message(payload))
        return payload

    # -- auth ----------------------------------------------------------

    def ping(self) -> dict[str, Any]:
        return self.request("GET", "/ping")

    def register(self, username: str, password: str) -> dict[str, Any]:
        """Return the ``{message, token}`` body of a successful registration."""
        return self.request("POST", "/register", json={"username": username, "password": password})

    def login(self, username: str, password: str) -> dict[str, Any]:
        """Return the ``{message, token}`` body of a successful login."""
        return self.request("POST", "/login", json={"username": username, "password": password})

    def profile(self) -> dict[str, Any]:
        body = self.request("GET", "/profile")
        # Accept both {message, user} and a bare user object
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            return body["user"]
        return body

    # -- tasks ---------------------------------------------------------

    def list_tasks(self) -> list[dict[str, Any]]:
        body = self.request("GET", "/tasks")
        if isinstance(body, list):
            return body
        if isinstance(body, dict) and isinstance(body.get("tasks"), list):
            return body["tasks"]
        return []

    def create_task(self, title: str, **fields: Any) -> dict[str, Any]:
        body = self.request("POST", "/tasks", json={"title": title, **fields})
        return body.get("task", body) if isinstance(body, dict) else body

    def update_task(self, task_id: int, **changes: Any) -> dict[str, Any] | None:
        body = self.request("PUT", f"/tasks/{task_id}", json=changes)
        return body.get("task", body) if isinstance(body, dict) else None

    def delete_task(self, task_id: int) -> None:
        self.request("DELETE", f"/tasks/{task_id}")

    def bulk_delete(self, ids: list[int]) -> list[dict[str, Any]]:
        body = self.request("POST", "/tasks/bulk-delete", json={"ids": list(ids)})
        return body.get("results", []) if isinstance(body, dict) else []
