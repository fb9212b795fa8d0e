"""
Client session context.

:class:`SessionContext` is the single object that carries the signed-in
state between client components: the token, the cached profile and the
session state.  It is created from a :class:`TokenStore` (the persisted
token, if any), updated when a login or registration returns a token, and
cleared on sign-out or when the token turns out to be invalid.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Key the token is persisted under, the only client-side artifact
TOKEN_KEY = "token"


class SessionState(str, Enum):
    """Top-level client states."""

    ANONYMOUS = "anonymous"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"


class TokenStore:
    """
    Persistent key/value storage backed by a small JSON file.

    Plays the role browser local storage plays for a web client: the token
    survives restarts under the fixed :data:`TOKEN_KEY` key.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable token store at %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def load(self) -> str | None:
        token = self._read().get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        data = self._read()
        data[TOKEN_KEY] = token
        self._write(data)

    def clear(self) -> None:
        data = self._read()
        if data.pop(TOKEN_KEY, None) is not None:
            self._write(data)


class SessionContext:
    """
    Token, profile and state of the current client session.

    Attributes:
        token: The bearer token, or ``None`` when signed out.
        user: The profile returned by ``/api/profile`` once verified.
        state: One of :class:`SessionState`.
    """

    def __init__(self, store: TokenStore) -> None:
        self.store = store
        self.token: str | None = store.load()
        self.user: dict[str, Any] | None = None
        self.state = SessionState.CHECKING if self.token else SessionState.ANONYMOUS

    def begin(self, token: str) -> None:
        """Hold and persist a newly issued token; the profile is still unverified."""
        self.token = token
        self.user = None
        self.store.save(token)
        self.state = SessionState.CHECKING

    def confirm(self, user: dict[str, Any]) -> None:
        """Record the verified profile."""
        self.user = user
        self.state = SessionState.AUTHENTICATED

    def clear(self) -> None:
        """Forget the token and profile, both in memory and in the store."""
        self.token = None
        self.user = None
        self.store.clear()
        self.state = SessionState.ANONYMOUS
