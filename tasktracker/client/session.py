"""
Client state controller.

:class:`SessionController` drives the session state machine and decides
which top-level view to show:

    anonymous --(login/register returns a token)--> checking
    checking  --(profile fetch succeeds)----------> authenticated
    checking  --(profile fetch fails)-------------> anonymous (token dropped)
    authenticated --(sign out)--------------------> anonymous

There is no token refresh: an expired token is only noticed when a later
call fails.
"""

from __future__ import annotations

import logging

from .api import ApiError, ClientError, TaskApiClient, TransportError
from .context import SessionContext, SessionState
from .dashboard import Dashboard

logger = logging.getLogger(__name__)


class SessionController:
    """
    Owns the session context and the auth form state.

    Args:
        client: API client sharing :attr:`context` for its token.

    Attributes:
        mode: ``"login"`` or ``"register"``, what :meth:`submit` does.
        message: Inline error from the last failed submit, or ``""``.
        loading: ``True`` while a submit is in flight.
    """

    def __init__(self, client: TaskApiClient) -> None:
        if client.context is None:
            raise ValueError("client must be bound to a SessionContext")
        self.client = client
        self.context: SessionContext = client.context
        self.mode = "login"
        self.message = ""
        self.loading = False

    @property
    def state(self) -> SessionState:
        return self.context.state

    @property
    def view(self) -> str:
        """Top-level view to render: ``auth``, ``checking`` or ``dashboard``."""
        if self.context.state is SessionState.CHECKING:
            return "checking"
        if self.context.state is SessionState.AUTHENTICATED:
            return "dashboard"
        return "auth"

    def toggle_mode(self) -> str:
        self.mode = "register" if self.mode == "login" else "login"
        self.message = ""
        return self.mode

    def submit(self, username: str, password: str) -> bool:
        """
        Log in or register, depending on :attr:`mode`.

        On success the returned token moves the session to ``checking`` and
        the profile is verified right away.

        Returns:
            ``True`` if the session ended up authenticated.
        """
        self.message = ""
        self.loading = True
        try:
            call = self.client.login if self.mode == "login" else self.client.register
            body = call(username, password)
        except ApiError as exc:
            self.message = exc.error or "Authentication failed"
            return False
        except TransportError:
            self.message = "Network error"
            return False
        finally:
            self.loading = False

        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            self.message = "Server didn't return a token"
            return False

        self.context.begin(token)
        return self.check()

    def check(self) -> bool:
        """
        Verify the held token by fetching the profile.

        Any failure (error status or network error) discards the token.

        Returns:
            ``True`` if the session is authenticated afterwards.
        """
        if self.context.token is None:
            self.context.clear()
            return False
        if self.context.state is not SessionState.CHECKING:
            return self.context.state is SessionState.AUTHENTICATED

        try:
            user = self.client.profile()
        except ClientError as exc:
            logger.warning("Token rejected, signing out: %s", exc)
            self.context.clear()
            return False

        self.context.confirm(user)
        return True

    def sign_out(self) -> None:
        self.context.clear()

    def dashboard(self) -> Dashboard:
        """
        Build the dashboard for the authenticated session.

        Raises:
            RuntimeError: If the session is not authenticated.
        """
        if self.context.state is not SessionState.AUTHENTICATED:
            raise RuntimeError("dashboard requires an authenticated session")
        return Dashboard(self.client)
