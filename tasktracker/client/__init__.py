"""
Python client for the task tracker API.

Typical use::

    context = SessionContext(TokenStore("~/.tasktracker/session.json"))
    client = TaskApiClient("http://localhost:4000/api", context)
    session = SessionController(client)
    session.check()          # verifies a persisted token, if any
    if session.view == "auth":
        session.submit("alice", "pw1")
    dashboard = session.dashboard()
    dashboard.load()
"""

from .api import ApiError, ClientError, TaskApiClient, TransportError
from .context import SessionContext, SessionState, TokenStore
from .dashboard import BulkDeleteResult, Dashboard, PageView, ViewQuery, derive_view
from .session import SessionController

__all__ = [
    "ApiError",
    "BulkDeleteResult",
    "ClientError",
    "Dashboard",
    "PageView",
    "SessionContext",
    "SessionController",
    "SessionState",
    "TaskApiClient",
    "TokenStore",
    "TransportError",
    "ViewQuery",
    "derive_view",
]
