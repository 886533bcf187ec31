"""App-level middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    AccessLogMiddleware -- One log line per request
    AddSlashesMiddleware -- 301 paths without a trailing slash
    PrincipalMiddleware -- Resolve the session principal into the current user
    SessionMiddleware -- Signed cookie sessions (itsdangerous)
"""

from perch.middleware.access_log import AccessLogMiddleware
from perch.middleware.auth import PrincipalMiddleware, current_user, get_user, login, logout
from perch.middleware.protocol import Middleware, Next
from perch.middleware.sessions import SessionConfig, SessionMiddleware, get_session
from perch.middleware.slashes import AddSlashesMiddleware

__all__ = [
    "AccessLogMiddleware",
    "AddSlashesMiddleware",
    "Middleware",
    "Next",
    "PrincipalMiddleware",
    "SessionConfig",
    "SessionMiddleware",
    "current_user",
    "get_session",
    "get_user",
    "login",
    "logout",
]
