"""Principal middleware — resolves the session principal on every request.

Reads the principal id from the session, loads the user through the
``PrincipalResolver`` and stores it in a ContextVar, accessible via
``get_user()`` from any step. A principal that no longer resolves
(``UserNotFound``) is dropped from the session and the request proceeds
as anonymous.

Requires ``SessionMiddleware`` to run first::

    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
    app.add_middleware(PrincipalMiddleware(PrincipalResolver(store)))

    # In a step:
    user = get_user()
    if user.is_authenticated:
        ...
"""

import logging
from contextvars import ContextVar
from typing import Any, ClassVar

from perch.auth.principal import PrincipalResolver
from perch.auth.store import ANONYMOUS, AnonymousUser, User
from perch.errors import ConfigurationError, UserNotFound
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.middleware.sessions import get_session, regenerate_session
from perch.security.audit import emit_security_event

logger = logging.getLogger("perch.auth")

_user_var: ContextVar[User | AnonymousUser] = ContextVar("perch_user")

# The middleware handling the current request, used by login()/logout()
_active_middleware: ContextVar[PrincipalMiddleware | None] = ContextVar(
    "perch_principal_middleware", default=None
)


def get_user() -> User | AnonymousUser:
    """Return the current user, or ``ANONYMOUS``.

    Raises ``LookupError`` if called outside a request with
    ``PrincipalMiddleware`` active.
    """
    try:
        return _user_var.get()
    except LookupError:
        msg = (
            "No auth context. Ensure PrincipalMiddleware is added "
            "to the app before accessing the user."
        )
        raise LookupError(msg) from None


def current_user() -> User | AnonymousUser:
    """Template-friendly alias for ``get_user()`` that never raises.

    Registered as a template global when ``PrincipalMiddleware`` is active::

        {% if current_user().is_authenticated %}
            <a href="/logout/">Log out {{ current_user().username }}</a>
        {% endif %}
    """
    return _user_var.get(ANONYMOUS)


def _active() -> PrincipalMiddleware:
    middleware = _active_middleware.get()
    if middleware is None:
        msg = "login() and logout() require PrincipalMiddleware to be active."
        raise LookupError(msg)
    return middleware


def login(user: User) -> None:
    """Establish *user* as the session principal.

    Regenerates the session first so data from before login (including a
    planted session) does not survive.
    """
    middleware = _active()
    session = regenerate_session()
    session[middleware.session_key] = middleware.resolver.serialize(user)
    _user_var.set(user)
    emit_security_event("auth.login.success", user_id=user.id)


def logout() -> None:
    """Clear the session principal. Safe to call when already anonymous."""
    _active()
    user = _user_var.get(ANONYMOUS)
    regenerate_session()
    _user_var.set(ANONYMOUS)
    if user.is_authenticated:
        emit_security_event("auth.logout.success", user_id=user.id)


class PrincipalMiddleware:
    """Resolve the session principal into the current user."""

    __slots__ = ("resolver", "session_key")

    # Template globals auto-registered by App._freeze() when this
    # middleware is present.
    template_globals: ClassVar[dict[str, Any]] = {
        "current_user": current_user,
    }

    def __init__(self, resolver: PrincipalResolver, *, session_key: str = "user_id") -> None:
        self.resolver = resolver
        self.session_key = session_key

    async def _resolve(self, request: Request) -> User | AnonymousUser:
        try:
            session = get_session()
        except LookupError:
            msg = (
                "PrincipalMiddleware requires SessionMiddleware. "
                "Add SessionMiddleware before PrincipalMiddleware."
            )
            raise ConfigurationError(msg) from None

        principal = session.get(self.session_key)
        if principal is None:
            return ANONYMOUS
        try:
            return await self.resolver.deserialize(principal)
        except UserNotFound as exc:
            logger.warning("Dropping stale session principal: %s", exc)
            session.pop(self.session_key, None)
            emit_security_event(
                "auth.principal.stale",
                request=request,
                details={"principal": str(principal)},
            )
            return ANONYMOUS

    async def __call__(self, request: Request, next: Next) -> Response:
        """Resolve the user, then dispatch."""
        user = await self._resolve(request)
        user_token = _user_var.set(user)
        active_token = _active_middleware.set(self)
        try:
            return await next(request)
        finally:
            _user_var.reset(user_token)
            _active_middleware.reset(active_token)
