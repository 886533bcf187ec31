"""Auth gate — the login / logout / redirect steps routes depend on.

The gate holds no per-request state. Each step looks at one fact, "is
this request authenticated", and either ends the chain with a redirect
or proceeds::

    gate = AuthGate(store)

    ROUTES = {
        "/profile/": [gate.require_login, render("profile")],
        "/login/": {
            "get": [gate.redirect_if_authenticated, render("login")],
            "post": [gate.login, redirect_to("/")],
        },
        "/logout/": [gate.logout, redirect_to("/login/")],
        ...
    }

Failed logins are never errors: ``authenticate`` returns an
``AuthResult`` and the ``login`` step turns a failure into a redirect.
"""

import logging
from dataclasses import dataclass

from perch._internal.invoke import invoke
from perch.auth.store import CredentialStore, User
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Redirect, Response
from perch.middleware.auth import get_user, login, logout
from perch.routing.steps import MiddlewareStep, StepNext, middleware
from perch.security.audit import emit_security_event
from perch.security.passwords import verify_password

logger = logging.getLogger("perch.auth")

UNKNOWN_USER = "Unknown user"
INVALID_PASSWORD = "Invalid password"


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Outcome of a credential check.

    ``user`` is set on success. On failure ``reason`` says why, e.g.
    ``"Unknown user mallory"`` or ``"Invalid password"``.
    """

    user: User | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.user is not None

    @classmethod
    def success(cls, user: User) -> AuthResult:
        return cls(user=user)

    @classmethod
    def failure(cls, reason: str) -> AuthResult:
        return cls(reason=reason)


class AuthGate:
    """Session authentication steps bound to one credential store.

    Build one at startup and share it: ``require_login``, ``login``,
    ``logout`` and ``redirect_if_authenticated`` are ready-made
    ``MiddlewareStep`` values for route chains.
    """

    __slots__ = (
        "home_url",
        "login",
        "login_url",
        "logout",
        "password_field",
        "redirect_if_authenticated",
        "require_login",
        "store",
        "username_field",
    )

    def __init__(
        self,
        store: CredentialStore,
        *,
        login_url: str = "/login/",
        home_url: str = "/",
        username_field: str = "username",
        password_field: str = "password",
    ) -> None:
        self.store = store
        self.login_url = login_url
        self.home_url = home_url
        self.username_field = username_field
        self.password_field = password_field

        self.login: MiddlewareStep = middleware(self._login, name="login")
        self.logout: MiddlewareStep = middleware(self._logout, name="logout")
        self.require_login: MiddlewareStep = middleware(
            self._require_login, name="require_login"
        )
        self.redirect_if_authenticated: MiddlewareStep = middleware(
            self._redirect_if_authenticated, name="redirect_if_authenticated"
        )

    async def authenticate(self, username: str, password: str) -> AuthResult:
        """Check a username/password pair against the store.

        Order matters: an unknown username is reported before any
        password comparison takes place.
        """
        user = await invoke(self.store.find_by_username, username)
        if user is None:
            return AuthResult.failure(f"{UNKNOWN_USER} {username}")
        if not verify_password(password, user.password):
            return AuthResult.failure(INVALID_PASSWORD)
        return AuthResult.success(user)

    async def _read_credentials(self, request: Request) -> tuple[str, str]:
        """Pull the username and password fields from the body.

        A body that cannot be parsed carries no credentials.
        """
        try:
            if request.content_type == "application/json":
                data = await request.json()
                if not isinstance(data, dict):
                    data = {}
            else:
                data = await request.form()
        except (HTTPError, UnicodeDecodeError):
            return "", ""
        username = data.get(self.username_field) or ""
        password = data.get(self.password_field) or ""
        return str(username), str(password)

    # -- Steps --

    async def _login(self, request: Request, next: StepNext) -> Response | Redirect:
        username, password = await self._read_credentials(request)
        result = await self.authenticate(username, password)
        if not result.ok:
            logger.info("Login failed: %s", result.reason)
            emit_security_event(
                "auth.login.failure",
                request=request,
                details={"reason": result.reason},
            )
            return Redirect(self.login_url)
        login(result.user)
        return await next(request)

    async def _logout(self, request: Request, next: StepNext) -> Response:
        if get_user().is_authenticated:
            logout()
        return await next(request)

    async def _require_login(self, request: Request, next: StepNext) -> Response | Redirect:
        if get_user().is_authenticated:
            return await next(request)
        return Redirect(self.login_url)

    async def _redirect_if_authenticated(
        self, request: Request, next: StepNext
    ) -> Response | Redirect:
        if get_user().is_authenticated:
            return Redirect(self.home_url)
        return await next(request)
